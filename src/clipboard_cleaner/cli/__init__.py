"""Command-line interface for Clipboard Cleaner.

Sanitizes clipboard dumps from files or stdin, lists configured profiles and
resolves clipboard target names to charsets.
"""

from .main import main

__all__ = ["main"]
