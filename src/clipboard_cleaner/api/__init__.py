"""Engine-facing API: compiled profile sets and the sanitizing pipeline."""

from .sanitizer import ClipboardSanitizer, ProfileSet, apply

__all__ = ["ClipboardSanitizer", "ProfileSet", "apply"]
