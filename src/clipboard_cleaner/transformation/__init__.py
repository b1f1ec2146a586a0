"""Replacement templates and compiled transformation profiles."""

from .engine import SimpleTransformation, TextTransformation, TransformationAction
from .patterns import PatternKind, ReplacementPattern, ReplacementTemplate

__all__ = [
    "PatternKind",
    "ReplacementPattern",
    "ReplacementTemplate",
    "SimpleTransformation",
    "TextTransformation",
    "TransformationAction",
]
