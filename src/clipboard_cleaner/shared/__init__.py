"""Shared configuration, error, result and logging utilities.

This module provides the configuration data model, the error hierarchy,
result objects and the correlation-aware logger used across all layers.
"""

from .config import (
    ActionDefinition,
    ActionKind,
    CharacterFilterDefinition,
    CharacterRange,
    Config,
    FilterReference,
    InlineFilter,
    TransformationDefinition,
    TransformationProfile,
)
from .errors import (
    CleanerError,
    ConfigError,
    ConfigNotFoundError,
    PatternSyntaxError,
    UnknownFilterReference,
)
from .logging import CorrelationLogger, get_logger
from .result import DiagnosticEntry, DiagnosticSeverity, SanitizeResult

__all__ = [
    "ActionDefinition",
    "ActionKind",
    "CharacterFilterDefinition",
    "CharacterRange",
    "Config",
    "FilterReference",
    "InlineFilter",
    "TransformationDefinition",
    "TransformationProfile",
    "CleanerError",
    "ConfigError",
    "ConfigNotFoundError",
    "PatternSyntaxError",
    "UnknownFilterReference",
    "CorrelationLogger",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "SanitizeResult",
]
