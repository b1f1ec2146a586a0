"""Result objects and diagnostic types for clipboard sanitization."""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()    # Text was produced but altered for display
    ERROR = auto()      # No text could be produced


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
            "details": self.details or {},
        }


@dataclass
class SanitizeResult:
    """Outcome of sanitizing one clipboard buffer.

    Attributes:
        text: Sanitized text, or None if the bytes could not be decoded
        charset: Charset label used for decoding (None if none could be resolved)
        profile: Name of the transformation profile that was applied
        display_text: Decoded text after the control-character display pass
        control_chars_found: Whether the decoded text contained control characters
        diagnostics: Messages for the user, in the order they were raised
        correlation_id: ID shared by all log records of this run
    """

    text: Optional[str]
    charset: Optional[str]
    profile: Optional[str] = None
    display_text: Optional[str] = None
    control_chars_found: bool = False
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    correlation_id: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.text is not None

    @property
    def message(self) -> str:
        """Most severe diagnostic message, or an empty string."""
        if not self.diagnostics:
            return ""
        worst = max(self.diagnostics, key=lambda entry: entry.severity.value)
        return worst.message

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "text": self.text,
            "charset": self.charset,
            "profile": self.profile,
            "control_chars_found": self.control_chars_found,
            "diagnostics": [entry.to_dict() for entry in self.diagnostics],
        }
