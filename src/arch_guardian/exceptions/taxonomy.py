"""Structured error taxonomy with error codes and recovery hints.

Error Code Convention:
    AG1xx - Registry errors
    AG2xx - Rule document errors
    AG3xx - Input document errors (snapshot, history, previous report)
    AG4xx - Detector errors
    AG5xx - Aggregation invariant errors
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Registry errors (AG1xx)
    AG100 = "AG100"  # Duplicate concept registration
    AG101 = "AG101"  # Duplicate layer registration
    AG102 = "AG102"  # Concept without authoritative source

    # Rule document errors (AG2xx)
    AG200 = "AG200"  # Rule document unreadable
    AG201 = "AG201"  # Rule document parse failed
    AG202 = "AG202"  # Rule document load timeout
    AG203 = "AG203"  # Rule document schema mismatch

    # Input document errors (AG3xx)
    AG300 = "AG300"  # Snapshot document malformed
    AG301 = "AG301"  # History document malformed
    AG302 = "AG302"  # Previous report malformed

    # Detector errors (AG4xx)
    AG400 = "AG400"  # Detector raised unexpectedly
    AG401 = "AG401"  # Detector timeout

    # Aggregation errors (AG5xx)
    AG500 = "AG500"  # Finding without source location


@dataclass
class GovernanceError(Exception):
    """Base exception with structured context for logging.

    Attributes:
        message: Human-readable error description
        code: Structured error code for categorization
        context: Additional context (file path, spec id, etc.)
        recoverable: Whether the analysis can continue past this error
        recovery_hint: Suggested fix for the user
    """

    message: str
    code: ErrorCode
    context: dict[str, Any] = field(default_factory=dict)
    recoverable: bool = True
    recovery_hint: str | None = None

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def to_json(self) -> dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": self.context,
            "recoverable": self.recoverable,
            "recovery_hint": self.recovery_hint,
        }


class RegistryError(GovernanceError):
    """Errors while building the concept and layer registries (AG1xx)."""

    pass


class DuplicateRegistrationError(RegistryError):
    """A concept or layer name was registered twice."""

    pass


class RuleLoadError(GovernanceError):
    """Errors while loading a rule document (AG2xx)."""

    pass


class InputFormatError(GovernanceError):
    """A snapshot, history or report document has the wrong shape (AG3xx)."""

    pass


class DetectorError(GovernanceError):
    """Errors raised while running a detector (AG4xx)."""

    pass


class DetectorTimeoutError(DetectorError):
    """A detector ran past its timeout."""

    pass


class InvariantViolationError(GovernanceError):
    """An internal invariant was broken during aggregation (AG5xx)."""

    def __post_init__(self) -> None:
        self.recoverable = False
        super().__post_init__()
