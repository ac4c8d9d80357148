"""Exception hierarchy for Arch Guardian."""

from .base import GuardianError
from .config import ConfigurationError, InvalidConfigError
from .taxonomy import (
    DetectorError,
    DetectorTimeoutError,
    DuplicateRegistrationError,
    ErrorCode,
    GovernanceError,
    InputFormatError,
    InvariantViolationError,
    RegistryError,
    RuleLoadError,
)

__all__ = [
    "GuardianError",
    "ConfigurationError",
    "InvalidConfigError",
    "ErrorCode",
    "GovernanceError",
    "RegistryError",
    "DuplicateRegistrationError",
    "RuleLoadError",
    "InputFormatError",
    "DetectorError",
    "DetectorTimeoutError",
    "InvariantViolationError",
]
