"""Custom exceptions for UAIntel.

Provides a hierarchy of exceptions with stable error codes
and structured error payloads.
"""

from typing import Any


class UAIntelError(Exception):
    """Base exception for all UAIntel errors."""

    error_code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize exception with optional details.

        Args:
            message: Human-readable error message.
            details: Additional error details for debugging.
            cause: Original exception that caused this error.
        """
        self.message = message or self.message
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# Caller errors
class ValidationError(UAIntelError):
    """Call validation failed."""

    error_code = "VALIDATION_ERROR"
    message = "Call validation failed"


class InvalidInputError(ValidationError):
    """Unsupported parser input."""

    error_code = "INVALID_INPUT"
    message = "set() expects a mapping having only ip and/or ua keys"


# Dataset errors
class DatasetError(UAIntelError):
    """Reference dataset problem."""

    error_code = "DATASET_ERROR"
    message = "Reference dataset error"


class DatasetIntegrityError(DatasetError):
    """Dataset failed load-time validation."""

    error_code = "DATASET_INTEGRITY"
    message = "Reference dataset is corrupt"


class PatternCompileError(DatasetIntegrityError):
    """A vendor pattern could not be translated."""

    error_code = "PATTERN_COMPILE"
    message = "Pattern could not be compiled"


class DatasetUnavailableError(DatasetError):
    """Dataset is not loaded or cannot be read."""

    error_code = "DATASET_UNAVAILABLE"
    message = "Database not ready"


class ConfigurationError(UAIntelError):
    """Configuration error."""

    error_code = "CONFIGURATION_ERROR"
    message = "Service configuration error"
