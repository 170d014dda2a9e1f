# File: admin_core/core/exceptions.py

from typing import Dict, Any, Optional
from datetime import datetime


class AdminCoreException(Exception):
    """Base exception for all admin core errors."""

    CODE = "GENERIC_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize an admin core exception.

        Args:
            message: Human-readable error message
            code: Optional machine-processable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or self.CODE
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "timestamp": datetime.now().isoformat(),
        }


class EntityNotFoundException(AdminCoreException):
    """Raised when a requested entity or entity group does not exist."""

    CODE = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            f"{entity_type} with ID {entity_id} not found",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


class ConflictException(AdminCoreException):
    """Raised when a write would break a uniqueness rule."""

    CODE = "CONFLICT"

    def __init__(self, entity_type: str, field: str, value: Any):
        super().__init__(
            f"{entity_type} with {field} '{value}' already exists",
            details={"entity_type": entity_type, "field": field, "value": value},
        )


class InvariantViolationException(AdminCoreException):
    """Raised when an operation would leave a collection in an invalid state."""

    CODE = "INVARIANT_VIOLATION"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class InUseException(AdminCoreException):
    """Raised when deleting records that are still referenced."""

    CODE = "IN_USE"

    def __init__(self, entity_type: str, entity_id: Any, use_count: int):
        super().__init__(
            f"{entity_type} {entity_id} is in use and cannot be deleted",
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "use_count": use_count,
            },
        )


class GenerationExhaustedException(AdminCoreException):
    """Raised when no free unique code could be drawn."""

    CODE = "GENERATION_EXHAUSTED"

    def __init__(self, entity_type: str, attempts: int):
        super().__init__(
            f"Unable to generate a unique code for {entity_type} after {attempts} attempts",
            details={"entity_type": entity_type, "attempts": attempts},
        )


class ConfigurationException(AdminCoreException):
    """Raised when required configuration or reference data is missing."""

    CODE = "CONFIGURATION_ERROR"


class ValidationException(AdminCoreException):
    """Raised when input fails a domain validation rule."""

    CODE = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        details = {}
        if field is not None:
            details["field"] = field
            details["value"] = value
        super().__init__(message, details=details)


class OperationFailedException(AdminCoreException):
    """Wraps unexpected storage errors with the name of the failing operation."""

    CODE = "OPERATION_FAILED"

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(
            f"Failed to {operation}: {message}",
            details={"operation": operation},
        )


class StorageException(AdminCoreException):
    """Raised when a file cannot be written to storage."""

    CODE = "STORAGE_ERROR"
