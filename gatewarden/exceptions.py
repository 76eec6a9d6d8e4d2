# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from typing import Optional, Any


class GateWardenException(Exception):
    """
    Base exception for all GateWarden errors.

    All custom exceptions should inherit from this.
    """
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for logging and callers."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class MalformedCurfewRuleError(GateWardenException):
    """Raised when a curfew rule carries fields that cannot be evaluated."""
    def __init__(self, curfew_id: Optional[str], reason: str):
        super().__init__(
            message=f"Curfew rule {curfew_id} is malformed: {reason}",
            error_code="malformed_curfew_rule",
            details={"curfew_id": curfew_id, "reason": reason},
        )


class MalformedCurfewExceptionError(GateWardenException):
    """Raised when a curfew exception record cannot be indexed."""
    def __init__(self, curfew_id: Optional[str], reason: str):
        super().__init__(
            message=f"Curfew exception for rule {curfew_id} is malformed: {reason}",
            error_code="malformed_curfew_exception",
            details={"curfew_id": curfew_id, "reason": reason},
        )


class SnapshotUnavailableError(GateWardenException):
    """
    Raised when no usable rule snapshot exists for a tenant.

    Callers should treat this as retryable.
    """
    def __init__(self, tenant_id: str, reason: str, retry_after: int = 5):
        super().__init__(
            message=f"Curfew snapshot unavailable for tenant {tenant_id}: {reason}",
            error_code="snapshot_unavailable",
            details={
                "tenant_id": tenant_id,
                "reason": reason,
                "retryable": True,
                "retry_after": retry_after,
            },
        )
        self.retry_after = retry_after

    @property
    def retryable(self) -> bool:
        return True


class ConfigurationError(GateWardenException):
    """Raised when configuration is invalid or missing."""
    def __init__(self, setting: str, reason: str):
        super().__init__(
            message=f"Configuration error for '{setting}': {reason}",
            error_code="configuration_error",
            details={
                "setting": setting,
                "reason": reason,
            },
        )


class DatabaseError(GateWardenException):
    """Raised when database operation fails."""
    def __init__(self, operation: str, reason: str):
        super().__init__(
            message=f"Database {operation} failed: {reason}",
            error_code="database_error",
            details={
                "operation": operation,
                "reason": reason,
            },
        )


class DatabaseConnectionError(DatabaseError):
    """Raised when database connection fails."""
    def __init__(self, reason: str):
        super().__init__("connection", reason)
