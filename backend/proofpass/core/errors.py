"""Error Hierarchy — typed, categorized exceptions for all ProofPass failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are stable, repeatable outcomes for the same input
    - Collaborator failures (store, cache, RPC, mail) surface as InternalError subclasses
    - to_response() never includes raw driver messages

Design Decisions:
    - Single hierarchy with ProofPassError base: FastAPI global handler catches all
    - Conflict maps to 400: the public HTTP contract has no 409 for these routes
    - ErrorContext carries the operation name and identifiers for logs, not for clients
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    INVALID_REQUEST = "invalid_request"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Operation name and identifiers attached to an error for logging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    user_id: str | None = None
    event_id: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_seconds: int | None = None


class ProofPassError(Exception):
    """Base exception for all ProofPass errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        if self.context.retry_after_seconds is not None:
            body["retry_after_seconds"] = self.context.retry_after_seconds
        return {"error": body}

    def log_extra(self) -> dict:
        """Structured fields for logger.*(extra=...)."""
        return {
            "error_code": self.code,
            "op": self.context.operation,
            "user_id": self.context.user_id,
            "event_id": self.context.event_id,
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(ProofPassError):
    """Malformed or missing input field."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class UnauthorizedError(ProofPassError):
    """Missing/invalid session, wrong admin code, or wrong one-time code."""
    def __init__(
        self, message: str = "Unauthorized", code: str = "UNAUTHORIZED",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.UNAUTHORIZED,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidTokenError(UnauthorizedError):
    """Session token has a bad signature, bad structure, or is expired."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__("Invalid token", "INVALID_TOKEN", context)
        self.reason = reason


class ResourceNotFoundError(ProofPassError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.resource_type = resource_type


class ConflictError(ProofPassError):
    """The operation would duplicate or overwrite state that is write-once."""
    def __init__(
        self, message: str, code: str = "CONFLICT", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 400,
        )


class AlreadyRecordedError(ConflictError):
    """Attendance for this (event, nullifier) pair already exists."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Attendance has already been recorded for this nullifier",
            "ALREADY_RECORDED", context,
        )


class RateLimitedError(ProofPassError):
    """A one-time code is still pending for this email."""
    def __init__(self, retry_after_seconds: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.retry_after_seconds = retry_after_seconds
        super().__init__(
            "Code has already been sent. Please request a new code after "
            f"{retry_after_seconds} seconds.",
            "RATE_LIMITED", ErrorCategory.RATE_LIMITED,
            ErrorSeverity.INFO, ctx, 429,
        )


class InvalidRequestError(ProofPassError):
    """Credential type or other claim attribute is not acceptable."""
    def __init__(
        self, message: str, code: str = "INVALID_REQUEST", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.INVALID_REQUEST,
            ErrorSeverity.WARNING, context, 400,
        )


class InvalidContextError(InvalidRequestError):
    """Credential context does not match the event's context id."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__("Invalid credential context", "INVALID_CONTEXT", context)


# ─── Infrastructure Errors (500-level) ──────────────────────────

class InternalError(ProofPassError):
    """A collaborator failed; details are logged, not returned."""
    def __init__(
        self, message: str = "Internal error", code: str = "INTERNAL_ERROR",
        category: ErrorCategory = ErrorCategory.INTERNAL,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, category, ErrorSeverity.CRITICAL, context, 500,
        )


class DatabaseError(InternalError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE, context,
        )
        self.operation = operation


class CollaboratorError(InternalError):
    """Issuer, context registry, cache or mail call failed."""
    def __init__(self, collaborator: str, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"{collaborator} call failed: {message}",
            "COLLABORATOR_ERROR", ErrorCategory.EXTERNAL_API, context,
        )
        self.collaborator = collaborator


class OperationTimeoutError(ProofPassError):
    """A collaborator call exceeded its deadline."""
    def __init__(self, collaborator: str, timeout_seconds: float, context: ErrorContext | None = None):
        super().__init__(
            f"{collaborator} call timed out after {timeout_seconds}s",
            "OPERATION_TIMEOUT", ErrorCategory.TIMEOUT,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.collaborator = collaborator
