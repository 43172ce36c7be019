"""Error Hierarchy — typed, categorized exceptions for all Going-Out failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are user-correctable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope with a stable machine-readable code
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with GoingOutError base: FastAPI global handler catches all
    - Intermediate classes (ValidationError, ConflictError, AuthorizationError) mirror
      the failure kinds callers branch on; leaf classes carry the exact code
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

# Retry hints surfaced to clients as Retry-After
CONFLICT_RETRY_AFTER_MS = 250
STORE_RETRY_AFTER_MS = 2_000


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logs and the response envelope."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    friendship_id: str | None = None
    venue_id: str | None = None
    scope: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class GoingOutError(Exception):
    """Base exception for all Going-Out errors."""

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
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "friendship_id": self.context.friendship_id,
                    "venue_id": self.context.venue_id,
                    "scope": self.context.scope,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(GoingOutError):
    """Missing or malformed input."""
    def __init__(
        self,
        message: str,
        field: str | None = None,
        code: str = "VALIDATION_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class MissingFieldError(ValidationError):
    """A required field was absent or blank."""
    def __init__(self, field: str, context: ErrorContext | None = None):
        super().__init__(
            f"Missing required field: {field}", field, "MISSING_FIELD", context,
        )


class InvalidRequestError(ValidationError):
    """Input is present but not acceptable (e.g. befriending yourself)."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(message, field, "INVALID_REQUEST", context)


class NotAuthenticatedError(GoingOutError):
    """No verified identity reached the core."""
    def __init__(
        self, message: str = "Not authenticated", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "NOT_AUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.ERROR, context, 401,
        )


class AuthorizationError(GoingOutError):
    """Acting user lacks rights over the target edge or plan."""
    def __init__(
        self, message: str, code: str = "AUTHORIZATION_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHORIZATION,
            ErrorSeverity.ERROR, context, 403,
        )


class NotAuthorizedError(AuthorizationError):
    """Only the addressee may act on a pending friend request."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "NOT_AUTHORIZED", context)


class ResourceNotFoundError(GoingOutError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(GoingOutError):
    """Write rejected because it would break a uniqueness or state invariant."""
    def __init__(
        self, message: str, code: str = "CONFLICT",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class DuplicateRequestError(ConflictError):
    """A friendship row already exists for the unordered pair."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Friend request already exists", "DUPLICATE_REQUEST", context,
        )


class InvalidStateError(ConflictError):
    """Transition not allowed from the record's current state."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "INVALID_STATE", context)


class ConcurrencyError(ConflictError):
    """Concurrent modification detected; the caller may retry."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        context = context or ErrorContext()
        if context.retry_after_ms is None:
            context.retry_after_ms = CONFLICT_RETRY_AFTER_MS
        super().__init__(message, "CONCURRENCY_CONFLICT", context)


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DependencyUnavailableError(GoingOutError):
    """Database operation failed or the store is unreachable."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        context = context or ErrorContext()
        if context.retry_after_ms is None:
            context.retry_after_ms = STORE_RETRY_AFTER_MS
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
