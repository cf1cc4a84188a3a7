"""Error Hierarchy — typed, categorized exceptions for all intake failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Caller-input errors (400-level) carry a RejectionReason and field-level details
    - Infrastructure errors (500-level) carry no reason; StoreUnavailable is retryable
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with IntakeError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Validation and date errors are never retried or swallowed; they are caller problems
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from tripintake.core.domain_types import RejectionReason
from tripintake.core.validation_result import FieldError


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RATE_LIMIT = "rate_limit"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    identity: str | None = None
    trip_id: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_seconds: int | None = None


class IntakeError(Exception):
    """Base exception for all intake errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        reason: RejectionReason | None = None,
        details: tuple[FieldError, ...] = (),
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.reason = reason
        self.details = details

    @property
    def retryable(self) -> bool:
        return False

    def headers(self) -> dict[str, str]:
        """Extra HTTP headers for the rejection response."""
        return {}

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "reason": self.reason.value if self.reason else None,
                "retryable": self.retryable,
                "details": [d.to_dict() for d in self.details],
                "context": {
                    "identity": self.context.identity,
                    "trip_id": self.context.trip_id,
                    "retry_after_seconds": self.context.retry_after_seconds,
                },
            }
        }


def _summarize(errors: tuple[FieldError, ...]) -> str:
    return "; ".join(f"{e.field}: {e.message}" for e in errors)


# ─── Caller-input Errors (400-level) ────────────────────────────

class StructuralValidationError(IntakeError):
    """Envelope violates the declarative rule tree."""
    def __init__(self, errors: tuple[FieldError, ...], context: ErrorContext | None = None):
        super().__init__(
            _summarize(errors), "VALIDATION_FAILED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
            RejectionReason.VALIDATION_FAILED, tuple(errors),
        )
        self.errors = tuple(errors)


class CrossFieldValidationError(IntakeError):
    """Structurally sound envelope violates a multi-field business invariant."""
    def __init__(self, errors: tuple[FieldError, ...], context: ErrorContext | None = None):
        super().__init__(
            _summarize(errors), "CROSS_FIELD_VALIDATION_FAILED",
            ErrorCategory.BUSINESS_RULE, ErrorSeverity.ERROR, context, 400,
            RejectionReason.VALIDATION_FAILED, tuple(errors),
        )
        self.errors = tuple(errors)


class DateParseError(IntakeError):
    """A date string could not be turned into an instant, or dates are out of order."""
    def __init__(
        self,
        value: Any,
        reason: str,
        field: str | None = None,
        context: ErrorContext | None = None,
    ):
        label = field or "date"
        super().__init__(
            f"Invalid date format: {label}: {reason}", "INVALID_DATES",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, context, 400,
            RejectionReason.INVALID_DATES,
            (FieldError(label, reason, "date", value),),
        )
        self.value = value
        self.reason_text = reason
        self.field = field

    def for_field(self, field: str) -> "DateParseError":
        """Re-tag this error with the envelope field it came from."""
        return DateParseError(self.value, self.reason_text, field, self.context)


class RateLimitExceededError(IntakeError):
    """Identity already used its daily submission allowance."""
    def __init__(
        self,
        identity: str,
        resets_on: date,
        retry_after_seconds: int,
        ceiling: int,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.identity = identity
        ctx.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Daily submission limit reached ({ceiling} submissions per day). "
            f"Resets on {resets_on.isoformat()}.",
            "RATE_LIMITED", ErrorCategory.RATE_LIMIT, ErrorSeverity.WARNING,
            ctx, 429, RejectionReason.RATE_LIMITED,
        )
        self.identity = identity
        self.resets_on = resets_on
        self.retry_after_seconds = retry_after_seconds

    def headers(self) -> dict[str, str]:
        return {"Retry-After": str(self.retry_after_seconds)}


class AuthenticationError(IntakeError):
    """Caller could not be identified."""
    def __init__(
        self, message: str, code: str = "UNAUTHENTICATED",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )

    def headers(self) -> dict[str, str]:
        return {"WWW-Authenticate": "Bearer"}


class PermissionDeniedError(IntakeError):
    """Caller is identified but lacks the required role."""
    def __init__(self, message: str = "Admin access required", context: ErrorContext | None = None):
        super().__init__(
            message, "PERMISSION_DENIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(IntakeError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreUnavailableError(IntakeError):
    """Document store failed or timed out. Transient: the caller may retry."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Document store {operation} failed: {message}",
            "STORE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation

    @property
    def retryable(self) -> bool:
        return True


class NotificationError(IntakeError):
    """Outbound mail provider call failed. Logged and suppressed by the notifier."""
    def __init__(
        self,
        message: str,
        provider_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Mail provider error ({provider_error_type}): {message}",
            "NOTIFICATION_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, context, 502,
        )
        self.provider_error_type = provider_error_type
        self.retry_after_ms = retry_after_ms


class SchemaCompileError(IntakeError):
    """Rule definition is malformed, cyclic, or references an unknown fragment."""
    def __init__(self, message: str, path: str = ""):
        super().__init__(
            f"{path or '<root>'}: {message}", "SCHEMA_COMPILE_ERROR",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL, None, 500,
        )
        self.path = path
