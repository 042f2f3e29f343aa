"""Error Hierarchy — typed, categorized exceptions for all e-petitions failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with EPetitionsError base: one global handler catches all
    - RecordValidationError carries per-field messages, mirroring model validation
      ("can't be blank", "is too long (maximum is 50 characters)")
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


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
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    EXTERNAL_SERVICE = "external_service"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    petition_id: int | None = None
    signature_id: int | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class EPetitionsError(Exception):
    """Base exception for all e-petitions errors."""

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
        self.headers: dict[str, str] | None = None

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "petition_id": self.context.petition_id,
                    "signature_id": self.context.signature_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class RecordValidationError(EPetitionsError):
    """A record failed its validation rules."""
    def __init__(
        self, errors: dict[str, list[str]], context: ErrorContext | None = None,
    ):
        summary = "; ".join(
            f"{name} {msg}" for name, msgs in errors.items() for msg in msgs
        )
        super().__init__(
            f"Validation failed: {summary}",
            "RECORD_INVALID", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 422,
        )
        self.errors = errors

    def to_response(self) -> dict:
        body = super().to_response()
        body["error"]["fields"] = self.errors
        return body


class InvalidStateTransitionError(EPetitionsError):
    """Petition cannot move from its current state to the requested one."""
    def __init__(
        self, current: str, target: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot change petition from '{current}' to '{target}'",
            "INVALID_STATE_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.current = current
        self.target = target


class SigningClosedError(EPetitionsError):
    """Petition is not accepting signatures."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            reason, "SIGNING_CLOSED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class ResourceNotFoundError(EPetitionsError):
    """Requested resource does not exist (or is not visible in this state)."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class AuthenticationRequiredError(EPetitionsError):
    """Missing or wrong HTTP Basic credentials."""
    def __init__(self, realm: str, context: ErrorContext | None = None):
        super().__init__(
            "Authentication required", "AUTHENTICATION_REQUIRED",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, context, 401,
        )
        self.headers = {"WWW-Authenticate": f'Basic realm="{realm}"'}


class PasswordResetRequiredError(EPetitionsError):
    """Admin user must change their password before doing anything else."""
    def __init__(self, user_id: int, context: ErrorContext | None = None):
        super().__init__(
            "Password must be changed before continuing",
            "PASSWORD_RESET_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.user_id = user_id


class PermissionDeniedError(EPetitionsError):
    """Authenticated user lacks the role for this action."""
    def __init__(self, required_role: str, context: ErrorContext | None = None):
        super().__init__(
            f"This action requires the '{required_role}' role",
            "PERMISSION_DENIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class ServiceUnavailableError(EPetitionsError):
    """Site is disabled."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "The petitions site is currently unavailable",
            "SERVICE_UNAVAILABLE", ErrorCategory.SERVICE_UNAVAILABLE,
            ErrorSeverity.WARNING, context, 503,
        )


class DatabaseError(EPetitionsError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class MailDeliveryError(EPetitionsError):
    """Outgoing mail could not be handed to the mail server."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Mail delivery failed: {message}",
            "MAIL_DELIVERY_ERROR", ErrorCategory.EXTERNAL_SERVICE,
            ErrorSeverity.CRITICAL, context, 502,
        )
