"""Error Hierarchy — typed, categorized exceptions for all task-board failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are reported synchronously and never retried
    - Infrastructure errors (500-level) surface as DATABASE_ERROR / INTERNAL_ERROR
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TaskBoardError base: FastAPI global handler catches all (uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    PERMISSION = "permission"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    board_id: str | None = None
    card_id: str | None = None
    team_id: str | None = None
    invite_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class TaskBoardError(Exception):
    """Base exception for all task-board errors."""

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
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "board_id": self.context.board_id,
                    "card_id": self.context.card_id,
                    "team_id": self.context.team_id,
                    "invite_id": self.context.invite_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(TaskBoardError):
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


class InvalidColumnError(TaskBoardError):
    """Column id is not part of the board's column set."""
    def __init__(self, column_ids: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Invalid column IDs: {', '.join(column_ids)}",
            "INVALID_COLUMN", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.column_ids = column_ids


class CardNotInColumnError(TaskBoardError):
    """Card id is absent from the source column's card order."""
    def __init__(self, card_id: str, column_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Card '{card_id}' not found in column '{column_id}'",
            "CARD_NOT_IN_COLUMN", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.card_id = card_id
        self.column_id = column_id


class ForbiddenError(TaskBoardError):
    """Caller lacks permission for the requested action."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, context, 403,
        )


class AuthenticationRequiredError(TaskBoardError):
    """No caller identity attached to the request."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authentication required", "AUTHENTICATION_REQUIRED",
            ErrorCategory.PERMISSION, ErrorSeverity.WARNING, context, 401,
        )


class DuplicateEmailError(TaskBoardError):
    """Another user already registered this email address."""
    def __init__(self, email: str, context: ErrorContext | None = None):
        super().__init__(
            f"A user with email '{email}' already exists",
            "DUPLICATE_EMAIL", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class AlreadyMemberError(TaskBoardError):
    """User already belongs to the team."""
    def __init__(self, user_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"User '{user_id}' is already a member of this team",
            "ALREADY_MEMBER", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class DuplicatePendingInviteError(TaskBoardError):
    """A pending invite already exists for this (team, invitee) pair."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "An invite is already pending for this user",
            "DUPLICATE_PENDING_INVITE", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class InviteAlreadyRespondedError(TaskBoardError):
    """Invite has reached a terminal state; no further transitions allowed."""
    def __init__(self, status: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invite already {status}",
            "ALREADY_IN_TERMINAL_STATE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 409,
        )
        self.status = status


class InvalidInviteActionError(TaskBoardError):
    """Response action is neither accept nor decline."""
    def __init__(self, action: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid action '{action}'. Allowed values are accept or decline",
            "INVALID_ACTION", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class ConcurrencyError(TaskBoardError):
    """Concurrent modification detected and retries exhausted."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(TaskBoardError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
