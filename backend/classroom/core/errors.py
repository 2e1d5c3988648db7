"""Error Hierarchy — typed, categorized exceptions for every classroom failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Errors are raised values, never log calls — handlers log them separately
    - to_response() produces REST envelope; to_extensions() produces GraphQL extensions
    - PartialCascadeFailureError always names the committed step and the failed step

Design Decisions:
    - Single hierarchy with ClassroomError base: GraphQL and FastAPI handlers catch all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from collections.abc import Awaitable, Callable
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    INTEGRITY = "integrity"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_type: str | None = None
    entity_id: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class ClassroomError(Exception):
    """Base exception for all classroom errors."""

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
                    "entity_type": self.context.entity_type,
                    "entity_id": self.context.entity_id,
                    "operation": self.context.operation,
                },
            }
        }

    def to_extensions(self) -> dict:
        """Convert to GraphQL error extensions."""
        return {
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class NotFoundError(ClassroomError):
    """Referenced entity does not exist."""
    def __init__(
        self, entity_type: str, entity_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity_type = entity_type
        ctx.entity_id = entity_id
        super().__init__(
            f"{entity_type} '{entity_id}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidArgumentError(ClassroomError):
    """Malformed identity or missing/invalid required field."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


# ─── Integrity Errors (500-level) ───────────────────────────────

class DanglingReferenceError(ClassroomError):
    """Stored reference points to a document that no longer exists."""
    def __init__(
        self,
        owner_type: str,
        owner_id: str,
        field: str,
        target_id: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity_type = owner_type
        ctx.entity_id = owner_id
        super().__init__(
            f"{owner_type} '{owner_id}' references missing "
            f"{field} '{target_id}'",
            "DANGLING_REFERENCE", ErrorCategory.INTEGRITY,
            ErrorSeverity.ERROR, ctx, 500,
        )
        self.field = field
        self.target_id = target_id


class PartialCascadeFailureError(ClassroomError):
    """Multi-step cascade committed its first write but failed a later one.

    The committed write is NOT rolled back. `resume` (when set) re-runs only
    the remaining idempotent steps; retry wrappers call it instead of
    replaying the whole operation.
    """
    def __init__(
        self,
        operation: str,
        committed_step: str,
        failed_step: str,
        cause: Exception | None = None,
        resume: Callable[[], Awaitable[Any]] | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            f"{operation}: '{committed_step}' committed but "
            f"'{failed_step}' failed",
            "PARTIAL_CASCADE_FAILURE", ErrorCategory.INTEGRITY,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.operation = operation
        self.committed_step = committed_step
        self.failed_step = failed_step
        self.cause = cause
        self.resume = resume


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(ClassroomError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
