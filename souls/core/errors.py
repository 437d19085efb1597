"""Error Hierarchy — typed, categorized exceptions for all Souls failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Closed taxonomy: validation, not found, conflict, auth, state, storage,
      plus CorruptCredentialError for malformed stored credentials
    - to_response() produces the REST envelope
    - Messages never contain passwords, salts, or hashes

Design Decisions:
    - Single hierarchy with SoulsError base: FastAPI global handler catches all (ADR: uniform error shape)
    - Concrete failures subclass a taxonomy class so callers can catch broadly
      (ConflictError) or narrowly (DuplicateRelationshipError)
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    AUTH = "auth"
    STATE = "state"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    soul_name: str | None = None
    target_name: str | None = None
    action: str | None = None
    debug_info: dict[str, Any] | None = None


class SoulsError(Exception):
    """Base exception for all Souls errors."""

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
                    "soul_name": self.context.soul_name,
                    "target_name": self.context.target_name,
                    "action": self.context.action,
                },
            }
        }


# ─── Taxonomy ───────────────────────────────────────────────────

class ValidationError(SoulsError):
    """Missing, empty, or unrecognized input parameters."""
    def __init__(
        self, message: str, field: str, code: str = "VALIDATION_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class NotFoundError(SoulsError):
    """Identity or relationship target absent."""
    def __init__(
        self, message: str, code: str = "RESOURCE_NOT_FOUND",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ConflictError(SoulsError):
    """Duplicate name on create, duplicate edge on add."""
    def __init__(
        self, message: str, code: str = "CONFLICT",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class AuthError(SoulsError):
    """Credential verification failed."""
    def __init__(
        self, message: str, code: str = "AUTH_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTH,
            ErrorSeverity.WARNING, context, 401,
        )


class StateError(SoulsError):
    """Transition not allowed from the current edge state."""
    def __init__(
        self, message: str, code: str = "STATE_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.STATE,
            ErrorSeverity.ERROR, context, 409,
        )


class StorageError(SoulsError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class CorruptCredentialError(SoulsError):
    """Stored credential is missing its salt or hash, or is not decodable."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Stored credential is corrupt: {reason}",
            "CORRUPT_CREDENTIAL", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.reason = reason


# ─── Concrete failures ──────────────────────────────────────────

class InvalidActionError(ValidationError):
    """Relationship action is not one of the recognized actions."""
    def __init__(self, action: object, context: ErrorContext | None = None):
        super().__init__(
            f"Action '{action}' is invalid.", "action",
            "INVALID_ACTION", context,
        )
        self.action = action


class SoulNotFoundError(NotFoundError):
    """No soul stored under this name."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(soul_name=name)
        super().__init__(f"Soul '{name}' not found", "SOUL_NOT_FOUND", ctx)
        self.name = name


class TargetNotFoundError(NotFoundError):
    """Relationship target does not exist."""
    def __init__(self, target: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(target_name=target)
        super().__init__(
            f"Target soul '{target}' does not exist", "TARGET_NOT_FOUND", ctx,
        )
        self.target = target


class SoulAlreadyExistsError(ConflictError):
    """A soul with this name is already stored."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(soul_name=name)
        super().__init__(
            f"Soul '{name}' already exists", "SOUL_ALREADY_EXISTS", ctx,
        )
        self.name = name


class DuplicateRelationshipError(ConflictError):
    """Target is already in the actor's set for this relationship kind."""
    def __init__(self, target: str, kind: str, context: ErrorContext | None = None):
        super().__init__(
            f"Soul '{target}' is already in your {kind} list",
            "DUPLICATE_RELATIONSHIP", context,
        )
        self.target = target
        self.kind = kind


class PasswordMismatchError(AuthError):
    """Candidate password does not match the stored credential."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__("Mismatched password", "PASSWORD_MISMATCH", context)


class RelationshipNotFoundError(StateError):
    """Target is not in the actor's set for this relationship kind."""
    def __init__(self, target: str, kind: str, context: ErrorContext | None = None):
        super().__init__(
            f"Soul '{target}' is not in your {kind} list",
            "RELATIONSHIP_NOT_FOUND", context,
        )
        self.target = target
        self.kind = kind
