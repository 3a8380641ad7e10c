"""Error Hierarchy - typed, categorized exceptions for every Slop Guess failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Validation errors are raised before any side effect and are never retried
    - Conflict errors carry the expected and the observed round status
    - to_response() produces the REST envelope {"error": {"code", "message", ...}}
    - No provider secrets or SQL leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SlopGuessError base: the FastAPI handler catches all of it
    - ErrorContext as dataclass: ids for observability without coupling to logging
    - One ProviderError with a ProviderErrorType tag instead of a class per HTTP status
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
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    AUTHORIZATION = "authorization"


class ProviderErrorType(str, Enum):
    """Failure subtypes shared by the embedding, image and prompt providers."""
    TRANSPORT = "transport"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    BAD_REQUEST = "bad_request"
    REJECTED_CONTENT = "rejected_content"
    SERVER_ERROR = "server_error"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    round_id: str | None = None
    user_id: str | None = None
    attempt: int | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class SlopGuessError(Exception):
    """Base exception for all Slop Guess errors."""

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
                    "round_id": self.context.round_id,
                    "user_id": self.context.user_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Validation Errors (400-level) ──────────────────────────────

class GuessValidationError(SlopGuessError):
    """Guess text is empty or exceeds the configured maximum length."""
    def __init__(
        self, message: str, code: str = "INVALID_GUESS", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class InvalidDifficultyError(SlopGuessError):
    """Difficulty label has no configured word count."""
    def __init__(self, difficulty: str, known: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Unknown difficulty '{difficulty}' (expected one of: {', '.join(known)})",
            "INVALID_DIFFICULTY", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.difficulty = difficulty


class EmptyVectorError(SlopGuessError):
    """Similarity requested over a zero-length vector."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Cannot compute similarity of an empty vector",
            "EMPTY_VECTOR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class DimensionMismatchError(SlopGuessError):
    """Similarity requested over vectors of different lengths."""
    def __init__(self, left: int, right: int, context: ErrorContext | None = None):
        super().__init__(
            f"Vector dimension mismatch: {left} vs {right}",
            "DIMENSION_MISMATCH", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.left = left
        self.right = right


# ─── Not Found Errors (404) ─────────────────────────────────────

class ResourceNotFoundError(SlopGuessError):
    """Requested resource does not exist."""
    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        context: ErrorContext | None = None,
        code: str = "RESOURCE_NOT_FOUND",
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class RoundNotFoundError(ResourceNotFoundError):
    def __init__(self, round_id: Any, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.round_id = str(round_id)
        super().__init__("Round", str(round_id), ctx, code="ROUND_NOT_FOUND")


class NoActiveRoundError(SlopGuessError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No active round at the moment",
            "NO_ACTIVE_ROUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, context, 404,
        )


class NoWordsAvailableError(SlopGuessError):
    """Word bank could not supply any word for a new round."""
    def __init__(self, difficulty: str, context: ErrorContext | None = None):
        super().__init__(
            f"No words available in the word bank for difficulty '{difficulty}'",
            "NO_WORDS_AVAILABLE", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.CRITICAL, context, 404,
        )


# ─── Conflict Errors ────────────────────────────────────────────

class InvalidRoundTransitionError(SlopGuessError):
    """Activate on a non-pending round or complete on a non-active round."""
    def __init__(
        self,
        round_id: Any,
        action: str,
        current_status: str,
        expected_status: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.round_id = str(round_id)
        super().__init__(
            f"Cannot {action} round {round_id}: current status is "
            f"'{current_status}' (must be '{expected_status}')",
            "INVALID_ROUND_TRANSITION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )
        self.action = action
        self.current_status = current_status
        self.expected_status = expected_status


class ActiveRoundExistsError(SlopGuessError):
    """Another round already holds the active status."""
    def __init__(self, round_id: Any, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.round_id = str(round_id)
        super().__init__(
            f"Cannot activate round {round_id}: another round is already active",
            "ACTIVE_ROUND_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


class RoundNotActiveError(SlopGuessError):
    """Guess submitted against a round that is not accepting guesses."""
    def __init__(self, round_id: Any, current_status: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.round_id = str(round_id)
        super().__init__(
            f"Round is not accepting guesses (status is '{current_status}', must be 'active')",
            "ROUND_NOT_ACTIVE", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 400,
        )
        self.current_status = current_status


class DuplicateGuessError(SlopGuessError):
    """User already has a guess for the round."""
    def __init__(self, round_id: Any, user_id: Any, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.round_id = str(round_id)
        ctx.user_id = str(user_id)
        super().__init__(
            "You have already submitted a guess for this round",
            "DUPLICATE_GUESS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )


# ─── Boundary Errors (401/403) ──────────────────────────────────

class AuthenticationRequiredError(SlopGuessError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A user identity (X-User-Id header) is required",
            "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )


class AdminAccessDeniedError(SlopGuessError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Admin access denied",
            "ADMIN_ACCESS_DENIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(SlopGuessError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ProviderError(SlopGuessError):
    """External provider (embeddings, images, prompt rewriting) call failed."""
    def __init__(
        self,
        provider: str,
        error_type: ProviderErrorType,
        message: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
        status_code: int | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"{provider} error ({error_type.value}): {message}",
            "PROVIDER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.provider = provider
        self.error_type = error_type
        self.status_code = status_code


class ImageStorageError(ProviderError):
    """Image could not be downloaded or written to durable storage."""
    def __init__(
        self,
        message: str,
        error_type: ProviderErrorType = ProviderErrorType.TRANSPORT,
        context: ErrorContext | None = None,
    ):
        super().__init__("image_storage", error_type, message, context=context)
        self.code = "IMAGE_STORAGE_ERROR"


class RoundCreationFailedError(SlopGuessError):
    """Every round creation attempt failed; the previous round stays active."""
    def __init__(self, attempts: int, last_error: Exception, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.attempt = attempts
        super().__init__(
            f"Round creation failed after {attempts} attempts: {last_error}",
            "ROUND_CREATION_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.attempts = attempts
        self.last_error = last_error


class ConfigurationError(SlopGuessError):
    """Settings are inconsistent with the selected providers."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
