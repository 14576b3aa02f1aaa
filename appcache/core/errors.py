"""Error Hierarchy — typed, categorized exceptions for all cache failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Absence is never an error: there is no NotFoundError, lookups return None
    - UnavailableError is fatal for the process; StorageError is per-operation
    - to_dict() produces a log/transport-neutral envelope

Design Decisions:
    - Single hierarchy with AppCacheError base: callers catch one type (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - No retry metadata: the core never retries, retry policy belongs to the caller
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    STORAGE = "storage"
    UNAVAILABLE = "unavailable"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    scope: str | None = None
    app_id: str | None = None
    partition: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class AppCacheError(Exception):
    """Base exception for all app cache errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Convert to a structured error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "scope": self.context.scope,
                    "app_id": self.context.app_id,
                    "partition": self.context.partition,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Infrastructure Errors ──────────────────────────────────────

class UnavailableError(AppCacheError):
    """No persistent storage can be provided in this environment."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Persistent storage unavailable: {message}",
            "STORAGE_UNAVAILABLE", ErrorCategory.UNAVAILABLE,
            ErrorSeverity.CRITICAL, context,
        )


class StorageError(AppCacheError):
    """The storage engine rejected an operation."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.ERROR, ctx,
        )
        self.operation = operation
