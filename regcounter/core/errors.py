"""Error Hierarchy — typed, categorized exceptions for all regcounter failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client mistakes and transient lifecycle states (bad date, engine not READY) carry
      WARNING; recoverable errors (file read, roster, publish, corrupt state) carry
      WARNING/ERROR; configuration errors that must stop startup carry CRITICAL
    - to_response() produces the REST envelope used by the API error handlers
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with RegCounterError base: one global handler catches all
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
    CONFIGURATION = "configuration"
    STATE = "state"
    STORAGE = "storage"
    EXTERNAL = "external"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    date_key: str | None = None
    path: str | None = None
    line_number: int | None = None
    debug_info: dict[str, Any] | None = None


class RegCounterError(Exception):
    """Base exception for all regcounter errors."""

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
                    "date": self.context.date_key,
                },
            }
        }


# ─── Domain Errors ──────────────────────────────────────────────

class InvalidDateError(RegCounterError):
    """A date argument is not an ISO calendar day."""
    def __init__(self, value: str, context: ErrorContext | None = None):
        super().__init__(
            f"'{value}' is not a calendar day (expected YYYY-MM-DD)",
            "INVALID_DATE", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.value = value


class EngineStateError(RegCounterError):
    """Operation invoked in a lifecycle state that does not allow it."""
    def __init__(
        self, operation: str, state: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot {operation} while engine is {state}",
            "ENGINE_STATE", ErrorCategory.STATE,
            ErrorSeverity.WARNING, context, 503,
        )
        self.operation = operation
        self.state = state


class CorruptPersistedStateError(RegCounterError):
    """Persisted aggregate is structurally malformed. Triggers a full rebuild."""
    def __init__(
        self, reason: str, line_number: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.line_number = line_number
        where = f" (line {line_number})" if line_number is not None else ""
        super().__init__(
            f"Persisted state is corrupt{where}: {reason}",
            "CORRUPT_PERSISTED_STATE", ErrorCategory.STORAGE,
            ErrorSeverity.WARNING, ctx, 500,
        )
        self.reason = reason


# ─── Infrastructure Errors ──────────────────────────────────────

class LogFolderMissingError(RegCounterError):
    """Configured log folder is missing or cannot be listed. Fatal at startup."""
    def __init__(
        self, folder: str, reason: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.path = folder
        detail = f"cannot be listed: {reason}" if reason else "does not exist or is not a directory"
        super().__init__(
            f"Log folder '{folder}' {detail}",
            "LOG_FOLDER_MISSING", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.folder = folder


class LogFileReadError(RegCounterError):
    """A single log file could not be opened or read. The file is skipped."""
    def __init__(self, path: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.path = path
        super().__init__(
            f"Failed to read log file {path}: {reason}",
            "LOG_FILE_READ", ErrorCategory.STORAGE,
            ErrorSeverity.WARNING, ctx, 500,
        )
        self.path = path


class PersistedStateUnavailableError(RegCounterError):
    """Persisted state file could not be read or written."""
    def __init__(
        self, path: str, operation: str, reason: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.path = path
        super().__init__(
            f"Persisted state {operation} failed for {path}: {reason}",
            "PERSISTED_STATE_IO", ErrorCategory.STORAGE,
            ErrorSeverity.ERROR, ctx, 500,
        )
        self.operation = operation


class RosterUnavailableError(RegCounterError):
    """Administrator roster could not be fetched. Counts stay unfiltered."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Administrator roster unavailable: {message}",
            "ROSTER_UNAVAILABLE", ErrorCategory.EXTERNAL,
            ErrorSeverity.WARNING, context, 503,
        )


class ReportPublishError(RegCounterError):
    """Report publisher failed to deliver a daily report."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Report publish failed: {message}",
            "REPORT_PUBLISH_FAILED", ErrorCategory.EXTERNAL,
            ErrorSeverity.ERROR, context, 502,
        )
