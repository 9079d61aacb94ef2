"""Error Hierarchy — typed exceptions for every sidecar failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - str(error) is the exact text written to the HTTP response body
    - All HTTP-surfaced errors map to 500; "row not found" is a response, never an error

Design Decisions:
    - Single hierarchy with SidecarError base: one global handler catches all
    - with_context() prefixes the message ("healthcheck: <cause>") instead of
      nesting exception types, so callers see one flat line of text
"""

from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    DECODE = "decode"
    READER = "reader"
    LIMIT = "limit"
    TIMEOUT = "timeout"
    STARTUP = "startup"


class SidecarError(Exception):
    """Base exception for all sidecar errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.http_status = http_status

    def __str__(self) -> str:
        return self.message


# ─── Request Errors ─────────────────────────────────────────────

class DecodeError(SidecarError):
    """Request body is not a valid ReadRequest."""
    def __init__(self, message: str):
        super().__init__(
            f"decode body: {message}", "DECODE_ERROR", ErrorCategory.DECODE,
        )


class RowLimitExceededError(SidecarError):
    """Prefix scan produced more rows than the configured ceiling."""
    def __init__(self, max_rows: int):
        super().__init__(
            f"max row count ({max_rows}) exceeded",
            "ROW_LIMIT_EXCEEDED", ErrorCategory.LIMIT,
        )
        self.max_rows = max_rows


# ─── Collaborator Errors ────────────────────────────────────────

class ReaderError(SidecarError):
    """The Reader failed: lookup, scan iteration or ledger latency query."""
    def __init__(self, message: str):
        super().__init__(
            message, "READER_ERROR", ErrorCategory.READER,
            ErrorSeverity.CRITICAL,
        )

    def with_context(self, context: str) -> "ReaderError":
        return ReaderError(f"{context}: {self.message}")


class StartupError(SidecarError):
    """Binding or serving failed. Returned to the process, never over HTTP."""
    def __init__(self, message: str):
        super().__init__(
            f"listen and serve: {message}", "STARTUP_ERROR",
            ErrorCategory.STARTUP, ErrorSeverity.CRITICAL,
        )
