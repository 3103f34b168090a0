"""
Error taxonomy.

Every error the API surfaces derives from MarkPrintError, which carries the
HTTP status it maps to and a user-safe message. Internal detail belongs in
the server log, never in ``message`` or ``details``.
"""

from typing import Any


class MarkPrintError(Exception):
    """Base error with a stable code and HTTP status."""

    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if http_status is not None:
            self.http_status = http_status

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationFailedError(MarkPrintError):
    """Malformed or out-of-range request."""

    code = "VALIDATION_FAILED"
    http_status = 400


class UnknownThemeError(MarkPrintError):
    """Theme identifier outside the fixed set."""

    code = "UNKNOWN_THEME"
    http_status = 400

    def __init__(self, theme_id: str, http_status: int | None = None) -> None:
        super().__init__(
            f"Unknown theme: {theme_id}",
            details={"theme": theme_id},
            http_status=http_status,
        )
        self.theme_id = theme_id


class StylesheetLoadError(MarkPrintError):
    """Theme CSS missing or unreadable on disk."""

    code = "STYLESHEET_LOAD_FAILED"
    http_status = 500

    def __init__(self, theme_id: str) -> None:
        super().__init__(
            f'Failed to load stylesheet for theme "{theme_id}"',
            details={"theme": theme_id},
        )
        self.theme_id = theme_id


class RenderTimeoutError(MarkPrintError):
    """Content load or rasterization exceeded its time budget."""

    code = "RENDER_TIMEOUT"
    http_status = 408

    def __init__(self, phase: str, timeout_ms: int) -> None:
        super().__init__(
            f"PDF generation timed out while {phase}",
            details={"phase": phase, "timeout_ms": timeout_ms},
        )
        self.phase = phase
        self.timeout_ms = timeout_ms


class TooManyPendingError(MarkPrintError):
    """PDF admission queue is saturated."""

    code = "TOO_MANY_PENDING"
    http_status = 503

    def __init__(self, max_pending: int) -> None:
        super().__init__(
            "Too many pending PDF requests. Please try again later.",
            details={"max_pending": max_pending},
        )


class UploadError(MarkPrintError):
    """Bad upload: missing file, wrong extension or oversize."""

    code = "UPLOAD_INVALID"
    http_status = 400


class UploadTooLargeError(UploadError):
    code = "UPLOAD_TOO_LARGE"
    http_status = 413


class RenderFailedError(MarkPrintError):
    """Unexpected PDF failure; detail stays in the server log."""

    code = "RENDER_FAILED"
    http_status = 500

    def __init__(self) -> None:
        super().__init__("Failed to generate PDF. Please try again.")
