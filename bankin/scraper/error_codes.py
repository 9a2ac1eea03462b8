from __future__ import annotations

"""Error taxonomy for scraper failures.

Codes are included in structured ``error`` events so a failed run can be
explained from its log alone. Only transient alerts are recovered; every
other failure aborts the run.
"""

from typing import Optional


class ErrorCode:
    TRANSIENT_ALERT = "transient_alert"
    RETRY_EXHAUSTED = "retry_exhausted"
    NAVIGATION = "navigation_error"
    SITE_STRUCTURE = "site_structure_changed"
    EXTRACTION = "extraction_error"
    SERIALIZATION = "serialization_error"
    IO = "io_error"
    INTERNAL = "internal_error"


class ScrapeError(RuntimeError):
    """Base class for failures raised by the scraper itself."""

    code: str = ErrorCode.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        page_index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.page_index = page_index


class PageLoadError(ScrapeError):
    """The page (or its table sub-frame) cannot be used for extraction."""

    code = ErrorCode.SITE_STRUCTURE


class RetryExhaustedError(ScrapeError):
    """A configured transient-retry cap was reached for one page."""

    code = ErrorCode.RETRY_EXHAUSTED


class SinkError(ScrapeError):
    """Records could not be serialised or written to the output file."""

    code = ErrorCode.IO


def error_code_for(exc: BaseException) -> str:
    """Return the taxonomy code that best describes ``exc``."""

    if isinstance(exc, ScrapeError):
        return exc.code
    # Dead pages and failed navigations raise playwright Error/TimeoutError.
    if type(exc).__module__.startswith("playwright"):
        return ErrorCode.NAVIGATION
    if isinstance(exc, OSError):
        return ErrorCode.IO
    return ErrorCode.INTERNAL


__all__ = [
    "ErrorCode",
    "ScrapeError",
    "PageLoadError",
    "RetryExhaustedError",
    "SinkError",
    "error_code_for",
]
