from __future__ import annotations

from . import config
from .error_codes import ErrorCode
from .logging_utils import _scraper_event


def decide_transient_retry(
    attempt_index: int,
    max_attempts: int,
    *,
    page_index: int | None = None,
) -> bool:
    """Decide whether a transient alert should trigger another reload.

    ``attempt_index`` is the 1-based count of alerts seen so far on the page.
    ``max_attempts <= 0`` never caps, which matches the site's behaviour of
    eventually serving the table.
    """

    if config.is_unbounded_retry(max_attempts):
        _scraper_event(
            "state",
            phase="retry_decision",
            kind="unbounded",
            error_code=ErrorCode.TRANSIENT_ALERT,
            attempt=attempt_index,
            page_index=page_index,
            will_retry=True,
        )
        return True

    will_retry = attempt_index <= max_attempts
    _scraper_event(
        "state",
        phase="retry_decision",
        kind="retryable" if will_retry else "capped",
        error_code=ErrorCode.TRANSIENT_ALERT,
        attempt=attempt_index,
        max_attempts=max_attempts,
        page_index=page_index,
        will_retry=will_retry,
    )
    return will_retry


__all__ = ["decide_transient_retry"]
