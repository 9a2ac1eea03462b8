"""Log lines scoped to the batch and page they concern.

Human-readable lines read ``[WORKER][page=3] Just opened ...``; structured
events read ``[SCRAPER][BATCH][batch=0] first_page=1, last_page=100``. Both
carry the same ``[batch=..][page=..]`` scope so one page can be followed
through a run with a single grep.
"""
from __future__ import annotations

from typing import Any, Optional

from .utils import log_line


def _scope(page_index: Optional[int], batch: Optional[int]) -> str:
    scope = ""
    if batch is not None:
        scope += f"[batch={batch}]"
    if page_index is not None:
        scope += f"[page={page_index}]"
    return scope


def scoped_line(
    component: str,
    message: str,
    *,
    page_index: Optional[int] = None,
    batch: Optional[int] = None,
) -> None:
    log_line(f"[{component.upper()}]{_scope(page_index, batch)} {message}")


def _scraper_event(
    label: str = "",
    *,
    phase: str | None = None,
    page_index: Optional[int] = None,
    batch: Optional[int] = None,
    **fields: Any,
) -> None:
    """Emit a structured ``[SCRAPER][<LABEL>]`` line with sorted ``key=repr`` fields.

    ``phase`` stands in for a missing label; next to a label it becomes a field.
    """

    try:
        if phase and label:
            fields.setdefault("phase", phase)
        event = (label or phase or "").upper()
        payload = ", ".join(f"{key}={value!r}" for key, value in sorted(fields.items()))
        log_line(f"[SCRAPER][{event}]{_scope(page_index, batch)} {payload}".rstrip())
    except Exception:
        # Never let logging break the scraper.
        return


__all__ = ["scoped_line", "_scraper_event"]
