"""Page load outcome detection.

A transactions page settles in one of three ways: the table is rendered in
the main document, the table is rendered inside the ``fm`` iframe, or the
site raises an "Oops! Something went wrong" alert. The alert arrives through
the page's dialog event, so the dialog callback and the waiting code meet in
an ``AlertSignal``. On an alert the "Reload Transactions" button is clicked
and the race starts again on the same page.
"""
from __future__ import annotations

import asyncio
from enum import Enum
from typing import Optional

from playwright.async_api import Dialog, Page

from . import config
from .error_codes import ErrorCode, RetryExhaustedError
from .logging_utils import _scraper_event, scoped_line
from .retry_policy import decide_transient_retry
from .selectors import DEFAULT_SELECTORS, TableSelectors


class PageOutcome(str, Enum):
    TABLE_FOUND = "MAIN_TABLE_FOUND"
    FRAMED_TABLE_FOUND = "IFRAME_FOUND"
    TRANSIENT_ERROR = "ALERT_DETECTED"


class AlertSignal:
    """One-shot signal raised by the dialog callback of a single page."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.occurrences = 0
        self.last_message: Optional[str] = None

    def set(self, message: Optional[str] = None) -> None:
        self.occurrences += 1
        self.last_message = message
        self._event.set()

    def clear(self) -> None:
        self._event.clear()

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> bool:
        return await self._event.wait()


def attach_dialog_handler(page: Page, signal: AlertSignal, *, page_index: int) -> None:
    """Dismiss every dialog on ``page``; alerts also raise ``signal``."""

    async def _on_dialog(dialog: Dialog) -> None:
        if dialog.type != "alert":
            scoped_line(
                "detect", f"dismissing {dialog.type} dialog: {dialog.message}", page_index=page_index
            )
            await dialog.dismiss()
            return

        scoped_line("detect", f"Got alert message: {dialog.message}", page_index=page_index)
        _scraper_event(
            "alert",
            page_index=page_index,
            message=dialog.message,
            occurrence=signal.occurrences + 1,
        )
        await dialog.dismiss()
        signal.set(dialog.message)

    page.on("dialog", _on_dialog)


async def race_outcome(
    page: Page,
    signal: AlertSignal,
    *,
    selectors: TableSelectors = DEFAULT_SELECTORS,
) -> PageOutcome:
    """Return whichever of table, framed table or alert shows up first.

    Losing waiters are cancelled. When several finish in the same loop
    iteration the table wins over the frame, and both win over the alert.
    """

    waiters = {
        asyncio.ensure_future(
            page.wait_for_selector(selectors.table_selector, state="attached")
        ): PageOutcome.TABLE_FOUND,
        asyncio.ensure_future(
            page.wait_for_selector(selectors.frame_selector, state="attached")
        ): PageOutcome.FRAMED_TABLE_FOUND,
        asyncio.ensure_future(signal.wait()): PageOutcome.TRANSIENT_ERROR,
    }

    try:
        done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for waiter in waiters:
            if not waiter.done():
                waiter.cancel()
        await asyncio.gather(*waiters, return_exceptions=True)

    for waiter, outcome in waiters.items():
        if waiter in done:
            # Re-raises the waiter's error (closed page, crashed browser).
            waiter.result()
            return outcome

    raise RuntimeError("race_outcome finished without a completed waiter")


async def detect_outcome(
    page: Page,
    signal: AlertSignal,
    *,
    page_index: int,
    selectors: TableSelectors = DEFAULT_SELECTORS,
    max_retries: Optional[int] = None,
) -> tuple[PageOutcome, int]:
    """Wait until the page shows its table, recovering from alerts.

    Returns the table outcome and how many alert recoveries it took.
    """

    cap = config.MAX_TRANSIENT_RETRIES if max_retries is None else max_retries
    recoveries = 0

    while True:
        outcome = await race_outcome(page, signal, selectors=selectors)
        _scraper_event(
            "detect",
            page_index=page_index,
            outcome=outcome.value,
            attempt=recoveries + 1,
        )
        if outcome is not PageOutcome.TRANSIENT_ERROR:
            return outcome, recoveries

        if not decide_transient_retry(recoveries + 1, cap, page_index=page_index):
            _scraper_event(
                "error",
                phase="detect",
                error=ErrorCode.RETRY_EXHAUSTED,
                page_index=page_index,
                recoveries=recoveries,
                max_retries=cap,
            )
            raise RetryExhaustedError(
                f"Page {page_index} still alerting after {recoveries} reloads",
                page_index=page_index,
            )

        signal.clear()
        scoped_line("detect", "reloading transactions after alert", page_index=page_index)
        await page.click(selectors.reload_button)
        recoveries += 1


__all__ = [
    "PageOutcome",
    "AlertSignal",
    "attach_dialog_handler",
    "race_outcome",
    "detect_outcome",
]
