"""Chromium lifecycle for a scrape run."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import BrowserContext, async_playwright

from . import config
from .utils import log_line


def launch_args(no_sandbox: bool) -> list[str]:
    return list(config.NO_SANDBOX_ARGS) if no_sandbox else []


@asynccontextmanager
async def open_browser_context(
    *,
    headless: Optional[bool] = None,
    no_sandbox: Optional[bool] = None,
) -> AsyncIterator[BrowserContext]:
    """Launch Chromium and yield one context shared by every worker.

    The context and the browser are closed on every exit path.
    """

    headless = config.HEADLESS if headless is None else headless
    no_sandbox = config.NO_SANDBOX if no_sandbox is None else no_sandbox

    async with async_playwright() as pw:
        log_line(f"[BROWSER] Launching Chromium (headless={headless}, no_sandbox={no_sandbox})")
        browser = await pw.chromium.launch(headless=headless, args=launch_args(no_sandbox))
        try:
            context = await browser.new_context()
            try:
                yield context
            finally:
                await context.close()
        finally:
            await browser.close()
            log_line("[BROWSER] Chromium closed.")


__all__ = ["launch_args", "open_browser_context"]
