"""Single-page fetch: open, detect, extract, close."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from playwright.async_api import BrowserContext, Frame, Page

from . import config
from .detector import AlertSignal, PageOutcome, attach_dialog_handler, detect_outcome
from .error_codes import PageLoadError, error_code_for
from .extraction import TRANSACTION_FIELDS, FieldSpec, Record, extract_table
from .logging_utils import _scraper_event, scoped_line
from .selectors import DEFAULT_SELECTORS, TableSelectors


@dataclass
class PageResult:
    index: int
    outcome: PageOutcome
    records: List[Record] = field(default_factory=list)
    recoveries: int = 0


def page_url(
    page_index: int,
    *,
    base_url: Optional[str] = None,
    page_size: int = config.PAGE_SIZE,
) -> str:
    """Return the URL of 1-based ``page_index``.

    Page 1 is the bare base URL; later pages add ``?start=<row offset>``.
    """

    if page_index < 1:
        raise ValueError(f"page_index must be >= 1, got {page_index}")
    base = base_url or config.BASE_URL
    if page_index == 1:
        return base
    return f"{base}?start={(page_index - 1) * page_size}"


def snapshot_path(page_index: int, outcome: PageOutcome, directory: Path) -> Path:
    kind = "frame" if outcome is PageOutcome.FRAMED_TABLE_FOUND else "table"
    return Path(directory) / f"page_{page_index:05d}_{kind}.html"


async def _table_frame(page: Page, selectors: TableSelectors, page_index: int) -> Frame:
    """Return the ``fm`` frame once its table is in the frame's document."""

    frame = page.frame(name=selectors.frame_name)
    if frame is None:
        raise PageLoadError(
            f"Page {page_index} reported iframe {selectors.frame_name!r} but it is not attached",
            page_index=page_index,
        )
    # The iframe element can be attached while its document is still about:blank.
    await frame.wait_for_selector(selectors.frame_table_selector, state="attached")
    return frame


async def _save_snapshot(
    scope: Page | Frame, page_index: int, outcome: PageOutcome, directory: Path
) -> None:
    target = snapshot_path(page_index, outcome, directory)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(await scope.content(), encoding="utf-8")


async def fetch_page(
    context: BrowserContext,
    page_index: int,
    *,
    selectors: TableSelectors = DEFAULT_SELECTORS,
    fields: Sequence[FieldSpec] = TRANSACTION_FIELDS,
    base_url: Optional[str] = None,
    max_retries: Optional[int] = None,
    snapshot_dir: Optional[Path] = None,
) -> PageResult:
    """Load page ``page_index`` in its own tab and extract its rows.

    The tab is always closed, whether extraction succeeds or not. Errors are
    logged with the page index and re-raised. With ``snapshot_dir`` set, the
    HTML the rows were read from is saved there for offline replay.
    """

    url = page_url(page_index, base_url=base_url)
    page = await context.new_page()
    try:
        signal = AlertSignal()
        attach_dialog_handler(page, signal, page_index=page_index)

        _scraper_event("nav", step="goto", page_index=page_index, url=url)
        await page.goto(url)
        scoped_line("worker", f"Just opened: {url}", page_index=page_index)

        outcome, recoveries = await detect_outcome(
            page,
            signal,
            page_index=page_index,
            selectors=selectors,
            max_retries=max_retries,
        )
        scoped_line("worker", f"table ready, status: {outcome.value}", page_index=page_index)

        if outcome is PageOutcome.FRAMED_TABLE_FOUND:
            scope: Page | Frame = await _table_frame(page, selectors, page_index)
            rows_xpath = selectors.frame_rows_xpath
        else:
            scope = page
            rows_xpath = selectors.main_rows_xpath

        if snapshot_dir is not None:
            await _save_snapshot(scope, page_index, outcome, snapshot_dir)

        records = await extract_table(scope, rows_xpath, fields, page_index=page_index)
        return PageResult(
            index=page_index,
            outcome=outcome,
            records=records,
            recoveries=recoveries,
        )
    except Exception as exc:
        scoped_line("worker", f"failed: {type(exc).__name__}: {exc}", page_index=page_index)
        _scraper_event(
            "error",
            phase="worker",
            page_index=page_index,
            url=url,
            error=error_code_for(exc),
            error_repr=repr(exc),
        )
        raise
    finally:
        await page.close()


__all__ = ["PageResult", "page_url", "snapshot_path", "fetch_page"]
