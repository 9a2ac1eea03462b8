"""Batch pagination controller.

Pages are fetched in batches of ``batch_width`` consecutive indices. Every
page in a batch runs concurrently; batches run one after the other. There
is no page count to read from the site, so the run stops after the first
batch whose highest page returns fewer than ``page_size`` rows. A final page
holding exactly ``page_size`` rows is therefore followed by one more batch,
which comes back empty and ends the run.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Sequence

from . import config
from .error_codes import error_code_for
from .extraction import Record
from .logging_utils import _scraper_event, scoped_line
from .worker import PageResult

PageFetcher = Callable[[int], Awaitable[PageResult]]


@dataclass
class ScheduleResult:
    records: List[Record] = field(default_factory=list)
    batches: int = 0
    pages: int = 0
    recoveries: int = 0


def batch_indices(batch: int, batch_width: int) -> List[int]:
    """Return the 1-based page indices covered by 0-based ``batch``."""

    if batch < 0:
        raise ValueError(f"batch must be >= 0, got {batch}")
    if batch_width < 1:
        raise ValueError(f"batch_width must be >= 1, got {batch_width}")
    first = batch * batch_width + 1
    return list(range(first, first + batch_width))


def is_last_batch(results: Sequence[PageResult], page_size: int = config.PAGE_SIZE) -> bool:
    """Return ``True`` when the highest page of a batch came back short."""

    if not results:
        return True
    highest = max(results, key=lambda result: result.index)
    return len(highest.records) < page_size


async def run_batch(fetch: PageFetcher, indices: Sequence[int]) -> List[PageResult]:
    """Fetch every page in ``indices`` concurrently.

    Results come back in page-index order. If any page fails, the pages still
    in flight are cancelled (closing their tabs) and the failure of the
    lowest failing index is raised.
    """

    tasks = {index: asyncio.ensure_future(fetch(index)) for index in indices}
    if not tasks:
        return []

    done, pending = await asyncio.wait(
        tasks.values(), return_when=asyncio.FIRST_EXCEPTION
    )

    failed = [
        index
        for index, task in tasks.items()
        if task in done and not task.cancelled() and task.exception() is not None
    ]
    if failed:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        first_failed = min(failed)
        exc = tasks[first_failed].exception()
        _scraper_event(
            "error",
            phase="batch",
            page_index=first_failed,
            failed_pages=sorted(failed),
            cancelled_pages=sum(1 for task in pending if task.cancelled()),
            error=error_code_for(exc),
        )
        raise exc

    return [tasks[index].result() for index in indices]


async def run_batches(
    fetch: PageFetcher,
    *,
    batch_width: int = config.DEFAULT_BATCH_WIDTH,
    page_size: int = config.PAGE_SIZE,
) -> ScheduleResult:
    """Fetch batches until the data runs out and aggregate their records."""

    result = ScheduleResult()
    batch = 0

    while True:
        indices = batch_indices(batch, batch_width)
        _scraper_event(
            "batch",
            step="start",
            batch=batch,
            first_page=indices[0],
            last_page=indices[-1],
        )

        page_results = await run_batch(fetch, indices)

        batch_records = 0
        for page_result in page_results:
            result.pages += 1
            result.recoveries += page_result.recoveries
            if not page_result.records:
                continue
            result.records.extend(page_result.records)
            batch_records += len(page_result.records)
            scoped_line(
                "batch",
                f"data: {len(page_result.records)} records",
                batch=batch,
                page_index=page_result.index,
            )

        result.batches += 1
        finished = is_last_batch(page_results, page_size)
        _scraper_event(
            "batch",
            step="end",
            batch=batch,
            records=batch_records,
            total_records=len(result.records),
            last_page_records=len(page_results[-1].records),
            finished=finished,
        )

        if finished:
            scoped_line("batch", "All records have been retrieved!", batch=batch)
            return result

        scoped_line("batch", "Not all records have been treated yet...", batch=batch)
        batch += 1


__all__ = [
    "PageFetcher",
    "ScheduleResult",
    "batch_indices",
    "is_last_batch",
    "run_batch",
    "run_batches",
]
