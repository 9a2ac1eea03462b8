"""Playwright scraper for the paginated transactions table.

Workflow:

- Launch one headless Chromium context for the whole run.
- Open ``N`` tabs at once, one per page index (``?start=(index-1)*50``).
- In each tab, wait for the table, the ``fm`` iframe, or the "Oops!" alert;
  on the alert click "Reload Transactions" and wait again.
- Extract the rows, close the tab.
- Keep going batch after batch until the highest page of a batch has fewer
  than 50 rows, then write every record to one JSON file.

Usage::

    python main.py
    python main.py --pages=100

Deployments that need a fixed output path, a retry cap, a sandbox-less
Chromium or page snapshots call ``run_scrape`` with the matching keyword
arguments.
"""

from __future__ import annotations

import argparse
import asyncio
import math
import re
import time
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import List, Optional

from . import config
from .browser import open_browser_context
from .config_validation import validate_runtime_config
from .error_codes import error_code_for
from .logging_utils import _scraper_event
from .scheduler import run_batches
from .sink import default_target, save_records
from .utils import ensure_dirs, format_duration, log_line, setup_run_logger
from .worker import fetch_page

# Option values that count as numbers on the command line: 100, 1e3, 2.5, .5, 0x40.
_NUMBER = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[-+]?\d+)?")
_HEX_NUMBER = re.compile(r"0x[0-9a-f]+", re.IGNORECASE)
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class RunSummary:
    output_path: Path
    log_path: Path
    records: int
    batches: int
    pages: int
    recoveries: int
    elapsed_seconds: float


def _numeric_value(raw: str) -> Optional[float]:
    if _HEX_NUMBER.fullmatch(raw):
        return float(int(raw, 16))
    if _NUMBER.fullmatch(raw):
        return float(raw)
    match = _LEADING_INT.match(raw)
    return float(match.group(1)) if match else None


def parse_batch_width(raw: Optional[str]) -> int:
    """Turn the ``--pages`` value into a batch width.

    Numeric values are read as numbers and truncated (``"1e3"`` -> 1000,
    ``"2.9"`` -> 2); other values keep their leading digits (``"12abc"`` -> 12).
    Anything missing, non-numeric or below 1 falls back to ``DEFAULT_BATCH_WIDTH``.
    """

    if raw is None:
        return config.DEFAULT_BATCH_WIDTH
    value = _numeric_value(str(raw))
    if value is None or not math.isfinite(value):
        return config.DEFAULT_BATCH_WIDTH
    width = int(value)
    return width if width >= 1 else config.DEFAULT_BATCH_WIDTH


async def run_scrape(
    batch_width: int = config.DEFAULT_BATCH_WIDTH,
    output_target: Optional[str | Path] = None,
    *,
    base_url: Optional[str] = None,
    max_retries: Optional[int] = None,
    headless: Optional[bool] = None,
    no_sandbox: Optional[bool] = None,
    snapshot_dir: Optional[Path] = None,
) -> RunSummary:
    """Scrape every page and save the aggregate; returns the run summary.

    ``output_target`` pins the output file (``.json`` is appended when
    missing); by default a timestamped file is created under ``OUTPUT_DIR``.
    ``max_retries`` caps alert reloads per page, 0 meaning unbounded.
    """

    validate_runtime_config(
        "cli", batch_width=batch_width, max_retries=max_retries, base_url=base_url
    )
    ensure_dirs()
    log_path = setup_run_logger()

    started = time.monotonic()
    _scraper_event(
        "run",
        step="start",
        batch_width=batch_width,
        base_url=base_url or config.BASE_URL,
        max_transient_retries=config.MAX_TRANSIENT_RETRIES if max_retries is None else max_retries,
        snapshot_dir=str(snapshot_dir) if snapshot_dir is not None else None,
        log_path=str(log_path),
    )

    try:
        async with open_browser_context(headless=headless, no_sandbox=no_sandbox) as context:
            schedule = await run_batches(
                partial(
                    fetch_page,
                    context,
                    base_url=base_url,
                    max_retries=max_retries,
                    snapshot_dir=snapshot_dir,
                ),
                batch_width=batch_width,
            )
        output_path = save_records(schedule.records, output_target or default_target())
    except Exception as exc:
        elapsed = time.monotonic() - started
        log_line(f"[RUN] Run aborted after {format_duration(elapsed)}: {type(exc).__name__}: {exc}")
        _scraper_event(
            "error",
            phase="run",
            error=error_code_for(exc),
            page_index=getattr(exc, "page_index", None),
            elapsed_seconds=round(elapsed, 3),
        )
        raise

    elapsed = time.monotonic() - started
    summary = RunSummary(
        output_path=output_path,
        log_path=log_path,
        records=len(schedule.records),
        batches=schedule.batches,
        pages=schedule.pages,
        recoveries=schedule.recoveries,
        elapsed_seconds=elapsed,
    )
    log_line(
        f"[RUN] {summary.records} records from {summary.pages} pages in "
        f"{summary.batches} batches ({summary.recoveries} alert reloads)."
    )
    log_line(f"[RUN] fullprocessruntime: {format_duration(elapsed)}")
    _scraper_event(
        "run",
        step="end",
        records=summary.records,
        pages=summary.pages,
        batches=summary.batches,
        recoveries=summary.recoveries,
        output=str(output_path),
        elapsed_seconds=round(elapsed, 3),
    )
    return summary


def _cli_entrypoint(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Scrape every page of the transactions table into one JSON file."
    )
    parser.add_argument(
        "--pages",
        nargs="?",
        default=None,
        help=f"Number of pages fetched in parallel (default {config.DEFAULT_BATCH_WIDTH}).",
    )

    args, unknown = parser.parse_known_args(argv)
    if unknown:
        log_line(f"[CLI] Ignoring unsupported arguments: {unknown}")

    summary = asyncio.run(run_scrape(parse_batch_width(args.pages)))
    log_line(f"[CLI] Records saved to {summary.output_path}; log at {summary.log_path}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(_cli_entrypoint())

__all__ = ["RunSummary", "parse_batch_width", "run_scrape", "_cli_entrypoint"]
