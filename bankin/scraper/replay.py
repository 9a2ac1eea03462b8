"""Offline replay of saved page snapshots.

When ``run_scrape`` is given a ``snapshot_dir``, every worker saves the HTML
it extracted from as ``page_<index>_<table|frame>.html``. This module rebuilds
the record list from such a directory without a browser, using the same
field rules and the same batch end-of-data rule as a live run. It is meant
for checking extraction changes against a captured site.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from . import config
from .config_validation import validate_runtime_config
from .detector import PageOutcome
from .extraction import TRANSACTION_FIELDS, Record, records_from_html
from .logging_utils import _scraper_event, scoped_line
from .scheduler import batch_indices, is_last_batch
from .selectors import DEFAULT_SELECTORS, TableSelectors
from .sink import save_records
from .utils import log_line
from .worker import PageResult

_SNAPSHOT_NAME = re.compile(r"^page_(?P<index>\d+)_(?P<kind>table|frame)\.html$")


@dataclass
class ReplayConfig:
    snapshots_dir: Path
    output: Optional[Path] = None
    batch_width: int = config.DEFAULT_BATCH_WIDTH
    page_size: int = config.PAGE_SIZE


def index_snapshots(snapshots_dir: Path) -> Dict[int, Tuple[PageOutcome, Path]]:
    """Map page index to ``(outcome, path)`` for every snapshot file in the directory."""

    found: Dict[int, Tuple[PageOutcome, Path]] = {}
    for path in sorted(Path(snapshots_dir).glob("page_*.html")):
        match = _SNAPSHOT_NAME.match(path.name)
        if not match:
            continue
        outcome = (
            PageOutcome.FRAMED_TABLE_FOUND
            if match.group("kind") == "frame"
            else PageOutcome.TABLE_FOUND
        )
        found[int(match.group("index"))] = (outcome, path)
    return found


def replay_snapshot(
    path: Path, outcome: PageOutcome, selectors: TableSelectors = DEFAULT_SELECTORS
) -> List[Record]:
    rows_css = (
        selectors.frame_rows_css
        if outcome is PageOutcome.FRAMED_TABLE_FOUND
        else selectors.main_rows_css
    )
    return records_from_html(path.read_text(encoding="utf-8"), rows_css, TRANSACTION_FIELDS)


def run_replay(config_obj: ReplayConfig) -> Dict[str, Any]:
    validate_runtime_config("replay", batch_width=config_obj.batch_width)
    snapshots = index_snapshots(config_obj.snapshots_dir)
    records: List[Record] = []
    summary: Dict[str, Any] = {"snapshots": len(snapshots), "pages": 0, "batches": 0}

    _scraper_event("replay", phase="start", snapshots=str(config_obj.snapshots_dir))

    batch = 0
    while True:
        indices = batch_indices(batch, config_obj.batch_width)
        results: List[PageResult] = []
        for index in indices:
            if index not in snapshots:
                scoped_line("replay", "No snapshot; stopping.", batch=batch, page_index=index)
                break
            outcome, path = snapshots[index]
            results.append(PageResult(index=index, outcome=outcome, records=replay_snapshot(path, outcome)))

        for result in results:
            records.extend(result.records)
        summary["pages"] += len(results)
        summary["batches"] += 1

        if len(results) < len(indices) or is_last_batch(results, config_obj.page_size):
            break
        batch += 1

    summary["record_count"] = len(records)
    summary["output"] = (
        str(save_records(records, config_obj.output)) if config_obj.output is not None else None
    )
    _scraper_event("replay", phase="end", **summary)

    summary["records"] = records
    return summary


if __name__ == "__main__":  # pragma: no cover
    import argparse

    parser = argparse.ArgumentParser(description="Rebuild records from saved page snapshots.")
    parser.add_argument("snapshots", help="Directory holding page_<index>_<kind>.html files")
    parser.add_argument("--output", default=None, help="Write the records to this JSON file")
    parser.add_argument("--pages", type=int, default=config.DEFAULT_BATCH_WIDTH)
    args = parser.parse_args()

    result = run_replay(
        ReplayConfig(
            snapshots_dir=Path(args.snapshots),
            output=Path(args.output) if args.output else None,
            batch_width=args.pages,
        )
    )
    log_line(f"[REPLAY] {result['record_count']} records from {result['pages']} pages.")
