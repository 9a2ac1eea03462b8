"""Configuration constants for the paginated transactions scraper.

Plain module defaults. Nothing is read from the environment; per-run
choices (batch width, output path, retry cap, browser flags, snapshot
directory) are keyword arguments of ``run.run_scrape``.
"""
from __future__ import annotations

from pathlib import Path

DATA_DIR: Path = Path("output")
OUTPUT_DIR: Path = DATA_DIR
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"

BASE_URL: str = "https://web.bankin.com/challenge/index.html"

# Rows served per page. Drives both the ?start= offset and the end-of-data rule.
PAGE_SIZE: int = 50
DEFAULT_BATCH_WIDTH: int = 100
OUTPUT_PREFIX: str = "allrecords"

HEADLESS: bool = True
NO_SANDBOX: bool = False
NO_SANDBOX_ARGS: tuple[str, ...] = ("--no-sandbox", "--disable-setuid-sandbox")

# Per-page cap on alert/reload recoveries. 0 keeps retrying until the table shows.
MAX_TRANSIENT_RETRIES: int = 0


def is_unbounded_retry(max_attempts: int) -> bool:
    """Return ``True`` when ``max_attempts`` means "retry forever"."""

    return max_attempts <= 0
