from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from . import config

LOGGER = logging.getLogger("bankin")
_FORMATTER = logging.Formatter(fmt="[%(asctime)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


def _install_handlers(*handlers: logging.Handler) -> None:
    """Replace every handler on the shared logger with ``handlers``."""

    for old in list(LOGGER.handlers):
        LOGGER.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setFormatter(_FORMATTER)
        LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.INFO)
    LOGGER.propagate = False


def _log_to(log_path: Path) -> None:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _install_handlers(
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_path, encoding="utf-8"),
    )


def reset_logger() -> None:
    """Close the current log file; the next line reopens ``LOG_FILE``."""

    _install_handlers()


def setup_run_logger(started: Optional[datetime] = None) -> Path:
    """Send log lines to ``logs/scrape_<UTC start>.log`` and return that path."""

    stamp = (started or datetime.now(timezone.utc)).strftime("%Y%m%d_%H%M%S")
    log_path = config.LOG_DIR / f"scrape_{stamp}.log"
    _log_to(log_path)
    return log_path


def ensure_dirs() -> None:
    config.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    config.LOG_DIR.mkdir(parents=True, exist_ok=True)


def log_line(message: str) -> None:
    """Write a timestamped log line to stdout and the active log file."""

    if not LOGGER.handlers:
        _log_to(config.LOG_FILE)
    LOGGER.info(message)


def format_duration(seconds: float) -> str:
    """Render a wall-clock duration as ``1h02m03.456s`` / ``2m03.456s`` / ``3.456s``."""

    seconds = max(0.0, float(seconds))
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    if hours:
        return f"{hours}h{minutes:02d}m{secs:06.3f}s"
    if minutes:
        return f"{minutes}m{secs:06.3f}s"
    return f"{secs:.3f}s"


__all__ = [
    "ensure_dirs",
    "setup_run_logger",
    "reset_logger",
    "log_line",
    "format_duration",
]
