"""JSON output for aggregated records."""
from __future__ import annotations

import json
import time
from contextlib import suppress
from pathlib import Path
from typing import Optional, Sequence

from . import config
from .error_codes import ErrorCode, SinkError
from .extraction import Record
from .logging_utils import _scraper_event
from .utils import log_line


def normalize_target(target: str | Path) -> Path:
    """Append ``.json`` unless the target already ends with it."""

    path = Path(target)
    if path.name.endswith(".json"):
        return path
    return path.with_name(path.name + ".json")


def default_target(now_ms: Optional[int] = None) -> Path:
    """Return ``OUTPUT_DIR/allrecords_<epoch ms>.json``."""

    stamp = int(time.time() * 1000) if now_ms is None else now_ms
    return config.OUTPUT_DIR / f"{config.OUTPUT_PREFIX}_{stamp}.json"


def save_records(records: Sequence[Record], target: str | Path) -> Path:
    """Write ``records`` to ``target`` as a single JSON array.

    An existing file at the path is replaced, never merged. Raises
    ``SinkError`` when the records cannot be serialised or written.
    """

    path = normalize_target(target)

    try:
        data = json.dumps(list(records), ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        log_line(f"[SINK] Could not serialize records! Error: {exc}")
        _scraper_event("error", phase="sink", error=ErrorCode.SERIALIZATION, path=str(path))
        raise SinkError(f"Could not serialize records: {exc}", code=ErrorCode.SERIALIZATION) from exc

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(data, encoding="utf-8")
        tmp_path.replace(path)
    except OSError as exc:
        with suppress(OSError):
            tmp_path.unlink(missing_ok=True)
        log_line(f"[SINK] Could not write JSON to file! Error: {exc}")
        _scraper_event("error", phase="sink", error=ErrorCode.IO, path=str(path))
        raise SinkError(f"Could not write {path}: {exc}", code=ErrorCode.IO) from exc

    log_line(f"[SINK] JSON data has been successfully written to file: {path.resolve()}")
    _scraper_event("sink", path=str(path), records=len(records))
    return path


def load_records(path: str | Path) -> list[Record]:
    """Read back a file written by ``save_records``."""

    with normalize_target(path).open("r", encoding="utf-8") as handle:
        return json.load(handle)


__all__ = ["normalize_target", "default_target", "save_records", "load_records"]
