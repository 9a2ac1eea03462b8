from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from bankin.scraper import config, utils


@pytest.fixture(autouse=True)
def _configure_temp_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    data_dir = tmp_path / "data"
    monkeypatch.setattr(config, "DATA_DIR", data_dir)
    monkeypatch.setattr(config, "OUTPUT_DIR", data_dir)
    monkeypatch.setattr(config, "LOG_DIR", data_dir / "logs")
    monkeypatch.setattr(config, "LOG_FILE", data_dir / "logs" / "latest.log")
    utils.reset_logger()
    yield data_dir
    utils.reset_logger()
