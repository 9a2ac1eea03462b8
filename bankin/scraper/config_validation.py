from __future__ import annotations

from typing import Literal, Optional

from . import config
from .logging_utils import _scraper_event
from .utils import log_line

Entrypoint = Literal["cli", "replay", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _scraper_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def validate_runtime_config(
    entrypoint: Entrypoint,
    *,
    batch_width: Optional[int] = None,
    max_retries: Optional[int] = None,
    base_url: Optional[str] = None,
) -> None:
    """Validate the settings a run is about to use.

    Arguments left as ``None`` are checked at their module default. Raises
    ``ValueError`` when a blocking misconfiguration is detected.
    """

    base_url = config.BASE_URL if base_url is None else base_url
    max_retries = config.MAX_TRANSIENT_RETRIES if max_retries is None else max_retries

    if entrypoint != "replay" and not base_url.lower().startswith(("http://", "https://")):
        _raise_config_error(
            f"Base URL must be an http(s) URL, got {base_url!r}.",
            entrypoint=entrypoint,
            error="base_url_invalid",
        )

    if config.PAGE_SIZE < 1:
        _raise_config_error(
            "PAGE_SIZE must be greater than zero.",
            entrypoint=entrypoint,
            error="page_size_invalid",
        )

    if max_retries < 0:
        _raise_config_error(
            "The transient retry cap must be non-negative (0 disables the cap).",
            entrypoint=entrypoint,
            error="max_transient_retries_invalid",
        )

    if batch_width is not None and batch_width < 1:
        _raise_config_error(
            f"Batch width must be at least 1, got {batch_width}.",
            entrypoint=entrypoint,
            error="batch_width_invalid",
        )

    if config.is_unbounded_retry(max_retries):
        _scraper_event(
            "state",
            phase="config",
            context="runtime_validation",
            kind="unbounded_retry",
            entrypoint=entrypoint,
        )


__all__ = ["validate_runtime_config", "Entrypoint"]
