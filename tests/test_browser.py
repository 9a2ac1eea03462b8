from __future__ import annotations

import asyncio
from typing import Any, Dict, List

import pytest

from bankin.scraper import browser, config
from bankin.scraper.browser import launch_args, open_browser_context


class _FakeContext:
    def __init__(self, calls: List[str]) -> None:
        self._calls = calls

    async def close(self) -> None:
        self._calls.append("context.close")


class _FakeBrowser:
    def __init__(self, calls: List[str], context_kwargs: Dict[str, Any]) -> None:
        self._calls = calls
        self._context_kwargs = context_kwargs

    async def new_context(self, **kwargs: Any) -> _FakeContext:
        self._context_kwargs.update(kwargs)
        self._calls.append("new_context")
        return _FakeContext(self._calls)

    async def close(self) -> None:
        self._calls.append("browser.close")


class _FakePlaywright:
    def __init__(self, calls: List[str], launch_kwargs: Dict[str, Any], context_kwargs: Dict[str, Any]) -> None:
        self._calls = calls
        self._launch_kwargs = launch_kwargs
        self._context_kwargs = context_kwargs
        self.chromium = self

    async def launch(self, **kwargs: Any) -> _FakeBrowser:
        self._launch_kwargs.update(kwargs)
        self._calls.append("launch")
        return _FakeBrowser(self._calls, self._context_kwargs)

    async def __aenter__(self) -> "_FakePlaywright":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self._calls.append("playwright.stop")


def _patch_playwright(monkeypatch):
    calls: List[str] = []
    launch_kwargs: Dict[str, Any] = {}
    context_kwargs: Dict[str, Any] = {}
    monkeypatch.setattr(
        browser, "async_playwright", lambda: _FakePlaywright(calls, launch_kwargs, context_kwargs)
    )
    return calls, launch_kwargs, context_kwargs


def test_sandbox_kept_by_default():
    assert launch_args(False) == []


def test_no_sandbox_args():
    assert launch_args(True) == list(config.NO_SANDBOX_ARGS)
    assert "--no-sandbox" in launch_args(True)


def test_context_uses_browser_defaults_and_is_closed(monkeypatch):
    calls, launch_kwargs, context_kwargs = _patch_playwright(monkeypatch)

    async def _run() -> None:
        async with open_browser_context(no_sandbox=True):
            calls.append("work")

    asyncio.run(_run())

    assert context_kwargs == {}
    assert launch_kwargs == {"headless": True, "args": list(config.NO_SANDBOX_ARGS)}
    assert calls == ["launch", "new_context", "work", "context.close", "browser.close", "playwright.stop"]


def test_context_closed_when_run_fails(monkeypatch):
    calls, _, _ = _patch_playwright(monkeypatch)

    async def _run() -> None:
        async with open_browser_context():
            raise RuntimeError("worker crashed")

    with pytest.raises(RuntimeError, match="worker crashed"):
        asyncio.run(_run())

    assert calls[-3:] == ["context.close", "browser.close", "playwright.stop"]
