"""Pytest configuration and shared fixtures.

Provides comment-page builders and a manually driven frame clock.
"""

from __future__ import annotations

import html
from collections.abc import Callable

import pytest

from talkback_cleaner.config import load_config
from talkback_cleaner.dom.document import LiveDocument

ITEM_URL = "https://news.walla.co.il/item/3712345"

_CONFIG_ENV_VARS = (
    "INVISIBLE_CHARS",
    "MAX_CONSEC_BLANKS",
    "PREVIEW_LINES",
    "PREVIEW_ELLIPSIS",
    "PREFERRED_LANG",
    "COMMENT_SELECTOR",
    "ROOT_SELECTORS",
    "PAGE_URL_PATTERN",
    "FRAME_INTERVAL_MS",
    "IDLE_TIMEOUT_MS",
    "STARTUP_DELAY_MS",
    "LOG_LEVEL",
    "LOG_VERBOSITY",
    "LOG_JSON",
    "LOG_FILE",
)


def comment_html(text: str) -> str:
    return (
        '<div class="comment-item">'
        f'<pre class="comment-item-text">{html.escape(text, quote=False)}</pre>'
        "</div>"
    )


def page_html(comments: list[str], *, lang: str = "en", wrapper: bool = True) -> str:
    body = "".join(comment_html(c) for c in comments)
    if wrapper:
        body = f'<div class="talkback-list-wrapper"><div class="talkback-list">{body}</div></div>'
    return f'<html lang="{lang}"><head><title>item</title></head><body>{body}</body></html>'


class ManualFrameClock:
    """Frame clock whose frames only happen when a test calls ``fire()``."""

    def __init__(self) -> None:
        self.callbacks: list[Callable[[], None]] = []
        self.requests = 0

    def request_frame(self, callback: Callable[[], None]) -> None:
        self.requests += 1
        self.callbacks.append(callback)

    def fire(self) -> int:
        callbacks, self.callbacks = self.callbacks, []
        for callback in callbacks:
            callback()
        return len(callbacks)


@pytest.fixture(autouse=True)
def _isolated_config_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep developer environment variables and .env files out of the tests."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_document() -> Callable[..., LiveDocument]:
    def _make(
        comments: list[str], *, url: str = ITEM_URL, lang: str = "en", wrapper: bool = True
    ) -> LiveDocument:
        return LiveDocument(page_html(comments, lang=lang, wrapper=wrapper), url=url)

    return _make


@pytest.fixture
def frame_clock() -> ManualFrameClock:
    return ManualFrameClock()


@pytest.fixture
def app_config():
    return load_config()
