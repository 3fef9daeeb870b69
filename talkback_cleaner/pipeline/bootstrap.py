"""Wires the pipeline together and provides the ``init()`` entry point."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from talkback_cleaner.config import AppConfig, load_config
from talkback_cleaner.core.lang import choose_language, detect_page_language, labels_for
from talkback_cleaner.core.text_cleaner import TextCleaner
from talkback_cleaner.core.verbosity import LogVerbosity
from talkback_cleaner.domain.exceptions.pipeline_exceptions import InitializationError
from talkback_cleaner.pipeline.batch import BatchProcessor
from talkback_cleaner.pipeline.preview import PreviewRenderer
from talkback_cleaner.pipeline.scheduler import FrameClock, LoopFrameClock, MutationScheduler

if TYPE_CHECKING:
    from talkback_cleaner.dom.document import LiveDocument
    from talkback_cleaner.domain.models.statistics import RunStatistics

logger = logging.getLogger(__name__)

# Host idle hook: called with (callback, timeout in seconds), like requestIdleCallback.
IdleHook = Callable[[Callable[[], Any], float], Any]


class CommentCleaner:
    """One cleaning pipeline bound to one document for the life of the page view."""

    def __init__(
        self,
        document: LiveDocument,
        config: AppConfig | None = None,
        *,
        clock: FrameClock | None = None,
    ) -> None:
        self.document = document
        self.config = config or load_config()
        self.verbosity = LogVerbosity.parse(self.config.runtime.log_verbosity)

        lang = choose_language(
            self.config.preview.preferred_lang, detect_page_language(document.lang)
        )
        self.cleaner = TextCleaner.from_config(self.config.cleaner)
        self.renderer = PreviewRenderer.from_config(document, self.config.preview, labels_for(lang))
        self.processor = BatchProcessor(
            document,
            cleaner=self.cleaner,
            renderer=self.renderer,
            selector=self.config.observer.comment_selector,
            verbosity=self.verbosity,
        )
        self.clock = clock or LoopFrameClock(interval_ms=self.config.observer.frame_interval_ms)
        self.scheduler = MutationScheduler(
            document,
            self.processor,
            self.clock,
            root_selectors=self.config.observer.root_selectors,
            verbosity=self.verbosity,
        )
        self.started = False

    def matches_page(self) -> bool:
        return re.search(self.config.observer.page_url_pattern, self.document.url) is not None

    def init(self) -> bool:
        """Run the first pass and start observing; returns whether the pipeline is live."""
        if self.started:
            return True
        if not self.matches_page():
            if self.verbosity.summary_enabled:
                logger.info("not_item_page", extra={"url": self.document.url})
            return False
        if self.verbosity.summary_enabled:
            logger.info("init", extra={"url": self.document.url})

        try:
            self._check_host()
            self.processor.process_all()
            self.scheduler.start()
        except Exception:
            logger.exception("init_failed", extra={"url": self.document.url})
            return False

        self.started = True
        return True

    def _check_host(self) -> None:
        if self.document.root.find(True) is None:
            msg = "Host document has no elements"
            raise InitializationError(msg, details={"url": self.document.url})
        selector = self.config.observer.comment_selector
        try:
            self.document.select(selector)
        except Exception as exc:
            msg = f"Comment selector is not usable: {selector}"
            raise InitializationError(msg, details={"selector": selector}) from exc

    def stop(self) -> None:
        self.scheduler.stop()
        if isinstance(self.clock, LoopFrameClock):
            self.clock.cancel()

    @property
    def statistics(self) -> RunStatistics:
        return self.processor.totals


def schedule_startup(
    callback: Callable[[], Any],
    *,
    loop: asyncio.AbstractEventLoop | None = None,
    idle_hook: IdleHook | None = None,
    idle_timeout_ms: int = 1500,
    startup_delay_ms: int = 800,
) -> asyncio.TimerHandle | None:
    """Defer *callback* until the host is idle, or by a fixed delay when it has no idle hook."""
    if idle_hook is not None:
        idle_hook(callback, idle_timeout_ms / 1000.0)
        return None
    loop = loop or asyncio.get_running_loop()
    return loop.call_later(startup_delay_ms / 1000.0, callback)
