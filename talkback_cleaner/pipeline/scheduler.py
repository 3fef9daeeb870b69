"""Frame-aligned rescans driven by document mutations.

Any number of mutation batches arriving before the next frame boundary
collapse into a single ``process_all()`` call. The scheduler's own writes
(new text, inserted toggles) trigger at most one extra, empty pass.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol

from talkback_cleaner.core.verbosity import LogVerbosity
from talkback_cleaner.dom.mutations import MutationObserver

if TYPE_CHECKING:
    from bs4 import Tag

    from talkback_cleaner.dom.document import LiveDocument
    from talkback_cleaner.dom.mutations import MutationRecord
    from talkback_cleaner.domain.models.statistics import RunStatistics

logger = logging.getLogger(__name__)


class FrameClock(Protocol):
    def request_frame(self, callback: Callable[[], None]) -> None: ...


class LoopFrameClock:
    """Runs requested callbacks together at the next frame boundary of the event loop."""

    def __init__(
        self, loop: asyncio.AbstractEventLoop | None = None, *, interval_ms: int = 16
    ) -> None:
        self._loop = loop
        self.interval = interval_ms / 1000.0
        self._callbacks: list[Callable[[], None]] = []
        self._handle: asyncio.TimerHandle | None = None
        self.frames = 0

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def request_frame(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)
        if self._handle is None:
            now = self.loop.time()
            boundary = (int(now / self.interval) + 1) * self.interval
            self._handle = self.loop.call_at(boundary, self._tick)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._callbacks.clear()

    def _tick(self) -> None:
        self._handle = None
        self.frames += 1
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()


class BatchRunner(Protocol):
    def process_all(self) -> RunStatistics: ...


class MutationScheduler:
    def __init__(
        self,
        document: LiveDocument,
        processor: BatchRunner,
        clock: FrameClock,
        *,
        root_selectors: Sequence[str] = (".talkback-list-wrapper", ".talkback-list"),
        verbosity: LogVerbosity = LogVerbosity.SUMMARY,
    ) -> None:
        self._document = document
        self._processor = processor
        self._clock = clock
        self.root_selectors = tuple(root_selectors)
        self.verbosity = verbosity
        self._observer = MutationObserver(self._on_mutations)
        self.pending = False
        self.passes = 0
        self.failures = 0
        self.last_error: BaseException | None = None

    @property
    def root(self) -> Tag | None:
        return self._observer.root

    def select_root(self) -> Tag:
        """Most specific configured container, else ``<body>``, else the whole document."""
        for selector in self.root_selectors:
            found = self._document.select_one(selector)
            if found is not None:
                return found
        body = self._document.body
        return body if body is not None else self._document.root

    def start(self) -> Tag:
        root = self.select_root()
        self._observer.observe(self._document, root, subtree=True)
        if self.verbosity.summary_enabled:
            logger.info(
                "observer_attached", extra={"root": root.name, "url": self._document.url}
            )
        return root

    def stop(self) -> None:
        self._observer.disconnect()
        self.pending = False

    def _on_mutations(self, records: list[MutationRecord], observer: MutationObserver) -> None:
        if self.pending:
            return
        self.pending = True
        self._clock.request_frame(self._run_batch)

    def _run_batch(self) -> None:
        self.pending = False
        self.passes += 1
        try:
            self._processor.process_all()
        except Exception as exc:
            self.failures += 1
            self.last_error = exc
            logger.exception("batch_pass_failed", extra={"pass": self.passes})
