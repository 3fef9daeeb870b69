from __future__ import annotations

import asyncio
import logging
import unittest

from talkback_cleaner.core.text_cleaner import TextCleaner
from talkback_cleaner.core.verbosity import LogVerbosity
from talkback_cleaner.dom.document import LiveDocument
from talkback_cleaner.domain.models.statistics import RunStatistics
from talkback_cleaner.pipeline.batch import BatchProcessor
from talkback_cleaner.pipeline.preview import PreviewRenderer
from talkback_cleaner.pipeline.scheduler import LoopFrameClock, MutationScheduler

ZWSP = "\u200b"


def _fragment(text: str) -> str:
    return f'<div class="comment-item"><pre class="comment-item-text">{text}</pre></div>'


class RecordingProcessor:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self.error = error

    def process_all(self) -> RunStatistics:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return RunStatistics()


def _real_processor(document: LiveDocument) -> BatchProcessor:
    return BatchProcessor(document, cleaner=TextCleaner(), renderer=PreviewRenderer(document))


def test_mutation_burst_schedules_one_frame(make_document, frame_clock):
    document = make_document(["a"])
    processor = RecordingProcessor()
    scheduler = MutationScheduler(document, processor, frame_clock)
    root = scheduler.start()

    for n in range(5):
        document.append_html(root, _fragment(f"lazy {n}"))

    assert frame_clock.requests == 1
    assert scheduler.pending is True
    assert processor.calls == 0

    frame_clock.fire()

    assert processor.calls == 1
    assert scheduler.pending is False
    assert scheduler.passes == 1


def test_own_writes_cause_at_most_one_empty_pass(make_document, frame_clock):
    document = make_document([])
    processor = _real_processor(document)
    scheduler = MutationScheduler(document, processor, frame_clock)
    root = scheduler.start()

    document.append_html(root, _fragment(f"x{ZWSP}") + _fragment("y"))
    frame_clock.fire()

    assert processor.last_pass.nodes_processed == 2
    assert frame_clock.requests == 2

    frame_clock.fire()

    assert processor.last_pass.nodes_processed == 0
    assert frame_clock.requests == 2
    assert frame_clock.fire() == 0
    assert [n.get_text() for n in document.select("pre.comment-item-text")] == ["x", "y"]


def test_failed_pass_is_isolated(make_document, frame_clock, caplog):
    document = make_document(["a"])
    error = RuntimeError("pass exploded")
    processor = RecordingProcessor(error)
    scheduler = MutationScheduler(document, processor, frame_clock)
    root = scheduler.start()

    document.append_html(root, _fragment("b"))
    with caplog.at_level(logging.ERROR, logger="talkback_cleaner.pipeline.scheduler"):
        frame_clock.fire()

    assert scheduler.failures == 1
    assert scheduler.last_error is error
    assert scheduler.pending is False
    assert any(r.getMessage() == "batch_pass_failed" for r in caplog.records)

    # the next mutation is still picked up
    document.append_html(root, _fragment("c"))
    assert frame_clock.requests == 2
    frame_clock.fire()
    assert processor.calls == 2


def test_root_prefers_configured_containers(make_document, frame_clock):
    document = make_document(["a"])
    scheduler = MutationScheduler(document, RecordingProcessor(), frame_clock)

    assert scheduler.select_root() is document.select_one(".talkback-list-wrapper")

    scheduler.root_selectors = (".talkback-list",)
    assert scheduler.select_root() is document.select_one(".talkback-list")


def test_root_falls_back_to_body(make_document, frame_clock):
    document = make_document(["a"], wrapper=False)
    scheduler = MutationScheduler(document, RecordingProcessor(), frame_clock)

    assert scheduler.select_root() is document.body


def test_root_falls_back_to_document(frame_clock):
    document = LiveDocument("<div>bare</div>", parser="html.parser")
    scheduler = MutationScheduler(document, RecordingProcessor(), frame_clock)

    assert document.body is None
    assert scheduler.select_root() is document.root


def test_mutations_outside_root_are_ignored(make_document, frame_clock):
    document = make_document(["a"])
    scheduler = MutationScheduler(document, RecordingProcessor(), frame_clock)
    scheduler.start()

    document.append_html(document.body, "<footer>ads</footer>")

    assert frame_clock.requests == 0


def test_stop_disconnects(make_document, frame_clock):
    document = make_document(["a"])
    scheduler = MutationScheduler(document, RecordingProcessor(), frame_clock)
    root = scheduler.start()

    scheduler.stop()
    document.append_html(root, _fragment("b"))

    assert scheduler.root is None
    assert frame_clock.requests == 0


def test_restart_after_stop_schedules_again(make_document, frame_clock):
    document = make_document(["a"])
    processor = RecordingProcessor()
    scheduler = MutationScheduler(document, processor, frame_clock)
    root = scheduler.start()
    document.append_html(root, _fragment("b"))
    assert scheduler.pending is True

    # the frame requested before stop() never runs
    scheduler.stop()
    frame_clock.callbacks.clear()
    assert scheduler.pending is False

    root = scheduler.start()
    document.append_html(root, _fragment("c"))

    assert frame_clock.requests == 2
    frame_clock.fire()
    assert processor.calls == 1


def test_attach_log_follows_verbosity(make_document, frame_clock, caplog):
    document = make_document(["a"])
    quiet = MutationScheduler(
        document, RecordingProcessor(), frame_clock, verbosity=LogVerbosity.OFF
    )
    chatty = MutationScheduler(document, RecordingProcessor(), frame_clock)

    with caplog.at_level(logging.INFO, logger="talkback_cleaner.pipeline.scheduler"):
        quiet.start()
        assert [r for r in caplog.records if r.getMessage() == "observer_attached"] == []
        chatty.start()

    attached = [r for r in caplog.records if r.getMessage() == "observer_attached"]
    assert len(attached) == 1
    assert attached[0].root == "div"


class TestLoopFrameClock(unittest.IsolatedAsyncioTestCase):
    async def test_requests_in_one_frame_run_together(self) -> None:
        clock = LoopFrameClock(interval_ms=5)
        calls: list[str] = []

        clock.request_frame(lambda: calls.append("first"))
        clock.request_frame(lambda: calls.append("second"))
        await asyncio.sleep(0.05)

        assert calls == ["first", "second"]
        assert clock.frames == 1

    async def test_cancel_drops_pending_callbacks(self) -> None:
        clock = LoopFrameClock(interval_ms=5)
        calls: list[int] = []

        clock.request_frame(lambda: calls.append(1))
        clock.cancel()
        await asyncio.sleep(0.03)

        assert calls == []
        assert clock.frames == 0

    async def test_lazy_loaded_comments_are_cleaned(self) -> None:
        document = LiveDocument(
            '<html><body><div class="talkback-list-wrapper"></div></body></html>',
            url="https://news.walla.co.il/item/1",
        )
        processor = _real_processor(document)
        scheduler = MutationScheduler(document, processor, LoopFrameClock(interval_ms=5))
        root = scheduler.start()

        document.append_html(root, _fragment(f"one{ZWSP}"))
        document.append_html(root, _fragment(f"two{ZWSP}"))
        document.append_html(root, _fragment("three\n\n\n\n\nend"))
        await asyncio.sleep(0.1)

        texts = [n.get_text() for n in document.select("pre.comment-item-text")]
        assert texts == ["one", "two", "three\n\n\nend"]
        # one pass for the burst, one empty pass for the cleaner's own writes
        assert scheduler.passes == 2
        assert processor.totals.nodes_processed == 3
        scheduler.stop()
