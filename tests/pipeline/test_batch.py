from __future__ import annotations

import logging

import pytest

from talkback_cleaner.core.text_cleaner import TextCleaner
from talkback_cleaner.core.verbosity import LogVerbosity
from talkback_cleaner.domain.exceptions.pipeline_exceptions import NodeProcessingError
from talkback_cleaner.pipeline.batch import BatchProcessor
from talkback_cleaner.pipeline.preview import PreviewRenderer

ZWSP = "\u200b"
LONG = "\n".join(f"row {n}" for n in range(1, 9))


def _processor(document, **kwargs) -> BatchProcessor:
    return BatchProcessor(
        document,
        cleaner=TextCleaner(),
        renderer=PreviewRenderer(document),
        **kwargs,
    )


class CountingCleaner(TextCleaner):
    def __init__(self) -> None:
        super().__init__()
        self.seen: list[str] = []

    def clean(self, raw):
        self.seen.append(raw)
        return super().clean(raw)


def test_cleans_every_comment_in_document_order(make_document):
    document = make_document([f"first{ZWSP}", "second\n\n\n\nend", "third"])
    cleaner = CountingCleaner()
    processor = BatchProcessor(document, cleaner=cleaner, renderer=PreviewRenderer(document))

    totals = processor.process_all()

    assert cleaner.seen == [f"first{ZWSP}", "second\n\n\n\nend", "third"]
    texts = [node.get_text() for node in document.select("pre.comment-item-text")]
    assert texts == ["first", "second\n\n\nend", "third"]
    assert totals.nodes_seen == 3
    assert totals.nodes_processed == 3
    assert totals.invisible_chars_removed == 1
    assert totals.blank_runs_collapsed == 1
    assert totals.previews_created == 0


def test_second_pass_does_not_reprocess(make_document):
    document = make_document(["one", LONG])
    cleaner = CountingCleaner()
    processor = BatchProcessor(document, cleaner=cleaner, renderer=PreviewRenderer(document))

    processor.process_all()
    totals = processor.process_all()

    assert len(cleaner.seen) == 2
    assert len(document.select("button")) == 1
    assert processor.passes == 2
    assert processor.last_pass.nodes_seen == 2
    assert processor.last_pass.nodes_processed == 0
    assert totals.nodes_processed == 2
    assert totals.previews_created == 1


def test_text_edited_after_cleaning_is_left_alone(make_document):
    document = make_document(["clean"])
    processor = _processor(document)
    processor.process_all()
    (node,) = document.select("pre.comment-item-text")

    document.set_text(node, f"edited{ZWSP}")
    processor.process_all()

    assert node.get_text() == f"edited{ZWSP}"


def test_new_comments_are_picked_up(make_document):
    document = make_document(["old"])
    processor = _processor(document)
    processor.process_all()
    container = document.select_one(".talkback-list")

    document.append_html(
        container,
        f'<div class="comment-item"><pre class="comment-item-text">new{ZWSP}</pre></div>',
    )
    processor.process_all()

    assert [n.get_text() for n in document.select("pre.comment-item-text")] == ["old", "new"]
    assert processor.last_pass.nodes_processed == 1
    assert processor.totals.nodes_processed == 2


def test_equal_comments_are_processed_separately(make_document):
    document = make_document([LONG, LONG])
    processor = _processor(document)

    totals = processor.process_all()

    assert totals.nodes_processed == 2
    assert len(document.select("button")) == 2


def test_failing_node_is_wrapped_and_counted(make_document):
    class ExplodingRenderer(PreviewRenderer):
        def render(self, node, cleaned_text):
            if cleaned_text == "boom":
                raise RuntimeError("render failed")
            return super().render(node, cleaned_text)

    document = make_document(["fine", "boom", "never reached"])
    processor = BatchProcessor(
        document, cleaner=TextCleaner(), renderer=ExplodingRenderer(document)
    )

    with pytest.raises(NodeProcessingError) as excinfo:
        processor.process_all()

    assert excinfo.value.details == {"index": 2}
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert processor.passes == 1
    assert processor.totals.nodes_processed == 2

    # the failed node stays registered; the next pass finishes the rest
    processor.process_all()
    texts = [n.get_text() for n in document.select("pre.comment-item-text")]
    assert texts == ["fine", "boom", "never reached"]
    assert processor.totals.nodes_processed == 3


def test_custom_selector(make_document):
    document = make_document(["x"])
    other = document.create_element("p", {"class": "reply"}, text=f"reply{ZWSP}")
    document.append(document.body, other)

    _processor(document, selector="p.reply").process_all()

    assert other.get_text() == "reply"


def test_summary_logged_after_each_pass(make_document, caplog):
    document = make_document(["a"])
    processor = _processor(document)

    with caplog.at_level(logging.INFO, logger="talkback_cleaner.pipeline.batch"):
        processor.process_all()
        processor.process_all()

    summaries = [r for r in caplog.records if r.getMessage() == "batch_summary"]
    assert len(summaries) == 2
    assert summaries[-1].nodes_processed == 1
    assert summaries[-1].url == document.url


def test_verbose_logs_each_comment(make_document, caplog):
    document = make_document([f"a{ZWSP}", LONG])
    processor = _processor(document, verbosity=LogVerbosity.VERBOSE)

    with caplog.at_level(logging.INFO, logger="talkback_cleaner.pipeline.batch"):
        processor.process_all()

    details = [r for r in caplog.records if r.getMessage() == "comment_processed"]
    assert [r.index for r in details] == [1, 2]
    assert details[0].invisible_removed == 1
    assert details[0].changed is True
    assert details[1].toggle_added is True


def test_off_logs_nothing(make_document, caplog):
    document = make_document(["a"])
    processor = _processor(document, verbosity=LogVerbosity.OFF)

    with caplog.at_level(logging.DEBUG, logger="talkback_cleaner.pipeline.batch"):
        processor.process_all()

    assert [r for r in caplog.records if r.name == "talkback_cleaner.pipeline.batch"] == []
