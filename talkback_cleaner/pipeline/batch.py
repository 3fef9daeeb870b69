from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from talkback_cleaner.core.verbosity import LogVerbosity
from talkback_cleaner.domain.exceptions.pipeline_exceptions import (
    CleanerError,
    NodeProcessingError,
)
from talkback_cleaner.domain.models.statistics import RunStatistics
from talkback_cleaner.pipeline.registry import NodeRegistry

if TYPE_CHECKING:
    from bs4 import Tag

    from talkback_cleaner.core.text_cleaner import TextCleaner
    from talkback_cleaner.dom.document import LiveDocument
    from talkback_cleaner.pipeline.preview import PreviewRenderer

logger = logging.getLogger(__name__)


class BatchProcessor:
    """Cleans every comment in the document that has not been cleaned yet.

    The candidate set is re-read from the document on every pass; the
    registry makes repeated passes over the same nodes free.
    """

    def __init__(
        self,
        document: LiveDocument,
        *,
        cleaner: TextCleaner,
        renderer: PreviewRenderer,
        selector: str = "pre.comment-item-text",
        registry: NodeRegistry | None = None,
        verbosity: LogVerbosity = LogVerbosity.SUMMARY,
    ) -> None:
        self._document = document
        self._cleaner = cleaner
        self._renderer = renderer
        self.selector = selector
        self.registry = registry if registry is not None else NodeRegistry()
        self.verbosity = verbosity
        self._totals = RunStatistics()
        self._last_pass = RunStatistics()
        self.passes = 0

    @property
    def totals(self) -> RunStatistics:
        return self._totals

    @property
    def last_pass(self) -> RunStatistics:
        return self._last_pass

    def process_all(self) -> RunStatistics:
        """Run one pass over the current candidates and return the running totals."""
        stats = RunStatistics()
        try:
            for index, node in enumerate(self._document.select(self.selector), start=1):
                stats = stats.bump(nodes_seen=1)
                if self.registry.has_processed(node):
                    continue
                self.registry.mark_processed(node)
                stats = stats.bump(nodes_processed=1)
                stats = stats + self._process_node(node, index)
        finally:
            self._last_pass = stats
            self._totals = self._totals + stats
            self.passes += 1

        if self.verbosity.summary_enabled:
            logger.info(
                "batch_summary",
                extra={"url": self._document.url, "pass": self.passes, **self._totals.to_dict()},
            )
        return self._totals

    def _process_node(self, node: Tag, index: int) -> RunStatistics:
        try:
            result = self._cleaner.clean(node.get_text())
            outcome = self._renderer.render(node, result.cleaned_text)
        except CleanerError:
            raise
        except Exception as exc:
            msg = f"Failed to process comment #{index}: {exc}"
            raise NodeProcessingError(msg, details={"index": index}) from exc

        if self.verbosity.verbose_enabled:
            logger.info(
                "comment_processed",
                extra={
                    "index": index,
                    "length_before": result.length_before,
                    "length_after": result.length_after,
                    "lines_before": result.line_count_before,
                    "lines_after": result.line_count_after,
                    "invisible_removed": result.invisible_chars_removed,
                    "blank_runs": result.blank_runs_collapsed,
                    "changed": result.changed,
                    "toggle_added": outcome.toggle_created,
                },
            )

        return RunStatistics(
            invisible_chars_removed=result.invisible_chars_removed,
            blank_runs_collapsed=result.blank_runs_collapsed,
            previews_created=1 if outcome.toggle_created else 0,
        )
