"""Collapsed previews for long comments.

A comment longer than the preview budget shows its first lines plus an
ellipsis line, with a "show more" button inserted right after it. The button
flips between the short and the full form indefinitely.
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING

from talkback_cleaner.core.identity import WeakIdentityMap
from talkback_cleaner.core.lang import ToggleLabels, labels_for
from talkback_cleaner.core.text_cleaner import count_lines
from talkback_cleaner.domain.models.render_state import RenderOutcome, RenderState

if TYPE_CHECKING:
    from bs4 import Tag

    from talkback_cleaner.config import PreviewConfig
    from talkback_cleaner.dom.document import LiveDocument
    from talkback_cleaner.dom.events import DomEvent

logger = logging.getLogger(__name__)

TOGGLE_CLASS = "tb-clean-toggle-btn"
TOGGLE_STYLE = (
    "display:block;margin-top:5px;cursor:pointer;background:transparent;border:none;"
    "color:#0073e6;font-weight:bold;padding:0;text-decoration:underline"
)

ATTR_FULL = "data-tb-full"
ATTR_SHORT = "data-tb-short"
ATTR_EXPANDED = "data-tb-expanded"


def build_short_form(text: str, preview_lines: int, ellipsis: str = "…") -> str | None:
    """First *preview_lines* lines plus an ellipsis line, or None if *text* fits."""
    if count_lines(text) <= preview_lines:
        return None
    head = text.split("\n")[:preview_lines]
    return "\n".join([*head, ellipsis])


class PreviewRenderer:
    def __init__(
        self,
        document: LiveDocument,
        *,
        preview_lines: int = 5,
        ellipsis: str = "…",
        labels: ToggleLabels | None = None,
    ) -> None:
        if preview_lines < 1:
            msg = "preview_lines must be at least 1"
            raise ValueError(msg)
        self._document = document
        self.preview_lines = preview_lines
        self.ellipsis = ellipsis
        self.labels = labels or labels_for("en")
        self._states: WeakIdentityMap[Tag, RenderState] = WeakIdentityMap()

    @classmethod
    def from_config(
        cls, document: LiveDocument, config: PreviewConfig, labels: ToggleLabels
    ) -> PreviewRenderer:
        return cls(
            document,
            preview_lines=config.preview_lines,
            ellipsis=config.ellipsis,
            labels=labels,
        )

    def state_for(self, node: Tag) -> RenderState | None:
        return self._states.get(node)

    def render(self, node: Tag, cleaned_text: str) -> RenderOutcome:
        short_text = build_short_form(cleaned_text, self.preview_lines, self.ellipsis)
        toggle_created = short_text is not None
        state = RenderState(full_text=cleaned_text, short_text=short_text or cleaned_text)
        self._states[node] = state

        self._write_markers(node, state)
        self._document.set_text(node, state.displayed_text)

        inserted = False
        if toggle_created:
            button = self._make_toggle(node)
            state.toggle_ref = weakref.ref(button)
            inserted = self._document.insert_after(node, button)
            if not inserted:
                logger.debug("toggle_skipped_detached_node")

        return RenderOutcome(
            displayed_text=state.displayed_text,
            toggle_created=toggle_created,
            toggle_inserted=inserted,
        )

    def toggle(self, node: Tag) -> RenderState:
        """Flip *node* between its collapsed and expanded form."""
        state = self._states.get(node)
        if state is None:
            msg = "Node was never rendered"
            raise KeyError(msg)

        state.is_expanded = not state.is_expanded
        self._document.set_text(node, state.displayed_text)
        self._document.set_attribute(node, ATTR_EXPANDED, "1" if state.is_expanded else "0")

        button = state.toggle
        if button is not None:
            label = self.labels.show_less if state.is_expanded else self.labels.show_more
            self._document.set_text(button, label)
        return state

    def _make_toggle(self, node: Tag) -> Tag:
        button = self._document.create_element(
            "button",
            {"type": "button", "class": TOGGLE_CLASS, "style": TOGGLE_STYLE},
            text=self.labels.show_more,
        )
        node_ref = weakref.ref(node)

        def _on_click(event: DomEvent) -> None:
            event.stop_propagation()
            target = node_ref()
            if target is not None:
                self.toggle(target)

        self._document.add_event_listener(button, "click", _on_click)
        return button

    def _write_markers(self, node: Tag, state: RenderState) -> None:
        self._document.set_attribute(node, ATTR_FULL, state.full_text)
        self._document.set_attribute(node, ATTR_SHORT, state.short_text)
        self._document.set_attribute(node, ATTR_EXPANDED, "0")
