"""In-memory stand-in for the host page's live DOM.

Wraps a BeautifulSoup tree and exposes only what the cleaning pipeline and a
host page need: selection, text and sibling writes that produce mutation
records, attribute markers and bubbling click dispatch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup, Tag

from talkback_cleaner.core.identity import WeakIdentityMap
from talkback_cleaner.dom.events import DomEvent, EventHandler
from talkback_cleaner.dom.mutations import MutationObserver, MutationRecord

if TYPE_CHECKING:
    from pathlib import Path


class LiveDocument:
    def __init__(self, html: str, *, url: str = "about:blank", parser: str = "lxml") -> None:
        self._soup = BeautifulSoup(html, parser)
        self.url = url
        self._observers: list[MutationObserver] = []
        # element -> {event type -> handlers}
        self._listeners: WeakIdentityMap[Tag, dict[str, list[EventHandler]]] = WeakIdentityMap()

    @classmethod
    def from_file(cls, path: Path, *, url: str = "about:blank") -> LiveDocument:
        return cls(path.read_text(encoding="utf-8"), url=url)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    @property
    def root(self) -> BeautifulSoup:
        return self._soup

    @property
    def body(self) -> Tag | None:
        return self._soup.find("body")

    @property
    def lang(self) -> str:
        html = self._soup.find("html")
        if html is None:
            return ""
        value = html.get("lang", "")
        return value if isinstance(value, str) else " ".join(value)

    def select(self, selector: str) -> list[Tag]:
        """All elements matching *selector*, in document order."""
        return list(self._soup.select(selector))

    def select_one(self, selector: str) -> Tag | None:
        return self._soup.select_one(selector)

    def to_html(self) -> str:
        return str(self._soup)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    def create_element(
        self, name: str, attrs: dict[str, str] | None = None, *, text: str | None = None
    ) -> Tag:
        return self._soup.new_tag(name, attrs=attrs or {}, string=text)

    def set_text(self, node: Tag, text: str) -> None:
        """Replace all children of *node* with a single text node."""
        removed = tuple(node.contents)
        node.string = text
        self._notify(MutationRecord(node, added_nodes=tuple(node.contents), removed_nodes=removed))

    def set_attribute(self, node: Tag, name: str, value: str) -> None:
        node[name] = value

    def insert_after(self, node: Tag, new: Tag) -> bool:
        """Insert *new* right after *node*; returns False when *node* is detached."""
        parent = node.parent
        if parent is None:
            return False
        node.insert_after(new)
        self._notify(MutationRecord(parent, added_nodes=(new,)))
        return True

    def append(self, parent: Tag, child: Tag) -> None:
        parent.append(child)
        self._notify(MutationRecord(parent, added_nodes=(child,)))

    def append_html(self, parent: Tag, html: str) -> list[Any]:
        """Parse an HTML fragment and append its nodes to *parent*, as one mutation."""
        fragment = BeautifulSoup(html, "html.parser")
        added = list(fragment.contents)
        for child in added:
            parent.append(child)
        if added:
            self._notify(MutationRecord(parent, added_nodes=tuple(added)))
        return added

    def remove(self, node: Tag) -> None:
        parent = node.parent
        if parent is None:
            return
        node.extract()
        self._notify(MutationRecord(parent, removed_nodes=(node,)))

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def attach_observer(self, observer: MutationObserver) -> None:
        if not any(existing is observer for existing in self._observers):
            self._observers.append(observer)

    def detach_observer(self, observer: MutationObserver) -> None:
        self._observers = [existing for existing in self._observers if existing is not observer]

    def _notify(self, record: MutationRecord) -> None:
        for observer in list(self._observers):
            if observer.wants(record):
                observer.enqueue(record)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def add_event_listener(self, node: Tag, event_type: str, handler: EventHandler) -> None:
        by_type = self._listeners.get(node)
        if by_type is None:
            by_type = {}
            self._listeners[node] = by_type
        by_type.setdefault(event_type, []).append(handler)

    def dispatch(self, target: Tag, event_type: str) -> DomEvent:
        """Run listeners from *target* up through its ancestors until one stops propagation."""
        event = DomEvent(type=event_type, target=target)
        for node in (target, *target.parents):
            event.path.append(node)
            handlers = (self._listeners.get(node) or {}).get(event_type, [])
            event.current_target = node
            for handler in list(handlers):
                handler(event)
            if event.propagation_stopped:
                break
        event.current_target = None
        return event

    def click(self, target: Tag) -> DomEvent:
        return self.dispatch(target, "click")
