"""Child-list mutation records and subtree observers for ``LiveDocument``."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bs4 import Tag

    from talkback_cleaner.dom.document import LiveDocument


@dataclass(frozen=True, slots=True)
class MutationRecord:
    target: Tag
    added_nodes: tuple[Any, ...] = ()
    removed_nodes: tuple[Any, ...] = ()
    type: str = "childList"


MutationCallback = Callable[[list["MutationRecord"], "MutationObserver"], None]


def is_inclusive_ancestor(root: Tag, node: Tag) -> bool:
    if node is root:
        return True
    # bs4 compares tags by markup, so membership must be checked by identity
    return any(parent is root for parent in node.parents)


class MutationObserver:
    """Collects records for a subtree and hands them to *callback* in batches.

    Inside a running event loop delivery is deferred with ``call_soon`` so a
    burst of synchronous mutations arrives as one batch; without a loop each
    record is delivered immediately.
    """

    def __init__(self, callback: MutationCallback) -> None:
        self._callback = callback
        self._document: LiveDocument | None = None
        self._root: Tag | None = None
        self._subtree = True
        self._records: list[MutationRecord] = []
        self._flush_scheduled = False

    @property
    def root(self) -> Tag | None:
        return self._root

    def observe(self, document: LiveDocument, root: Tag, *, subtree: bool = True) -> None:
        if self._document is not None:
            self._document.detach_observer(self)
        self._document = document
        self._root = root
        self._subtree = subtree
        document.attach_observer(self)

    def disconnect(self) -> None:
        if self._document is not None:
            self._document.detach_observer(self)
        self._document = None
        self._root = None
        self._records.clear()

    def take_records(self) -> list[MutationRecord]:
        records, self._records = self._records, []
        return records

    def wants(self, record: MutationRecord) -> bool:
        if self._root is None:
            return False
        if not self._subtree:
            return record.target is self._root
        return is_inclusive_ancestor(self._root, record.target)

    def enqueue(self, record: MutationRecord) -> None:
        self._records.append(record)
        if self._flush_scheduled:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._flush()
            return
        self._flush_scheduled = True
        loop.call_soon(self._flush)

    def _flush(self) -> None:
        self._flush_scheduled = False
        records = self.take_records()
        if records:
            self._callback(records, self)
