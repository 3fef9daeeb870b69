"""Identity-keyed mappings that do not keep their keys alive.

bs4 tags hash and compare by markup, so ``weakref.WeakKeyDictionary`` would
conflate two comments with the same text and lose track of a comment once
its text is rewritten. These maps key on ``id()`` and hold only a weak
reference to the key; entries vanish when the key is collected.
"""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class WeakIdentityMap(Generic[K, V]):
    def __init__(self) -> None:
        # id(key) -> (weak ref to key, value)
        self._entries: dict[int, tuple[weakref.ReferenceType[K], V]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(id(key))
        return entry is not None and entry[0]() is key

    def get(self, key: K, default: V | None = None) -> V | None:
        entry = self._entries.get(id(key))
        if entry is None or entry[0]() is not key:
            return default
        return entry[1]

    def __setitem__(self, key: K, value: V) -> None:
        key_id = id(key)
        entries = self._entries

        def _discard(ref: weakref.ReferenceType[K]) -> None:
            current = entries.get(key_id)
            # id() may already be reused by a newer key
            if current is not None and current[0] is ref:
                del entries[key_id]

        self._entries[key_id] = (weakref.ref(key, _discard), value)

    def __delitem__(self, key: K) -> None:
        if key not in self:
            raise KeyError(key)
        del self._entries[id(key)]

    def values(self) -> Iterator[V]:
        for ref, value in list(self._entries.values()):
            if ref() is not None:
                yield value
