from __future__ import annotations

from typing import Any

from talkback_cleaner.core.identity import WeakIdentityMap


class NodeRegistry:
    """Remembers which comment nodes were already cleaned.

    Membership is by identity and held weakly: a node the host removes and
    drops disappears from the registry on its own.
    """

    def __init__(self) -> None:
        self._processed: WeakIdentityMap[Any, bool] = WeakIdentityMap()

    def __len__(self) -> int:
        return len(self._processed)

    def has_processed(self, node: Any) -> bool:
        return node in self._processed

    def mark_processed(self, node: Any) -> None:
        self._processed[node] = True
