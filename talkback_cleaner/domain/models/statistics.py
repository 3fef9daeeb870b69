"""Run statistics for batch passes.

A pass builds its own ``RunStatistics`` and the processor merges it into the
running total; both are immutable values, so a snapshot handed to a caller
never changes underneath it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class RunStatistics:
    nodes_seen: int = 0
    nodes_processed: int = 0
    invisible_chars_removed: int = 0
    blank_runs_collapsed: int = 0
    previews_created: int = 0

    def __add__(self, other: RunStatistics) -> RunStatistics:
        if not isinstance(other, RunStatistics):
            return NotImplemented
        return RunStatistics(
            nodes_seen=self.nodes_seen + other.nodes_seen,
            nodes_processed=self.nodes_processed + other.nodes_processed,
            invisible_chars_removed=self.invisible_chars_removed + other.invisible_chars_removed,
            blank_runs_collapsed=self.blank_runs_collapsed + other.blank_runs_collapsed,
            previews_created=self.previews_created + other.previews_created,
        )

    def bump(self, **deltas: int) -> RunStatistics:
        """Return a copy with the named counters increased by *deltas*."""
        return replace(self, **{name: getattr(self, name) + delta for name, delta in deltas.items()})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
