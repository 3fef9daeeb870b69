from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class DomEvent:
    type: str
    target: Any
    current_target: Any = None
    propagation_stopped: bool = False
    path: list[Any] = field(default_factory=list)

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


EventHandler = Callable[[DomEvent], None]
