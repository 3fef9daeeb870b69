"""Preview render state attached to a processed comment."""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class RenderState:
    """Both text forms of a comment and whether the full form is showing.

    Only the preview renderer's toggle handler mutates ``is_expanded``. The
    toggle control is held weakly so the state never keeps a removed comment
    (reachable through the control's parent) alive.
    """

    full_text: str
    short_text: str
    is_expanded: bool = False
    toggle_ref: weakref.ReferenceType[Any] | None = None

    @property
    def displayed_text(self) -> str:
        return self.full_text if self.is_expanded else self.short_text

    @property
    def toggle(self) -> Any | None:
        return self.toggle_ref() if self.toggle_ref is not None else None


@dataclass(frozen=True, slots=True)
class RenderOutcome:
    displayed_text: str
    toggle_created: bool
    toggle_inserted: bool = False
