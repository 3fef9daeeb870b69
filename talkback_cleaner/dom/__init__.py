from __future__ import annotations

from .document import LiveDocument
from .events import DomEvent
from .mutations import MutationObserver, MutationRecord

__all__ = ["DomEvent", "LiveDocument", "MutationObserver", "MutationRecord"]
