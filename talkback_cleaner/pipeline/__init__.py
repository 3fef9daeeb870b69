from __future__ import annotations

from .batch import BatchProcessor
from .bootstrap import CommentCleaner, schedule_startup
from .preview import PreviewRenderer, build_short_form
from .registry import NodeRegistry
from .scheduler import FrameClock, LoopFrameClock, MutationScheduler

__all__ = [
    "BatchProcessor",
    "CommentCleaner",
    "FrameClock",
    "LoopFrameClock",
    "MutationScheduler",
    "NodeRegistry",
    "PreviewRenderer",
    "build_short_form",
    "schedule_startup",
]
