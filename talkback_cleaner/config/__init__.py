from __future__ import annotations

from ._validators import parse_codepoint_set, parse_selector_list
from .cleaner import DEFAULT_INVISIBLE_CHARS, CleanerConfig
from .observer import ObserverConfig
from .preview import PreviewConfig
from .runtime import RuntimeConfig
from .settings import AppConfig, Settings, load_config

__all__ = [
    "DEFAULT_INVISIBLE_CHARS",
    "AppConfig",
    "CleanerConfig",
    "ObserverConfig",
    "PreviewConfig",
    "RuntimeConfig",
    "Settings",
    "load_config",
    "parse_codepoint_set",
    "parse_selector_list",
]
