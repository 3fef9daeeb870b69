"""Pipeline log verbosity.

Three levels:
- OFF: only errors are logged
- SUMMARY (default): one run summary after each batch pass
- VERBOSE: the summary plus a detail record for every processed comment
"""

from __future__ import annotations

import enum
import logging
from typing import Any

logger = logging.getLogger(__name__)


class LogVerbosity(enum.Enum):
    OFF = "off"
    SUMMARY = "summary"
    VERBOSE = "verbose"

    @classmethod
    def parse(cls, raw: Any) -> LogVerbosity:
        """Return the level named by *raw*, falling back to SUMMARY."""
        if isinstance(raw, cls):
            return raw
        value = str(raw or "").strip().lower()
        try:
            return cls(value)
        except ValueError:
            logger.debug("verbosity_parse_fallback", extra={"raw": value})
            return cls.SUMMARY

    @property
    def summary_enabled(self) -> bool:
        return self is not LogVerbosity.OFF

    @property
    def verbose_enabled(self) -> bool:
        return self is LogVerbosity.VERBOSE
