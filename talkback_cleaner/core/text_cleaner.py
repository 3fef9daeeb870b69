"""Idempotent cleaning of user-submitted comment text.

Spam comments pad their text with zero-width and formatting characters and
with long runs of blank lines. Cleaning strips the former, caps the latter
and trims the result; cleaning already-cleaned text is a no-op.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from talkback_cleaner.config import DEFAULT_INVISIBLE_CHARS, CleanerConfig, parse_codepoint_set

_NEWLINE_RE = re.compile(r"\r\n?")


@dataclass(frozen=True, slots=True)
class CleaningResult:
    cleaned_text: str
    invisible_chars_removed: int
    blank_runs_collapsed: int
    line_count_before: int
    line_count_after: int
    length_before: int
    length_after: int

    @property
    def changed(self) -> bool:
        return self.invisible_chars_removed > 0 or self.blank_runs_collapsed > 0


def count_lines(text: str) -> int:
    """Number of LF-separated lines; empty text has none."""
    return text.count("\n") + 1 if text else 0


def collapse_blank_runs(lines: Iterable[str], max_blank: int) -> tuple[list[str], int]:
    """Keep at most *max_blank* consecutive blank lines.

    Blank (whitespace-only) lines are emitted as empty strings. Returns the
    surviving lines and the number of runs that had to be shortened.
    """
    out: list[str] = []
    collapsed_runs = 0
    blank_count = 0
    for line in lines:
        if line.strip():
            blank_count = 0
            out.append(line)
            continue
        blank_count += 1
        if blank_count <= max_blank:
            out.append("")
        elif blank_count == max_blank + 1:
            collapsed_runs += 1
    return out, collapsed_runs


class TextCleaner:
    """Strips a configurable set of invisible characters and excess blank lines."""

    def __init__(
        self,
        invisible_chars: Iterable[str] | None = None,
        *,
        max_blank_lines: int = 2,
    ) -> None:
        if max_blank_lines < 0:
            msg = "max_blank_lines must not be negative"
            raise ValueError(msg)
        self.max_blank_lines = max_blank_lines
        self._invisible: frozenset[str] = frozenset()
        self._invisible_re: re.Pattern[str] | None = None
        if invisible_chars is None:
            invisible_chars = parse_codepoint_set(DEFAULT_INVISIBLE_CHARS)
        self.add_invisible_chars(*invisible_chars)

    @classmethod
    def from_config(cls, config: CleanerConfig) -> TextCleaner:
        return cls(config.invisible_chars, max_blank_lines=config.max_blank_lines)

    @property
    def invisible_chars(self) -> frozenset[str]:
        return self._invisible

    def add_invisible_chars(self, *chars: str) -> None:
        """Extend the stripped set, e.g. when a new spam character shows up."""
        extra = {c for c in chars if c}
        bad = [c for c in extra if len(c) != 1 or c == "\n"]
        if bad:
            msg = f"Invisible characters must be single non-newline characters: {bad!r}"
            raise ValueError(msg)
        self._invisible = self._invisible | extra
        if self._invisible:
            body = "".join(re.escape(c) for c in sorted(self._invisible))
            self._invisible_re = re.compile(f"[{body}]")
        else:
            self._invisible_re = None

    def clean(self, raw: str) -> CleaningResult:
        text = _NEWLINE_RE.sub("\n", raw or "")

        invisible_removed = 0
        if self._invisible_re is not None:
            text, invisible_removed = self._invisible_re.subn("", text)

        lines = text.split("\n") if text else []
        kept, collapsed_runs = collapse_blank_runs(lines, self.max_blank_lines)
        cleaned = "\n".join(kept).strip()

        return CleaningResult(
            cleaned_text=cleaned,
            invisible_chars_removed=invisible_removed,
            blank_runs_collapsed=collapsed_runs,
            line_count_before=len(lines),
            line_count_after=count_lines(cleaned),
            length_before=len(raw or ""),
            length_after=len(cleaned),
        )


_default_cleaner: TextCleaner | None = None


def clean_comment(raw: str) -> CleaningResult:
    """Clean *raw* with the default character set and blank-line limit."""
    global _default_cleaner
    if _default_cleaner is None:
        _default_cleaner = TextCleaner()
    return _default_cleaner.clean(raw)
