from __future__ import annotations

import re
from typing import Any

_CODEPOINT_RE = re.compile(r"^(?:U\+)?([0-9A-Fa-f]{1,6})$")


def _parse_codepoint(token: str) -> int:
    match = _CODEPOINT_RE.match(token.strip())
    if not match:
        msg = f"Invalid codepoint: {token!r}"
        raise ValueError(msg)
    value = int(match.group(1), 16)
    if value > 0x10FFFF:
        msg = f"Codepoint out of range: {token!r}"
        raise ValueError(msg)
    return value


def parse_codepoint_set(value: Any) -> tuple[str, ...]:
    """Parse ``"200B-200F,FEFF,U+00AD"`` style specs into a sorted tuple of characters.

    Lists and tuples may mix codepoint strings and literal single characters.
    """
    if value in (None, ""):
        return ()
    pieces = value if isinstance(value, list | tuple | set | frozenset) else str(value).split(",")

    chars: set[str] = set()
    for piece in pieces:
        piece = str(piece)
        if len(piece) == 1 and not (piece.isalnum() or piece.isspace()):
            chars.add(piece)
            continue
        piece = piece.strip()
        if not piece:
            continue
        if "-" in piece:
            start_raw, _, end_raw = piece.partition("-")
            start, end = _parse_codepoint(start_raw), _parse_codepoint(end_raw)
            if end < start:
                msg = f"Invalid codepoint range: {piece!r}"
                raise ValueError(msg)
            if end - start > 0xFFFF:
                msg = f"Codepoint range too wide: {piece!r}"
                raise ValueError(msg)
            chars.update(chr(cp) for cp in range(start, end + 1))
        else:
            chars.add(chr(_parse_codepoint(piece)))

    if "\n" in chars:
        msg = "Line feed cannot be configured as an invisible character"
        raise ValueError(msg)
    return tuple(sorted(chars))


def parse_selector_list(value: Any) -> tuple[str, ...]:
    """Split a comma-separated selector list, dropping empty entries."""
    if value in (None, ""):
        return ()
    values = value if isinstance(value, list | tuple) else str(value).split(",")
    return tuple(s for s in (str(v).strip() for v in values) if s)


def validate_int_bounds(value: Any, *, name: str, default: int, low: int, high: int) -> int:
    if value in (None, ""):
        return default
    try:
        parsed = int(str(value))
    except ValueError as exc:
        msg = f"{name} must be a valid integer"
        raise ValueError(msg) from exc
    if parsed < low or parsed > high:
        msg = f"{name} must be between {low} and {high}"
        raise ValueError(msg)
    return parsed
