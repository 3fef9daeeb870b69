from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._validators import parse_codepoint_set, validate_int_bounds

# Zero-width joiners/spaces, BOM, soft hyphen, Mongolian vowel separator,
# Hangul fillers and the word-joiner block.
DEFAULT_INVISIBLE_CHARS = "115F,1160,200B-200F,FEFF,180E,2060-2064,00AD"


class CleanerConfig(BaseModel):
    """Text cleaning configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    invisible_chars: tuple[str, ...] = Field(
        default=parse_codepoint_set(DEFAULT_INVISIBLE_CHARS),
        validation_alias="INVISIBLE_CHARS",
        description="Codepoints stripped from comments (hex, comma-separated, A-B ranges)",
    )
    max_blank_lines: int = Field(
        default=2,
        validation_alias="MAX_CONSEC_BLANKS",
        description="Maximum consecutive blank lines kept inside a comment",
    )

    @field_validator("invisible_chars", mode="before")
    @classmethod
    def _parse_invisible_chars(cls, value: Any) -> tuple[str, ...]:
        if value in (None, ""):
            return parse_codepoint_set(DEFAULT_INVISIBLE_CHARS)
        return parse_codepoint_set(value)

    @field_validator("max_blank_lines", mode="before")
    @classmethod
    def _validate_max_blank_lines(cls, value: Any) -> int:
        return validate_int_bounds(
            value, name="Max consecutive blank lines", default=2, low=0, high=50
        )
