from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._validators import validate_int_bounds


class PreviewConfig(BaseModel):
    """Collapsed preview and toggle control configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    preview_lines: int = Field(
        default=5,
        validation_alias="PREVIEW_LINES",
        description="Lines shown before a comment is collapsed behind a toggle",
    )
    ellipsis: str = Field(default="…", validation_alias="PREVIEW_ELLIPSIS")
    preferred_lang: str = Field(default="auto", validation_alias="PREFERRED_LANG")

    @field_validator("preview_lines", mode="before")
    @classmethod
    def _validate_preview_lines(cls, value: Any) -> int:
        return validate_int_bounds(value, name="Preview lines", default=5, low=1, high=1000)

    @field_validator("ellipsis", mode="before")
    @classmethod
    def _validate_ellipsis(cls, value: Any) -> str:
        marker = str(value or "…").strip()
        if not marker:
            return "…"
        if "\n" in marker or "\r" in marker:
            msg = "Preview ellipsis must be a single line"
            raise ValueError(msg)
        return marker

    @field_validator("preferred_lang", mode="before")
    @classmethod
    def _validate_lang(cls, value: Any) -> str:
        lang = str(value or "auto").lower()
        if lang not in {"auto", "en", "he"}:
            msg = f"Invalid language: {lang}. Must be one of {{'auto', 'en', 'he'}}"
            raise ValueError(msg)
        return lang
