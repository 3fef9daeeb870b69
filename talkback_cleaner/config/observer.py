from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ._validators import parse_selector_list, validate_int_bounds


class ObserverConfig(BaseModel):
    """Where comments live in the host page and how often the page is rescanned."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    comment_selector: str = Field(
        default="pre.comment-item-text", validation_alias="COMMENT_SELECTOR"
    )
    root_selectors: tuple[str, ...] = Field(
        default=(".talkback-list-wrapper", ".talkback-list"),
        validation_alias="ROOT_SELECTORS",
        description="Observer root candidates, most specific first",
    )
    page_url_pattern: str = Field(
        default=r"https://news\.walla\.co\.il/item", validation_alias="PAGE_URL_PATTERN"
    )
    frame_interval_ms: int = Field(default=16, validation_alias="FRAME_INTERVAL_MS")
    idle_timeout_ms: int = Field(default=1500, validation_alias="IDLE_TIMEOUT_MS")
    startup_delay_ms: int = Field(default=800, validation_alias="STARTUP_DELAY_MS")

    @field_validator("comment_selector", mode="before")
    @classmethod
    def _validate_selector(cls, value: Any) -> str:
        selector = str(value or "pre.comment-item-text").strip()
        return selector or "pre.comment-item-text"

    @field_validator("root_selectors", mode="before")
    @classmethod
    def _parse_root_selectors(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return (".talkback-list-wrapper", ".talkback-list")
        return parse_selector_list(value)

    @field_validator("page_url_pattern", mode="before")
    @classmethod
    def _validate_pattern(cls, value: Any) -> str:
        pattern = str(value or r"https://news\.walla\.co\.il/item")
        try:
            re.compile(pattern)
        except re.error as exc:
            msg = f"Page URL pattern is not a valid regular expression: {exc}"
            raise ValueError(msg) from exc
        return pattern

    @field_validator("frame_interval_ms", "idle_timeout_ms", "startup_delay_ms", mode="before")
    @classmethod
    def _parse_ms(cls, value: Any, info: ValidationInfo) -> int:
        limits: dict[str, tuple[int, int]] = {
            "frame_interval_ms": (1, 1000),
            "idle_timeout_ms": (0, 60_000),
            "startup_delay_ms": (0, 60_000),
        }
        low, high = limits[info.field_name]
        default = cls.model_fields[info.field_name].default
        return validate_int_bounds(
            value,
            name=info.field_name.replace("_", " ").capitalize(),
            default=default,
            low=low,
            high=high,
        )
