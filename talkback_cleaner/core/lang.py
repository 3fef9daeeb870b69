from __future__ import annotations

import re
from dataclasses import dataclass

LANG_EN = "en"
LANG_HE = "he"
LANG_AUTO = "auto"

_HEBREW_TAG_RE = re.compile(r"^(?:he|iw)\b", re.IGNORECASE)


@dataclass(frozen=True)
class ToggleLabels:
    show_more: str
    show_less: str


_LABELS: dict[str, ToggleLabels] = {
    LANG_EN: ToggleLabels(show_more="Show more", show_less="Show less"),
    LANG_HE: ToggleLabels(show_more="הצג עוד", show_less="הצג פחות"),
}


def detect_page_language(lang_attr: str | None) -> str:
    """Map a document ``lang`` attribute to a supported UI language.

    Hebrew tags (``he``, ``he-IL`` and the legacy ``iw``) give 'he', anything
    else 'en'.
    """
    if lang_attr and _HEBREW_TAG_RE.match(lang_attr.strip()):
        return LANG_HE
    return LANG_EN


def choose_language(preferred: str, detected: str) -> str:
    preferred = (preferred or LANG_AUTO).lower()
    detected = (detected or LANG_EN).lower()
    if preferred in _LABELS:
        return preferred
    return detected if detected in _LABELS else LANG_EN


def labels_for(lang: str) -> ToggleLabels:
    return _LABELS.get(lang, _LABELS[LANG_EN])
