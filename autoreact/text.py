from __future__ import annotations

import re

_SEPARATOR_RE = re.compile(r"[\s,]+")

_ZWJ = "\u200d"
_VS16 = "\ufe0f"
_KEYCAP = "\u20e3"


def _is_skin_tone(char: str) -> bool:
    return "\U0001F3FB" <= char <= "\U0001F3FF"


def _is_regional_indicator(char: str) -> bool:
    return "\U0001F1E6" <= char <= "\U0001F1FF"


def _is_tag(char: str) -> bool:
    return "\U000E0020" <= char <= "\U000E007F"


def _is_extender(char: str) -> bool:
    return char in (_VS16, "\ufe0e", _KEYCAP) or _is_skin_tone(char) or _is_tag(char)


def split_emoji_clusters(text: str) -> list[str]:
    clusters: list[str] = []
    current = ""
    joined = False
    for char in text:
        if not current:
            current = char
            continue
        if joined:
            current += char
            joined = False
            continue
        if char == _ZWJ:
            current += char
            joined = True
            continue
        if _is_extender(char):
            current += char
            continue
        if (
            _is_regional_indicator(char)
            and len(current) == 1
            and _is_regional_indicator(current)
        ):
            current += char
            continue
        clusters.append(current)
        current = char
    if current:
        clusters.append(current)
    return clusters


def split_emojis(raw: str | None) -> list[str]:
    """Parse EMOJI_LIST: either separated by commas/spaces or packed together."""
    if not raw:
        return []
    emojis: list[str] = []
    for token in _SEPARATOR_RE.split(raw.strip()):
        if token:
            emojis.extend(split_emoji_clusters(token))
    return emojis


def parse_chat_ids(raw: str | None) -> list[int]:
    if not raw:
        return []
    chat_ids: list[int] = []
    for token in _SEPARATOR_RE.split(raw.strip()):
        if re.fullmatch(r"-?\d+", token):
            chat_ids.append(int(token))
    return chat_ids


def parse_csv(raw: str | None) -> list[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]
