from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from autoreact.text import parse_chat_ids, parse_csv, split_emojis

DEFAULT_REACTIONS: tuple[str, ...] = (
    "👍",
    "❤",
    "🔥",
    "🥰",
    "👏",
    "😁",
    "🎉",
    "🤩",
    "🙏",
    "👌",
    "🕊",
    "😍",
    "🐳",
    "❤‍🔥",
    "💯",
    "⚡",
    "🏆",
)

MAX_RANDOM_LEVEL = 10


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _parse_random_level(value: Optional[str]) -> int:
    level = _parse_int(value)
    if level is None:
        return 0
    return max(0, min(MAX_RANDOM_LEVEL, level))


def resolve_delay_override(
    min_ms: Optional[int], max_ms: Optional[int]
) -> Optional[tuple[int, int]]:
    if min_ms is None or max_ms is None or max_ms < min_ms:
        return None
    return (min_ms, max_ms)


@dataclass(frozen=True, slots=True)
class ReactionPolicy:
    reactions: tuple[str, ...]
    restricted_chat_ids: frozenset[int] = frozenset()
    random_level: int = 0
    delay_override_ms: Optional[tuple[int, int]] = None


@dataclass(slots=True)
class Settings:
    bot_token: Optional[str] = None
    bot_username: str = ""
    bot_tokens: tuple[str, ...] = ()
    bot_usernames: tuple[str, ...] = ()

    reactions: tuple[str, ...] = DEFAULT_REACTIONS
    restricted_chat_ids: tuple[int, ...] = ()
    random_level: int = 0
    react_delay_min_ms: Optional[int] = None
    react_delay_max_ms: Optional[int] = None

    host: str = "0.0.0.0"
    port: int = 3000
    webhook_base_url: Optional[str] = None
    webhook_secret: Optional[str] = None
    log_level: str = "INFO"
    environment: str = "development"
    api_timeout_sec: float = 15.0

    def reaction_policy(self) -> ReactionPolicy:
        return ReactionPolicy(
            reactions=self.reactions or DEFAULT_REACTIONS,
            restricted_chat_ids=frozenset(self.restricted_chat_ids),
            random_level=max(0, min(MAX_RANDOM_LEVEL, self.random_level)),
            delay_override_ms=resolve_delay_override(self.react_delay_min_ms, self.react_delay_max_ms),
        )

    @classmethod
    def from_env(cls) -> "Settings":
        reactions = tuple(split_emojis(os.environ.get("EMOJI_LIST")))
        return cls(
            bot_token=(os.environ.get("BOT_TOKEN") or "").strip() or None,
            bot_username=os.environ.get("BOT_USERNAME", "").strip().lstrip("@"),
            bot_tokens=tuple(parse_csv(os.environ.get("BOT_TOKENS"))),
            bot_usernames=tuple(name.lstrip("@") for name in parse_csv(os.environ.get("BOT_USERNAMES"))),
            reactions=reactions or DEFAULT_REACTIONS,
            restricted_chat_ids=tuple(parse_chat_ids(os.environ.get("RESTRICTED_CHATS"))),
            random_level=_parse_random_level(os.environ.get("RANDOM_LEVEL")),
            react_delay_min_ms=_parse_int(os.environ.get("REACT_DELAY_MIN_MS")),
            react_delay_max_ms=_parse_int(os.environ.get("REACT_DELAY_MAX_MS")),
            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "3000")),
            webhook_base_url=(os.environ.get("WEBHOOK_BASE_URL") or "").strip().rstrip("/") or None,
            webhook_secret=(os.environ.get("WEBHOOK_SECRET") or "").strip() or None,
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            environment=os.environ.get("ENVIRONMENT", "development"),
            api_timeout_sec=float(os.environ.get("API_TIMEOUT_SEC", "15")),
        )
