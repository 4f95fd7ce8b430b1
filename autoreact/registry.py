from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from autoreact.bot_api import TelegramBotAPI
from autoreact.config import Settings

logger = logging.getLogger(__name__)

_TOKEN_ID_RE = re.compile(r"^(\d+):")


@dataclass(slots=True)
class BotEntry:
    bot_id: str
    token: str
    username: str
    api: TelegramBotAPI


def bot_id_from_token(token: str) -> str | None:
    match = _TOKEN_ID_RE.match(token)
    return match.group(1) if match else None


def build_registry(
    tokens: tuple[str, ...] | list[str],
    usernames: tuple[str, ...] | list[str] = (),
    fallback_username: str = "",
    timeout_sec: float = 15.0,
) -> dict[str, BotEntry]:
    registry: dict[str, BotEntry] = {}
    for idx, token in enumerate(tokens):
        bot_id = bot_id_from_token(token)
        if not bot_id:
            logger.error(
                "invalid_bot_token_entry",
                extra={"action": "registry", "reason": f"{token[:16]}..."},
            )
            continue
        username = usernames[idx] if idx < len(usernames) and usernames[idx] else fallback_username
        registry[bot_id] = BotEntry(
            bot_id=bot_id,
            token=token,
            username=username,
            api=TelegramBotAPI(token, timeout_sec=timeout_sec),
        )
    return registry


def single_bot_from_settings(settings: Settings) -> BotEntry | None:
    if not settings.bot_token:
        return None
    api = TelegramBotAPI(settings.bot_token, timeout_sec=settings.api_timeout_sec)
    return BotEntry(
        bot_id=bot_id_from_token(settings.bot_token) or api.bot_id,
        token=settings.bot_token,
        username=settings.bot_username,
        api=api,
    )


def registry_from_settings(settings: Settings) -> dict[str, BotEntry]:
    return build_registry(
        settings.bot_tokens,
        settings.bot_usernames,
        fallback_username=settings.bot_username,
        timeout_sec=settings.api_timeout_sec,
    )
