from __future__ import annotations

import asyncio
from typing import Any


class FakeBotApi:
    def __init__(self, fail_reaction: bool = False, fail_send: bool = False) -> None:
        self.fail_reaction = fail_reaction
        self.fail_send = fail_send
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    @property
    def reactions(self) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == "set_message_reaction"]

    @property
    def messages(self) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == "send_message"]

    async def send_message(self, chat_id: str | int, text: str, keyboard: Any = None) -> dict[str, Any]:
        self.calls.append(("send_message", (chat_id, text, keyboard)))
        if self.fail_send:
            raise RuntimeError("telegram_bot_api_error:sendMessage:Forbidden")
        return {"message_id": 1}

    async def send_invoice(self, *args: Any) -> dict[str, Any]:
        self.calls.append(("send_invoice", args))
        return {"message_id": 2}

    async def set_message_reaction(self, chat_id: int, message_id: int, emoji: str) -> bool:
        self.calls.append(("set_message_reaction", (chat_id, message_id, emoji)))
        if self.fail_reaction:
            raise RuntimeError("telegram_bot_api_error:setMessageReaction:REACTION_INVALID")
        return True

    async def answer_pre_checkout_query(self, query_id: str, ok: bool) -> bool:
        self.calls.append(("answer_pre_checkout_query", (query_id, ok)))
        return True


async def no_sleep(_: float) -> None:
    await asyncio.sleep(0)


def message_update(
    chat_id: int = 42,
    message_id: int = 7,
    chat_type: str = "private",
    text: str | None = "hello",
    first_name: str = "Ann",
    title: str | None = None,
    channel_post: bool = False,
) -> dict[str, Any]:
    chat: dict[str, Any] = {"id": chat_id, "type": chat_type}
    if title is not None:
        chat["title"] = title
    content: dict[str, Any] = {"message_id": message_id, "chat": chat}
    if text is not None:
        content["text"] = text
    if not channel_post:
        content["from"] = {"id": 1000, "first_name": first_name}
    return {"update_id": 1, "channel_post" if channel_post else "message": content}
