from __future__ import annotations

from typing import Any, Mapping

from autoreact.models import ClassifiedUpdate, IncomingMessage, PreCheckoutQuery, UpdateKind

_IGNORED = ClassifiedUpdate(UpdateKind.IGNORED)


def classify_update(update: Any, bot_username: str = "") -> ClassifiedUpdate:
    if not isinstance(update, Mapping):
        return _IGNORED

    raw_message = update.get("message")
    content = raw_message or update.get("channel_post")
    if content:
        message = _extract_message(content, is_channel_post=not raw_message)
        if message is None:
            return _IGNORED
        return ClassifiedUpdate(_command_kind(message, bot_username), message=message)

    query = update.get("pre_checkout_query")
    if query:
        pre_checkout = _extract_pre_checkout(query)
        if pre_checkout is None:
            return _IGNORED
        return ClassifiedUpdate(UpdateKind.PRE_CHECKOUT, pre_checkout=pre_checkout)

    return _IGNORED


def _command_kind(message: IncomingMessage, bot_username: str) -> UpdateKind:
    if message.is_channel_post:
        return UpdateKind.REACT
    text = message.text
    if text == "/start" or (bot_username and text == f"/start@{bot_username}"):
        return UpdateKind.START
    if text == "/reactions":
        return UpdateKind.REACTIONS
    if text in ("/donate", "/start donate"):
        return UpdateKind.DONATE
    return UpdateKind.REACT


def _extract_message(content: Any, is_channel_post: bool) -> IncomingMessage | None:
    if not isinstance(content, Mapping):
        return None
    chat = content.get("chat")
    sender = content.get("from")
    if not isinstance(chat, Mapping):
        chat = {}
    if not isinstance(sender, Mapping):
        sender = {}
    chat_id = chat.get("id")
    message_id = content.get("message_id")
    if not isinstance(chat_id, int) or not isinstance(message_id, int):
        return None
    text = content.get("text")
    return IncomingMessage(
        chat_id=chat_id,
        message_id=message_id,
        chat_type=str(chat.get("type") or ""),
        text=text if isinstance(text, str) else None,
        sender_first_name=sender.get("first_name"),
        chat_title=chat.get("title"),
        is_channel_post=is_channel_post,
    )


def _extract_pre_checkout(query: Any) -> PreCheckoutQuery | None:
    if not isinstance(query, Mapping):
        return None
    query_id = query.get("id")
    payer = query.get("from")
    payer_id = payer.get("id") if isinstance(payer, Mapping) else None
    if query_id is None or not isinstance(payer_id, int):
        return None
    return PreCheckoutQuery(query_id=str(query_id), payer_id=payer_id)
