from __future__ import annotations

import logging
from typing import Any, Protocol

from autoreact.classifier import classify_update
from autoreact.config import ReactionPolicy
from autoreact.messages import (
    DONATE_CURRENCY,
    DONATE_MESSAGE,
    DONATE_PAYLOAD,
    DONATE_PRICES,
    DONATE_PROVIDER_TOKEN,
    DONATE_START_PARAMETER,
    DONATE_TITLE,
    THANK_YOU_MESSAGE,
    format_reactions_message,
    format_start_message,
    start_keyboard,
)
from autoreact.models import IncomingMessage, PreCheckoutQuery, UpdateKind
from autoreact.scheduler import ReactionScheduler

logger = logging.getLogger(__name__)


class BotClient(Protocol):
    async def send_message(
        self,
        chat_id: str | int,
        text: str,
        keyboard: list[list[dict[str, str]]] | None = None,
    ) -> Any:
        ...

    async def send_invoice(
        self,
        chat_id: str | int,
        title: str,
        description: str,
        payload: str,
        provider_token: str,
        start_parameter: str,
        currency: str,
        prices: list[dict[str, Any]],
    ) -> Any:
        ...

    async def set_message_reaction(self, chat_id: int, message_id: int, emoji: str) -> bool:
        ...

    async def answer_pre_checkout_query(self, query_id: str, ok: bool) -> bool:
        ...


async def handle_update(
    update: Any,
    api: BotClient,
    policy: ReactionPolicy,
    bot_username: str = "",
    scheduler: ReactionScheduler | None = None,
    bot_id: str | None = None,
) -> None:
    try:
        classified = classify_update(update, bot_username)
        if classified.kind is UpdateKind.IGNORED:
            logger.debug("update_ignored", extra={"action": "classify", "decision": "ignored"})
            return
        if classified.kind is UpdateKind.PRE_CHECKOUT and classified.pre_checkout:
            await _handle_pre_checkout(api, classified.pre_checkout)
            return

        message = classified.message
        if message is None:
            return
        if classified.kind is UpdateKind.START:
            await _send_start(api, message, bot_username)
        elif classified.kind is UpdateKind.REACTIONS:
            await _send_reactions(api, message, policy)
        elif classified.kind is UpdateKind.DONATE:
            await _send_donate_invoice(api, message)
        else:
            _react(api, message, scheduler or ReactionScheduler(policy), bot_id)
    except Exception:
        logger.exception("update_failed", extra={"action": "handle_update", "bot_id": bot_id})


def _react(api: BotClient, message: IncomingMessage, scheduler: ReactionScheduler, bot_id: str | None) -> None:
    reaction = scheduler.plan(message, bot_id)
    if reaction is None:
        return
    scheduler.schedule(api, reaction)


async def _send_start(api: BotClient, message: IncomingMessage, bot_username: str) -> None:
    name = message.sender_first_name if message.is_private else message.chat_title
    try:
        await api.send_message(message.chat_id, format_start_message(name), start_keyboard(bot_username))
    except Exception:
        logger.exception(
            "start_message_failed",
            extra={"action": "start", "chat_id": message.chat_id, "message_id": message.message_id},
        )


async def _send_reactions(api: BotClient, message: IncomingMessage, policy: ReactionPolicy) -> None:
    try:
        await api.send_message(message.chat_id, format_reactions_message(policy.reactions))
    except Exception:
        logger.exception(
            "reactions_message_failed",
            extra={"action": "reactions", "chat_id": message.chat_id, "message_id": message.message_id},
        )


async def _send_donate_invoice(api: BotClient, message: IncomingMessage) -> None:
    try:
        await api.send_invoice(
            message.chat_id,
            DONATE_TITLE,
            DONATE_MESSAGE,
            DONATE_PAYLOAD,
            DONATE_PROVIDER_TOKEN,
            DONATE_START_PARAMETER,
            DONATE_CURRENCY,
            [dict(price) for price in DONATE_PRICES],
        )
    except Exception:
        logger.exception(
            "donate_invoice_failed",
            extra={"action": "donate", "chat_id": message.chat_id, "message_id": message.message_id},
        )


async def _handle_pre_checkout(api: BotClient, query: PreCheckoutQuery) -> None:
    try:
        await api.answer_pre_checkout_query(query.query_id, True)
        await api.send_message(query.payer_id, THANK_YOU_MESSAGE)
    except Exception:
        logger.exception(
            "pre_checkout_failed",
            extra={"action": "pre_checkout", "chat_id": query.payer_id, "query_id": query.query_id},
        )
        return
    logger.info("donation_received", extra={"action": "pre_checkout", "chat_id": query.payer_id})
