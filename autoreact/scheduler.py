from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Protocol

from autoreact.config import MAX_RANDOM_LEVEL, ReactionPolicy
from autoreact.models import ChatType, IncomingMessage, ScheduledReaction

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]

PRIVATE_DELAY_MS = (2000, 6000)
CHANNEL_DELAY_MS = (10000, 25000)
GROUP_DELAY_MS = (8000, 20000)
JITTER_STEP_MS = 300


class ReactionSender(Protocol):
    async def set_message_reaction(self, chat_id: int, message_id: int, emoji: str) -> bool:
        ...


class ReactionScheduler:
    def __init__(
        self,
        policy: ReactionPolicy,
        rng: random.Random | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.policy = policy
        self.rng = rng or random.Random()
        self._sleep = sleep
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def is_restricted(self, chat_id: int) -> bool:
        return chat_id in self.policy.restricted_chat_ids

    def should_react(self, chat_type: str) -> bool:
        if chat_type == ChatType.PRIVATE.value:
            return True
        threshold = 1 - self.policy.random_level / MAX_RANDOM_LEVEL
        return self.rng.random() <= threshold

    def pick_reaction(self) -> str:
        return self.rng.choice(self.policy.reactions)

    def delay_bounds(self, chat_type: str) -> tuple[int, int]:
        if self.policy.delay_override_ms:
            return self.policy.delay_override_ms
        if chat_type == ChatType.PRIVATE.value:
            return PRIVATE_DELAY_MS
        if chat_type == ChatType.CHANNEL.value:
            return CHANNEL_DELAY_MS
        return GROUP_DELAY_MS

    def pick_delay_ms(self, chat_type: str) -> int:
        delay_min, delay_max = self.delay_bounds(chat_type)
        base = self.rng.randint(delay_min, delay_max)
        jitter_cap = self.policy.random_level * JITTER_STEP_MS
        jitter = self.rng.randrange(jitter_cap) if jitter_cap > 0 else 0
        return base + jitter

    def plan(self, message: IncomingMessage, bot_id: str | None = None) -> ScheduledReaction | None:
        if self.is_restricted(message.chat_id):
            return None
        emoji = self.pick_reaction()
        if not self.should_react(message.chat_type):
            logger.debug(
                "reaction_skipped",
                extra={
                    "action": "react",
                    "bot_id": bot_id,
                    "chat_id": message.chat_id,
                    "message_id": message.message_id,
                    "chat_type": message.chat_type,
                    "decision": "skip",
                    "reason": "probability_gate",
                },
            )
            return None
        return ScheduledReaction(
            chat_id=message.chat_id,
            message_id=message.message_id,
            emoji=emoji,
            delay_ms=self.pick_delay_ms(message.chat_type),
            chat_type=message.chat_type,
            bot_id=bot_id,
        )

    def schedule(self, api: ReactionSender, reaction: ScheduledReaction) -> asyncio.Task[None]:
        task = asyncio.create_task(
            self._run(api, reaction),
            name=f"reaction-{reaction.chat_id}-{reaction.message_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info("reaction_scheduled", extra=_reaction_extra(reaction))
        return task

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_pending(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, api: ReactionSender, reaction: ScheduledReaction) -> None:
        try:
            await self._sleep(reaction.delay_ms / 1000)
            await api.set_message_reaction(reaction.chat_id, reaction.message_id, reaction.emoji)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("reaction_failed", extra=_reaction_extra(reaction))
            return
        logger.info("reaction_sent", extra=_reaction_extra(reaction))


def _reaction_extra(reaction: ScheduledReaction) -> dict[str, object]:
    return {
        "action": "react",
        "bot_id": reaction.bot_id,
        "chat_id": reaction.chat_id,
        "message_id": reaction.message_id,
        "chat_type": reaction.chat_type or None,
        "emoji": reaction.emoji,
        "delay_ms": reaction.delay_ms,
    }
