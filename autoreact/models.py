from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ChatType(str, Enum):
    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"


class UpdateKind(str, Enum):
    IGNORED = "ignored"
    START = "start"
    REACTIONS = "reactions"
    DONATE = "donate"
    REACT = "react"
    PRE_CHECKOUT = "pre_checkout"


@dataclass(slots=True)
class IncomingMessage:
    chat_id: int
    message_id: int
    chat_type: str
    text: str | None = None
    sender_first_name: str | None = None
    chat_title: str | None = None
    is_channel_post: bool = False

    @property
    def is_private(self) -> bool:
        return self.chat_type == ChatType.PRIVATE.value


@dataclass(slots=True)
class PreCheckoutQuery:
    query_id: str
    payer_id: int


@dataclass(slots=True)
class ClassifiedUpdate:
    kind: UpdateKind
    message: IncomingMessage | None = None
    pre_checkout: PreCheckoutQuery | None = None


@dataclass(slots=True)
class ScheduledReaction:
    chat_id: int
    message_id: int
    emoji: str
    delay_ms: int
    chat_type: str = ""
    bot_id: str | None = None
