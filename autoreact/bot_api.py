from __future__ import annotations

import json
import logging
from typing import Any

from aiohttp import ClientSession, ClientTimeout

logger = logging.getLogger(__name__)

Keyboard = list[list[dict[str, str]]]


class TelegramAPIError(RuntimeError):
    def __init__(self, method: str, description: str, error_code: int | None = None) -> None:
        super().__init__(f"telegram_bot_api_error:{method}:{description}")
        self.method = method
        self.description = description
        self.error_code = error_code


class TelegramBotAPI:
    def __init__(
        self,
        token: str,
        timeout_sec: float = 15.0,
        session: ClientSession | None = None,
        api_base: str = "https://api.telegram.org",
    ) -> None:
        token = (token or "").strip()
        if not token:
            raise ValueError("bot_token_required")
        self.token = token
        self.timeout_sec = timeout_sec
        self._api_base = f"{api_base.rstrip('/')}/bot{token}"
        self._session = session
        self._owns_session = session is None

    @property
    def bot_id(self) -> str:
        return self.token.split(":", 1)[0]

    async def close(self) -> None:
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None

    async def send_message(
        self,
        chat_id: str | int,
        text: str,
        keyboard: Keyboard | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        if keyboard:
            payload["reply_markup"] = {"inline_keyboard": keyboard}
        result = await self._api_call("sendMessage", payload)
        return result if isinstance(result, dict) else {}

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
    ) -> dict[str, Any]:
        body = {
            "chat_id": chat_id,
            "title": title,
            "description": description,
            "payload": payload,
            "provider_token": provider_token,
            "start_parameter": start_parameter,
            "currency": currency,
            "prices": prices,
        }
        result = await self._api_call("sendInvoice", body)
        return result if isinstance(result, dict) else {}

    async def set_message_reaction(self, chat_id: str | int, message_id: int, emoji: str) -> bool:
        payload = {
            "chat_id": chat_id,
            "message_id": message_id,
            "reaction": [{"type": "emoji", "emoji": emoji}],
        }
        return bool(await self._api_call("setMessageReaction", payload))

    async def answer_pre_checkout_query(
        self,
        query_id: str,
        ok: bool,
        error_message: str | None = None,
    ) -> bool:
        payload: dict[str, Any] = {"pre_checkout_query_id": query_id, "ok": ok}
        if error_message:
            payload["error_message"] = error_message
        return bool(await self._api_call("answerPreCheckoutQuery", payload))

    async def get_me(self) -> dict[str, Any]:
        result = await self._api_call("getMe", {})
        return result if isinstance(result, dict) else {}

    async def get_webhook_info(self) -> dict[str, Any]:
        result = await self._api_call("getWebhookInfo", {})
        return result if isinstance(result, dict) else {}

    async def set_webhook(self, url: str, secret_token: str | None = None) -> bool:
        payload: dict[str, Any] = {
            "url": url,
            "allowed_updates": ["message", "channel_post", "pre_checkout_query"],
        }
        if secret_token:
            payload["secret_token"] = secret_token
        return bool(await self._api_call("setWebhook", payload))

    def _ensure_session(self) -> ClientSession:
        if self._session is None:
            self._session = ClientSession(timeout=ClientTimeout(total=self.timeout_sec))
            self._owns_session = True
        return self._session

    async def _api_call(self, method: str, payload: dict[str, Any]) -> Any:
        session = self._ensure_session()
        url = f"{self._api_base}/{method}"
        async with session.post(url, json=payload) as response:
            try:
                data = await response.json(content_type=None)
            except json.JSONDecodeError:
                response.raise_for_status()
                raise TelegramAPIError(method, "invalid_json_response", response.status)
        if not isinstance(data, dict):
            raise TelegramAPIError(method, "invalid_response", response.status)
        if not data.get("ok"):
            description = str(data.get("description") or "unknown_error")
            raise TelegramAPIError(method, description, data.get("error_code"))
        return data.get("result")
