from __future__ import annotations

import hmac
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any

from aiohttp import web

from autoreact.config import ReactionPolicy, Settings
from autoreact.handler import handle_update
from autoreact.messages import render_landing_page
from autoreact.registry import BotEntry
from autoreact.scheduler import ReactionScheduler

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


class WebhookServer:
    def __init__(
        self,
        settings: Settings,
        policy: ReactionPolicy,
        scheduler: ReactionScheduler,
        bots: dict[str, BotEntry] | None = None,
        single_bot: BotEntry | None = None,
    ) -> None:
        self.settings = settings
        self.policy = policy
        self.scheduler = scheduler
        self.bots = bots or {}
        self.single_bot = None if self.bots else single_bot
        self._started_at = time.monotonic()
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    @property
    def multi_mode(self) -> bool:
        return bool(self.bots)

    @property
    def mode(self) -> str:
        return "multi-bot" if self.multi_mode else "single-bot"

    def build_app(self) -> web.Application:
        app = web.Application(middlewares=[self._secret_middleware])
        routes = [web.get("/", self._index)]
        if self.single_bot:
            routes.append(web.post("/", self._single_webhook))
        routes += [
            web.get("/health", self._health),
            web.post("/webhook/{bot_id}", self._multi_webhook),
        ]
        app.add_routes(routes)
        return app

    async def start(self) -> None:
        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, host=self.settings.host, port=self.settings.port)
        await self._site.start()
        logger.info(
            "webhook_server_started",
            extra={"action": "server_start", "reason": f"{self.settings.host}:{self.settings.port} {self.mode}"},
        )
        if self.multi_mode:
            logger.info(
                "multi_bot_active",
                extra={"action": "server_start", "reason": ",".join(self.bots)},
            )
        elif self.single_bot:
            logger.info("single_bot_active", extra={"action": "server_start", "bot_id": self.single_bot.bot_id})
        else:
            logger.warning("no_bot_tokens_configured", extra={"action": "server_start"})

    async def stop(self) -> None:
        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()

    @web.middleware
    async def _secret_middleware(self, request: web.Request, handler: Any) -> web.StreamResponse:
        secret = (self.settings.webhook_secret or "").strip()
        if request.method != "POST" or not secret:
            return await handler(request)
        request_secret = request.headers.get(SECRET_HEADER, "")
        if not hmac.compare_digest(request_secret, secret):
            logger.warning("webhook_secret_mismatch", extra={"action": "webhook", "reason": request.path})
            return web.Response(text="Unauthorized", status=401)
        return await handler(request)

    async def _single_webhook(self, request: web.Request) -> web.Response:
        if self.single_bot is None:
            return web.Response(text="Not found", status=404)
        return await self._dispatch(request, self.single_bot)

    async def _multi_webhook(self, request: web.Request) -> web.Response:
        if not self.multi_mode:
            return web.Response(text="Multi-bot not configured", status=404)
        bot_id = request.match_info["bot_id"]
        entry = self.bots.get(bot_id)
        if not entry:
            logger.warning("unknown_bot_id", extra={"action": "webhook", "bot_id": bot_id})
            return web.Response(text="Unknown bot", status=404)
        return await self._dispatch(request, entry)

    async def _dispatch(self, request: web.Request, entry: BotEntry) -> web.Response:
        try:
            update = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("webhook_invalid_json", extra={"action": "webhook", "bot_id": entry.bot_id})
            return web.Response(text="Ok")
        await handle_update(update, entry.api, self.policy, entry.username, self.scheduler, entry.bot_id)
        return web.Response(text="Ok")

    async def _index(self, _: web.Request) -> web.Response:
        html = render_landing_page(self.mode, list(self.bots))
        return web.Response(text=html, content_type="text/html")

    async def _health(self, _: web.Request) -> web.Response:
        return web.json_response(
            {
                "status": "ok",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "uptime": round(time.monotonic() - self._started_at, 3),
                "environment": self.settings.environment,
                "mode": self.mode,
                "bots": list(self.bots) if self.multi_mode else [],
            }
        )
