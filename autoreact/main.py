from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

import click
from dotenv import find_dotenv, load_dotenv

from autoreact.config import Settings
from autoreact.logging_setup import configure_logging
from autoreact.registry import BotEntry, registry_from_settings, single_bot_from_settings
from autoreact.scheduler import ReactionScheduler
from autoreact.web import WebhookServer

logger = logging.getLogger(__name__)


def _configured_bots(settings: Settings) -> tuple[dict[str, BotEntry], BotEntry | None]:
    bots = registry_from_settings(settings)
    single_bot = None if bots else single_bot_from_settings(settings)
    return bots, single_bot


def _all_entries(bots: dict[str, BotEntry], single_bot: BotEntry | None) -> list[BotEntry]:
    return list(bots.values()) if bots else ([single_bot] if single_bot else [])


async def _close_all(entries: list[BotEntry]) -> None:
    for entry in entries:
        with suppress(Exception):
            await entry.api.close()


async def serve(settings: Settings) -> None:
    bots, single_bot = _configured_bots(settings)
    scheduler = ReactionScheduler(settings.reaction_policy())
    server = WebhookServer(
        settings=settings,
        policy=scheduler.policy,
        scheduler=scheduler,
        bots=bots,
        single_bot=single_bot,
    )
    try:
        await server.start()
        await asyncio.Event().wait()
    finally:
        with suppress(Exception):
            await server.stop()
        await scheduler.cancel_pending()
        await _close_all(_all_entries(bots, single_bot))


async def register_webhooks(settings: Settings) -> int:
    if not settings.webhook_base_url:
        raise click.UsageError("WEBHOOK_BASE_URL is not set")
    bots, single_bot = _configured_bots(settings)
    entries = _all_entries(bots, single_bot)
    if not entries:
        logger.warning("no_bot_tokens_configured", extra={"action": "set_webhook"})
        return 1
    failed = 0
    try:
        for entry in entries:
            path = f"/webhook/{entry.bot_id}" if bots else "/"
            url = f"{settings.webhook_base_url}{path}"
            try:
                await entry.api.set_webhook(url, secret_token=settings.webhook_secret)
            except Exception:
                failed += 1
                logger.exception("set_webhook_failed", extra={"action": "set_webhook", "bot_id": entry.bot_id})
                continue
            logger.info("set_webhook_ok", extra={"action": "set_webhook", "bot_id": entry.bot_id, "reason": url})
    finally:
        await _close_all(entries)
    return failed


async def check_bots(settings: Settings) -> int:
    bots, single_bot = _configured_bots(settings)
    entries = _all_entries(bots, single_bot)
    if not entries:
        logger.warning("no_bot_tokens_configured", extra={"action": "check"})
        return 1
    failed = 0
    try:
        for entry in entries:
            try:
                me = await entry.api.get_me()
                info = await entry.api.get_webhook_info()
            except Exception:
                failed += 1
                logger.exception("bot_check_failed", extra={"action": "check", "bot_id": entry.bot_id})
                continue
            username = str(me.get("username") or "")
            if entry.username and username and entry.username.lower() != username.lower():
                logger.warning(
                    "bot_username_mismatch",
                    extra={
                        "action": "check",
                        "bot_id": entry.bot_id,
                        "reason": f"configured={entry.username} actual={username}",
                    },
                )
            logger.info(
                "bot_check_ok",
                extra={
                    "action": "check",
                    "bot_id": entry.bot_id,
                    "reason": (
                        f"username={username} webhook={info.get('url') or '-'} "
                        f"pending={info.get('pending_update_count', 0)} "
                        f"last_error={info.get('last_error_message') or '-'}"
                    ),
                },
            )
    finally:
        await _close_all(entries)
    return failed


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Auto reaction bot webhook server."""
    load_dotenv(find_dotenv(usecwd=True))
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    ctx.obj = settings
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command()
@click.pass_obj
def run(settings: Settings) -> None:
    """Serve the webhook endpoints."""
    with suppress(KeyboardInterrupt):
        asyncio.run(serve(settings))


@cli.command("set-webhook")
@click.pass_obj
def set_webhook(settings: Settings) -> None:
    """Point every configured bot at WEBHOOK_BASE_URL."""
    failed = asyncio.run(register_webhooks(settings))
    if failed:
        raise SystemExit(1)


@cli.command()
@click.pass_obj
def check(settings: Settings) -> None:
    """Log getMe and getWebhookInfo for every configured bot."""
    failed = asyncio.run(check_bots(settings))
    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
