import asyncio
import logging
import random

from autoreact.config import ReactionPolicy
from autoreact.handler import handle_update
from autoreact.messages import THANK_YOU_MESSAGE
from autoreact.scheduler import ReactionScheduler
from tests.fakes import FakeBotApi, message_update, no_sleep

REACTIONS = ("👍", "❤️", "🔥")


def _policy(**kwargs) -> ReactionPolicy:
    return ReactionPolicy(reactions=REACTIONS, **kwargs)


def _run_update(update, api: FakeBotApi, policy: ReactionPolicy, bot_username: str = "react_bot") -> None:
    async def run() -> None:
        scheduler = ReactionScheduler(policy, rng=random.Random(7), sleep=no_sleep)
        await handle_update(update, api, policy, bot_username, scheduler)
        await scheduler.drain()

    asyncio.run(run())


def test_start_in_private_chat_uses_first_name() -> None:
    api = FakeBotApi()
    _run_update(message_update(text="/start", first_name="Ann"), api, _policy())
    assert len(api.messages) == 1
    chat_id, text, keyboard = api.messages[0]
    assert chat_id == 42
    assert "Ann" in text
    assert "UserName" not in text
    assert keyboard[0][0]["url"] == "https://t.me/react_bot?startchannel=botstart"
    assert keyboard[0][1]["url"] == "https://t.me/react_bot?startgroup=botstart"
    assert api.reactions == []


def test_start_in_group_uses_chat_title() -> None:
    api = FakeBotApi()
    update = message_update(chat_id=-100, chat_type="group", text="/start@react_bot", title="Devs")
    _run_update(update, api, _policy())
    assert len(api.messages) == 1
    assert "Devs" in api.messages[0][1]


def test_reactions_command_lists_configured_emojis() -> None:
    api = FakeBotApi()
    _run_update(message_update(text="/reactions"), api, _policy())
    assert len(api.messages) == 1
    text = api.messages[0][1]
    assert "👍, ❤️, 🔥" in text
    assert text.startswith("✅ Enabled Reactions")


def test_donate_command_sends_stars_invoice() -> None:
    api = FakeBotApi()
    _run_update(message_update(text="/donate"), api, _policy())
    invoices = [args for name, args in api.calls if name == "send_invoice"]
    assert len(invoices) == 1
    chat_id, title, _description, payload, provider_token, start_parameter, currency, prices = invoices[0]
    assert chat_id == 42
    assert title == "Donate to Auto Reaction Bot ✨"
    assert payload == "{}"
    assert provider_token == ""
    assert start_parameter == "donate"
    assert currency == "XTR"
    assert prices == [{"label": "Pay ⭐️5", "amount": 5}]


def test_pre_checkout_is_approved_then_thanked() -> None:
    api = FakeBotApi()
    update = {"update_id": 3, "pre_checkout_query": {"id": "q-9", "from": {"id": 777}}}
    _run_update(update, api, _policy())
    assert api.calls == [
        ("answer_pre_checkout_query", ("q-9", True)),
        ("send_message", (777, THANK_YOU_MESSAGE, None)),
    ]


def test_private_message_gets_reaction() -> None:
    api = FakeBotApi()
    _run_update(message_update(text="nice"), api, _policy(random_level=10))
    assert len(api.reactions) == 1
    chat_id, message_id, emoji = api.reactions[0]
    assert (chat_id, message_id) == (42, 7)
    assert emoji in REACTIONS


def test_restricted_chat_gets_no_reaction() -> None:
    api = FakeBotApi()
    policy = _policy(restricted_chat_ids=frozenset({-100200}))
    for chat_type in ("group", "channel"):
        update = message_update(chat_id=-100200, chat_type=chat_type, channel_post=chat_type == "channel")
        _run_update(update, api, policy)
    assert api.calls == []


def test_channel_post_command_text_is_reacted_not_answered() -> None:
    api = FakeBotApi()
    update = message_update(chat_id=-100300, chat_type="channel", text="/start", channel_post=True)
    _run_update(update, api, _policy())
    assert api.messages == []
    assert len(api.reactions) == 1


def test_ignored_update_makes_no_calls() -> None:
    api = FakeBotApi()
    _run_update({"update_id": 1, "my_chat_member": {}}, api, _policy())
    assert api.calls == []


def test_handle_update_returns_before_reaction_fires() -> None:
    release = None

    async def gated_sleep(_: float) -> None:
        await release.wait()

    async def run() -> None:
        nonlocal release
        release = asyncio.Event()
        api = FakeBotApi()
        policy = _policy()
        scheduler = ReactionScheduler(policy, rng=random.Random(1), sleep=gated_sleep)
        await handle_update(message_update(), api, policy, "react_bot", scheduler)
        assert scheduler.pending == 1
        assert api.reactions == []
        release.set()
        await scheduler.drain()
        assert len(api.reactions) == 1

    asyncio.run(run())


def test_reaction_failure_never_reaches_caller(caplog) -> None:
    api = FakeBotApi(fail_reaction=True)
    with caplog.at_level(logging.ERROR):
        _run_update(message_update(), api, _policy())
    assert len(api.reactions) == 1
    assert any(record.getMessage() == "reaction_failed" for record in caplog.records)


def test_send_failure_is_swallowed(caplog) -> None:
    api = FakeBotApi(fail_send=True)
    with caplog.at_level(logging.ERROR):
        _run_update(message_update(text="/reactions"), api, _policy())
    assert any(record.getMessage() == "reactions_message_failed" for record in caplog.records)


def test_handle_update_without_scheduler_still_reacts() -> None:
    async def run() -> list:
        api = FakeBotApi()
        await handle_update(message_update(), api, _policy(delay_override_ms=(0, 0)), "react_bot")
        for _ in range(5):
            await asyncio.sleep(0)
        return api.reactions

    assert len(asyncio.run(run())) == 1


def test_pre_checkout_failure_logs_query_id(caplog) -> None:
    api = FakeBotApi(fail_send=True)
    update = {"pre_checkout_query": {"id": "q-9", "from": {"id": 777}}}
    with caplog.at_level(logging.ERROR):
        _run_update(update, api, _policy())
    failed = [record for record in caplog.records if record.getMessage() == "pre_checkout_failed"]
    assert len(failed) == 1
    assert failed[0].query_id == "q-9"
    assert failed[0].chat_id == 777
    assert not hasattr(failed[0], "reason")


def test_malformed_nested_update_is_not_an_error(caplog) -> None:
    api = FakeBotApi()
    with caplog.at_level(logging.DEBUG):
        _run_update({"message": {"chat": [1], "message_id": 1, "from": "x"}}, api, _policy())
    assert api.calls == []
    assert not [record for record in caplog.records if record.levelno >= logging.ERROR]


def test_bot_id_reaches_reaction_logs(caplog) -> None:
    async def run() -> None:
        policy = _policy()
        scheduler = ReactionScheduler(policy, rng=random.Random(7), sleep=no_sleep)
        await handle_update(message_update(), FakeBotApi(), policy, "react_bot", scheduler, bot_id="111")
        await scheduler.drain()

    with caplog.at_level(logging.INFO):
        asyncio.run(run())
    records = [record for record in caplog.records if record.getMessage() in ("reaction_scheduled", "reaction_sent")]
    assert len(records) == 2
    assert all(record.bot_id == "111" and record.chat_type == "private" for record in records)
