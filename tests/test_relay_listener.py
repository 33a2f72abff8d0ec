"""Tests for the gateway-facing cogs."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from modrelay.bot.cogs import events_listener, relay_listener
from modrelay.datatypes.relay_datatypes import EventType, RelayEvent


@pytest.fixture
def pipeline():
    event = RelayEvent(EventType.MESSAGE_CREATE, {})
    return SimpleNamespace(
        event=event,
        submit=MagicMock(),
        message_create=MagicMock(return_value=event),
        message_update=MagicMock(return_value=None),
        raw_message_update=AsyncMock(return_value=event),
        raw_message_delete=AsyncMock(return_value=event),
        member_add=MagicMock(return_value=event),
        member_remove=MagicMock(return_value=event),
        member_update=MagicMock(return_value=event),
        raw_reaction_add=AsyncMock(return_value=event),
    )


@pytest.fixture
def cog(pipeline):
    return relay_listener.RelayListenerCog(SimpleNamespace(), pipeline)


@pytest.mark.asyncio
async def test_on_message_submits_normalized_event(cog, pipeline):
    message = object()

    await cog.on_message(message)

    pipeline.message_create.assert_called_once_with(message)
    pipeline.submit.assert_called_once_with(pipeline.event)


@pytest.mark.asyncio
async def test_rejected_edit_submits_none(cog, pipeline):
    await cog.on_message_edit("before", "after")

    pipeline.message_update.assert_called_once_with("before", "after")
    pipeline.submit.assert_called_once_with(None)


@pytest.mark.asyncio
async def test_raw_edit_skipped_for_cached_messages(cog, pipeline):
    await cog.on_raw_message_edit(SimpleNamespace(cached_message=object()))

    pipeline.raw_message_update.assert_not_awaited()
    pipeline.submit.assert_not_called()


@pytest.mark.asyncio
async def test_raw_edit_for_uncached_message(cog, pipeline):
    payload = SimpleNamespace(cached_message=None)

    await cog.on_raw_message_edit(payload)

    pipeline.raw_message_update.assert_awaited_once_with(payload)
    pipeline.submit.assert_called_once_with(pipeline.event)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "listener, handler, args",
    [
        ("on_raw_message_delete", "raw_message_delete", ("payload",)),
        ("on_raw_reaction_add", "raw_reaction_add", ("payload",)),
    ],
)
async def test_raw_listeners(cog, pipeline, listener, handler, args):
    await getattr(cog, listener)(*args)

    getattr(pipeline, handler).assert_awaited_once_with(*args)
    pipeline.submit.assert_called_once_with(pipeline.event)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "listener, handler, args",
    [
        ("on_member_join", "member_add", ("member",)),
        ("on_member_remove", "member_remove", ("member",)),
        ("on_member_update", "member_update", ("before", "after")),
    ],
)
async def test_member_listeners(cog, pipeline, listener, handler, args):
    await getattr(cog, listener)(*args)

    getattr(pipeline, handler).assert_called_once_with(*args)
    pipeline.submit.assert_called_once_with(pipeline.event)


def test_setup_registers_cog(pipeline):
    bot = SimpleNamespace(add_cog=MagicMock())

    relay_listener.setup(bot, pipeline)

    registered = bot.add_cog.call_args[0][0]
    assert isinstance(registered, relay_listener.RelayListenerCog)
    assert registered.pipeline is pipeline


class TestEventsListener:
    @pytest.mark.asyncio
    async def test_on_ready_warns_when_webhook_missing(self):
        bot = SimpleNamespace(user=SimpleNamespace(id=1))
        cog = events_listener.EventsListenerCog(bot, guild_id="", webhook_url="")

        with patch.object(events_listener.logger, "critical") as critical_mock:
            await cog.on_ready()

        critical_mock.assert_called_once()

    @pytest.mark.asyncio
    async def test_on_ready_reports_scope_and_destination(self):
        bot = SimpleNamespace(user=SimpleNamespace(id=1))
        cog = events_listener.EventsListenerCog(bot, guild_id="111", webhook_url="https://n8n.example/hook")

        with patch.object(events_listener.logger, "info") as info_mock, \
                patch.object(events_listener.logger, "critical") as critical_mock:
            await cog.on_ready()

        messages = " ".join(str(call.args[0]) for call in info_mock.call_args_list)
        assert "111" in messages
        assert "https://n8n.example/hook" in messages
        critical_mock.assert_not_called()

    @pytest.mark.asyncio
    async def test_on_ready_without_user(self):
        cog = events_listener.EventsListenerCog(SimpleNamespace(user=None))

        with patch.object(events_listener.logger, "warning") as warning_mock, \
                patch.object(events_listener.logger, "critical"):
            await cog.on_ready()

        warning_mock.assert_called_once()
