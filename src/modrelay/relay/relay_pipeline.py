"""
Relay pipeline: gateway event in, relay event (or nothing) out.

Each handler method takes the py-cord object(s) of one gateway event and
returns a :class:`RelayEvent` when the event should be forwarded, or None
when a filter rejects it. Handlers never deliver anything themselves;
:meth:`RelayPipeline.submit` hands an accepted event to the dispatcher as a
background task, so gateway processing never waits on the downstream
endpoint.

Rejection order for every kind: bot author, guild scope, no-op detection.
"""

from __future__ import annotations

import asyncio
from typing import Any, Set

from modrelay.datatypes.discord_datatypes import (
    ChannelView,
    MemberSnapshot,
    MessageView,
    UserView,
    snowflake,
)
from modrelay.datatypes.relay_datatypes import EventType, RelayEvent
from modrelay.relay import event_normalizer, guild_filter
from modrelay.relay.dispatcher import RelayDispatcher
from modrelay.relay.event_normalizer import NormalizerSettings
from modrelay.util.logger import get_logger

logger = get_logger("relay_pipeline")


def _author_from_raw(data: dict) -> UserView | None:
    author = data.get("author")
    if not isinstance(author, dict):
        return None
    return UserView(
        id=snowflake(author.get("id")),
        username=author.get("username"),
        display_name=author.get("global_name") or author.get("username"),
        bot=bool(author.get("bot", False)),
    )


class RelayPipeline:
    """Per-event filtering and normalization plus fire-and-forget delivery.

    Parameters
    ----------
    dispatcher:
        Delivery backend for accepted events.
    client:
        Gateway client used to resolve partial objects (channels, users,
        uncached messages). Only the raw-event handlers need it.
    guild_id:
        Guild scope. Empty means every guild is relayed.
    settings:
        Normalizer literals and thresholds.
    """

    def __init__(
        self,
        dispatcher: RelayDispatcher,
        client: Any = None,
        guild_id: str | None = None,
        settings: NormalizerSettings | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.client = client
        self.guild_id = snowflake(guild_id)
        self.settings = settings or NormalizerSettings()
        # Strong references so in-flight deliveries are not garbage collected
        self._in_flight: Set[asyncio.Task] = set()

    # --------------------------
    # Message events
    # --------------------------
    def message_create(self, message: Any) -> RelayEvent | None:
        if guild_filter.is_bot_author(getattr(message, "author", None)):
            return None
        view = MessageView.from_message(message)
        if not guild_filter.should_forward(view.guild_id, self.guild_id):
            return None
        return RelayEvent(EventType.MESSAGE_CREATE, event_normalizer.normalize_message_create(view, self.settings))

    def message_update(self, before: Any, after: Any) -> RelayEvent | None:
        """Handle an edit of a cached message."""
        if guild_filter.is_bot_author(getattr(after, "author", None)):
            return None
        view = MessageView.from_message(after)
        if not guild_filter.should_forward(view.guild_id, self.guild_id):
            return None
        old_content = getattr(before, "content", None)
        if guild_filter.is_noop_edit(old_content, view.content):
            return None
        return RelayEvent(
            EventType.MESSAGE_UPDATE,
            event_normalizer.normalize_message_update(old_content, view, self.settings),
        )

    async def raw_message_update(self, payload: Any) -> RelayEvent | None:
        """Handle an edit of a message the client never cached.

        Updates without a ``content`` key only touch embeds or flags and are
        treated as no-op edits.
        """
        if payload.cached_message is not None:
            # Cached edits arrive through message_update as well
            return None
        data = payload.data or {}
        if "content" not in data:
            return None
        author = _author_from_raw(data)
        if guild_filter.is_bot_author(author):
            return None
        guild_id = snowflake(payload.guild_id)
        if not guild_filter.should_forward(guild_id, self.guild_id):
            return None

        channel = await event_normalizer.resolve_channel(self.client, payload.channel_id)
        view = MessageView(
            id=snowflake(payload.message_id),
            content=data.get("content"),
            channel=ChannelView.from_channel(channel, payload.channel_id),
            guild_id=guild_id,
            author=author,
        )
        return RelayEvent(
            EventType.MESSAGE_UPDATE,
            event_normalizer.normalize_message_update(None, view, self.settings),
        )

    async def raw_message_delete(self, payload: Any) -> RelayEvent | None:
        cached = payload.cached_message
        if cached is not None:
            if guild_filter.is_bot_author(getattr(cached, "author", None)):
                return None
            view = MessageView.from_message(cached)
            if not guild_filter.should_forward(view.guild_id, self.guild_id):
                return None
        else:
            guild_id = snowflake(payload.guild_id)
            if not guild_filter.should_forward(guild_id, self.guild_id):
                return None
            channel = await event_normalizer.resolve_channel(self.client, payload.channel_id)
            view = MessageView(
                id=snowflake(payload.message_id),
                channel=ChannelView.from_channel(channel, payload.channel_id),
                guild_id=guild_id,
            )
        return RelayEvent(EventType.MESSAGE_DELETE, event_normalizer.normalize_message_delete(view, self.settings))

    # --------------------------
    # Member events
    # --------------------------
    def member_add(self, member: Any) -> RelayEvent | None:
        snapshot = MemberSnapshot.from_member(member)
        if not guild_filter.should_forward(snapshot.guild_id, self.guild_id):
            return None
        return RelayEvent(EventType.MEMBER_ADD, event_normalizer.normalize_member_add(snapshot, self.settings))

    def member_remove(self, member: Any) -> RelayEvent | None:
        snapshot = MemberSnapshot.from_member(member)
        if not guild_filter.should_forward(snapshot.guild_id, self.guild_id):
            return None
        return RelayEvent(EventType.MEMBER_REMOVE, event_normalizer.normalize_member_remove(snapshot))

    def member_update(self, before: Any, after: Any) -> RelayEvent | None:
        before_snapshot = MemberSnapshot.from_member(before)
        after_snapshot = MemberSnapshot.from_member(after)
        if not guild_filter.should_forward(after_snapshot.guild_id, self.guild_id):
            return None
        if guild_filter.is_noop_member_update(before_snapshot, after_snapshot):
            return None
        return RelayEvent(
            EventType.MEMBER_UPDATE,
            event_normalizer.normalize_member_update(before_snapshot, after_snapshot),
        )

    # --------------------------
    # Reaction events
    # --------------------------
    async def raw_reaction_add(self, payload: Any) -> RelayEvent | None:
        """Handle a reaction, fetching the reacted message when it is not cached."""
        user = await event_normalizer.resolve_user(self.client, payload.user_id, getattr(payload, "member", None))
        if guild_filter.is_bot_author(user):
            return None
        guild_id = snowflake(payload.guild_id)
        if not guild_filter.should_forward(guild_id, self.guild_id):
            return None

        channel = await event_normalizer.resolve_channel(self.client, payload.channel_id)
        message = await event_normalizer.resolve_message(self.client, channel, payload.message_id)
        if message is not None:
            view = MessageView.from_message(message)
        else:
            view = MessageView(
                id=snowflake(payload.message_id),
                channel=ChannelView.from_channel(channel, payload.channel_id),
                guild_id=guild_id,
            )
        user_view = UserView.from_user(user) if user is not None else UserView(id=snowflake(payload.user_id))
        return RelayEvent(
            EventType.REACTION_ADD,
            event_normalizer.normalize_reaction_add(view, user_view, payload.emoji, self.settings),
        )

    # --------------------------
    # Delivery
    # --------------------------
    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def submit(self, event: RelayEvent | None) -> asyncio.Task | None:
        """Schedule delivery of ``event`` without waiting for it. None is ignored."""
        if event is None:
            return None
        task = asyncio.create_task(self.dispatcher.deliver(event.event_type, event.data))
        self._in_flight.add(task)
        task.add_done_callback(self._on_delivery_done)
        return task

    def _on_delivery_done(self, task: asyncio.Task) -> None:
        self._in_flight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("[RELAY PIPELINE] Unhandled error during delivery", exc_info=(type(exc), exc, exc.__traceback__))
