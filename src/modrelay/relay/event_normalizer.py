"""
Per-event payload builders.

Each ``normalize_*`` function maps views of one gateway event to the payload
published downstream. The key set of a payload depends only on the event
kind: optional values are present as ``None`` or empty rather than omitted,
so downstream workflows can rely on a fixed schema.

The normalizers never raise on missing data. Anything the client did not
cache degrades to the documented default, and the only I/O in this module
(``resolve_channel``, ``resolve_user`` and ``resolve_message``) swallows
lookup failures after logging them so the event still goes out with what is
known.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Sequence

import discord

from modrelay.datatypes.discord_datatypes import MemberSnapshot, MessageView, UserView, snowflake
from modrelay.datatypes.relay_datatypes import epoch_millis
from modrelay.relay.pattern_detectors import (
    DEFAULT_SPAM_RULES,
    SpamRule,
    detect_spam_patterns,
    extract_urls,
    ordered_labels,
)
from modrelay.relay.snapshot_differ import current_roles, diff_roles, nickname_changed, visible_roles
from modrelay.util.logger import get_logger

logger = get_logger("event_normalizer")

NEW_ACCOUNT_DAYS = 7
DM_CHANNEL_LABEL = "DM"
UNKNOWN_CHANNEL_LABEL = "unknown"
UNCACHED_CONTENT_PLACEHOLDER = "[mensaje no cacheado]"


@dataclass(frozen=True, slots=True)
class NormalizerSettings:
    """Tunable literals and thresholds used while building payloads.

    Attributes:
        new_account_days (int): Accounts younger than this are flagged ``is_new_account``.
        dm_channel_label (str): ``channel_name`` published for direct messages.
        unknown_channel_label (str): ``channel_name`` published when the channel cannot be resolved.
        uncached_content_placeholder (str): Content published for messages the client never cached.
        spam_rules (Sequence[SpamRule]): Rule table for ``spam_patterns``.
    """

    new_account_days: int = NEW_ACCOUNT_DAYS
    dm_channel_label: str = DM_CHANNEL_LABEL
    unknown_channel_label: str = UNKNOWN_CHANNEL_LABEL
    uncached_content_placeholder: str = UNCACHED_CONTENT_PLACEHOLDER
    spam_rules: Sequence[SpamRule] = DEFAULT_SPAM_RULES


DEFAULT_SETTINGS = NormalizerSettings()


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def account_age_days(created_at: datetime | None, now: datetime | None = None) -> int | None:
    """Whole days elapsed since ``created_at``, rounded down. None when the creation instant is unknown."""
    if created_at is None:
        return None
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (_now(now) - created_at) // timedelta(days=1)


def _text_signals(content: str | None, settings: NormalizerSettings) -> Dict[str, Any]:
    urls = extract_urls(content)
    return {
        "urls_detected": urls,
        "spam_patterns": ordered_labels(detect_spam_patterns(content, settings.spam_rules)),
        "has_links": bool(urls),
    }


def _short_author(author: UserView | None) -> Dict[str, Any]:
    author = author or UserView()
    return {"id": author.id, "username": author.username}


def normalize_message_create(
    message: MessageView,
    settings: NormalizerSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
) -> Dict[str, Any]:
    author = message.author or UserView()
    content = message.content or ""
    return {
        "id": message.id,
        "content": content,
        "channel_id": message.channel.id,
        "channel_name": message.channel.label(settings.dm_channel_label, settings.unknown_channel_label),
        "guild_id": message.guild_id,
        "is_dm": message.channel.is_dm,
        "author": {
            "id": author.id,
            "username": author.username,
            "display_name": author.display_name,
            "bot": author.bot,
            "account_age_days": account_age_days(author.created_at, now),
            "roles": [role.to_dict() for role in visible_roles(author.roles)],
        },
        "attachments": [attachment.to_dict() for attachment in message.attachments],
        **_text_signals(content, settings),
        "mentions_users": list(message.mention_user_ids),
        "mentions_roles": list(message.mention_role_ids),
        "reply_to_message_id": message.reply_to_message_id,
        "timestamp": epoch_millis(message.created_at or _now(now)),
    }


def normalize_message_update(
    old_content: str | None,
    message: MessageView,
    settings: NormalizerSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
) -> Dict[str, Any]:
    """Build an edit payload. ``old_content`` is None when the original was never cached."""
    new_content = message.content or ""
    return {
        "id": message.id,
        "old_content": old_content,
        "new_content": new_content,
        "channel_id": message.channel.id,
        "channel_name": message.channel.label(settings.dm_channel_label, settings.unknown_channel_label),
        "guild_id": message.guild_id,
        "author": _short_author(message.author),
        **_text_signals(new_content, settings),
        "timestamp": epoch_millis(_now(now)),
    }


def normalize_message_delete(
    message: MessageView,
    settings: NormalizerSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
) -> Dict[str, Any]:
    content = message.content if message.content is not None else settings.uncached_content_placeholder
    return {
        "id": message.id,
        "content": content,
        "channel_id": message.channel.id,
        "channel_name": message.channel.label(settings.dm_channel_label, settings.unknown_channel_label),
        "guild_id": message.guild_id,
        "author": _short_author(message.author),
        "timestamp": epoch_millis(_now(now)),
    }


def normalize_member_add(
    member: MemberSnapshot,
    settings: NormalizerSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
) -> Dict[str, Any]:
    """Build a join payload.

    ``is_new_account`` is a hint for moderators reviewing the join, not an
    enforcement decision. An unknown account age is never flagged.
    """
    age = account_age_days(member.user.created_at, now)
    return {
        "user_id": member.user.id,
        "username": member.user.username,
        "display_name": member.user.display_name,
        "avatar_url": member.user.avatar_url,
        "account_age_days": age,
        "is_new_account": age is not None and age < settings.new_account_days,
        "guild_id": member.guild_id,
        "guild_name": member.guild_name,
        "member_count": member.member_count,
        "joined_at": epoch_millis(member.joined_at),
    }


def normalize_member_remove(member: MemberSnapshot, now: datetime | None = None) -> Dict[str, Any]:
    return {
        "user_id": member.user.id,
        "username": member.user.username,
        "guild_id": member.guild_id,
        "guild_name": member.guild_name,
        "member_count": member.member_count,
        "roles": [role.to_dict() for role in current_roles(member)],
        "timestamp": epoch_millis(_now(now)),
    }


def normalize_member_update(
    before: MemberSnapshot,
    after: MemberSnapshot,
    now: datetime | None = None,
) -> Dict[str, Any]:
    added, removed = diff_roles(before, after)
    return {
        "user_id": after.user.id,
        "username": after.user.username,
        "guild_id": after.guild_id,
        "old_nickname": before.nickname,
        "new_nickname": after.nickname,
        "nickname_changed": nickname_changed(before, after),
        "added_roles": [role.to_dict() for role in added],
        "removed_roles": [role.to_dict() for role in removed],
        "current_roles": [role.to_dict() for role in current_roles(after)],
        "timestamp": epoch_millis(_now(now)),
    }


def normalize_reaction_add(
    message: MessageView,
    user: UserView,
    emoji: Any,
    settings: NormalizerSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
) -> Dict[str, Any]:
    """Build a reaction payload.

    ``emoji`` is a ``discord.PartialEmoji`` (or anything with ``name``/``id``);
    ``emoji_id`` is None for native unicode emoji.
    """
    content = message.content if message.content is not None else settings.uncached_content_placeholder
    return {
        "message_id": message.id,
        "message_content": content,
        "message_author_id": message.author.id if message.author else None,
        "channel_id": message.channel.id,
        "channel_name": message.channel.label(settings.dm_channel_label, settings.unknown_channel_label),
        "guild_id": message.guild_id,
        "emoji": getattr(emoji, "name", None),
        "emoji_id": snowflake(getattr(emoji, "id", None)),
        "user_id": user.id,
        "username": user.username,
        "timestamp": epoch_millis(_now(now)),
    }


# -------------------- Partial-object resolution --------------------

async def resolve_channel(client: Any, channel_id: Any) -> Any:
    """Return the channel for ``channel_id`` from the cache, fetching it if needed.

    Returns None when the channel cannot be fetched (deleted, missing access).
    """
    if channel_id is None:
        return None
    channel = client.get_channel(int(channel_id))
    if channel is not None:
        return channel
    try:
        return await client.fetch_channel(int(channel_id))
    except (discord.HTTPException, discord.InvalidData) as exc:
        logger.debug("[NORMALIZER] Could not fetch channel %s: %s", channel_id, exc)
        return None


async def resolve_user(client: Any, user_id: Any, member: Any = None) -> Any:
    """Return the member or user who triggered an event, or None if it cannot be fetched."""
    if member is not None:
        return member
    if user_id is None:
        return None
    user = client.get_user(int(user_id))
    if user is not None:
        return user
    try:
        return await client.fetch_user(int(user_id))
    except discord.HTTPException as exc:
        logger.debug("[NORMALIZER] Could not fetch user %s: %s", user_id, exc)
        return None


async def resolve_message(client: Any, channel: Any, message_id: Any) -> Any:
    """Return the full message for ``message_id``, from the cache or by fetching it from ``channel``.

    Returns None when the message is gone or the channel cannot be read; the
    caller then publishes the placeholder content.
    """
    if message_id is None:
        return None
    message = client.get_message(int(message_id))
    if message is not None:
        return message
    fetch_message = getattr(channel, "fetch_message", None)
    if fetch_message is None:
        logger.debug("[NORMALIZER] No readable channel for message %s; using partial data", message_id)
        return None
    try:
        return await fetch_message(int(message_id))
    except discord.HTTPException as exc:
        logger.warning("[NORMALIZER] Could not fetch message %s: %s", message_id, exc)
        return None
