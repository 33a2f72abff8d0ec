"""
Optional views over py-cord objects.

Gateway objects arrive in every state of completeness: cached messages with
full authors, partial messageables with nothing but an id, members whose
guild is no longer cached. The relay never reads those objects directly.
Each is first converted into one of the frozen views below, where every
optional field has a documented default (``None``, ``False`` or an empty
tuple). Conversion never raises on missing attributes.

Key Features:
- `RoleRef`: Role identity (compared by id) plus name.
- `UserView`: User or member identity, bot flag, creation instant.
- `ChannelView`: Channel id, name and DM flag, or an unresolved placeholder.
- `AttachmentView`: Attachment metadata.
- `MessageView`: Message fields the normalizer reads.
- `MemberSnapshot`: Point-in-time member state used for before/after diffs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Tuple

import discord

DM_CHANNEL_TYPES = (discord.ChannelType.private, discord.ChannelType.group)


def snowflake(value: Any) -> str | None:
    """Return a Discord snowflake as a decimal string, or None when absent.

    Snowflakes are 64-bit integers but travel as strings so JSON consumers do
    not lose precision.

    >>> snowflake(123456789012345678)
    '123456789012345678'
    >>> snowflake(None) is None
    True
    """
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True, slots=True, eq=False)
class RoleRef:
    """A guild role reduced to id and name.

    Equality and hashing use the id only, so a renamed role is still the same role.

    Attributes:
        id (str): Role snowflake.
        name (str): Role name at snapshot time (empty if unknown).
        is_default (bool): True for the implicit ``@everyone`` role.
    """

    id: str
    name: str = ""
    is_default: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RoleRef):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @classmethod
    def from_role(cls, role: Any, guild_id: str | None = None) -> "RoleRef":
        """Build a RoleRef from a ``discord.Role`` (or any object with ``id``/``name``)."""
        role_id = snowflake(getattr(role, "id", None)) or ""
        is_default_check = getattr(role, "is_default", None)
        if callable(is_default_check):
            is_default = bool(is_default_check())
        else:
            is_default = guild_id is not None and role_id == guild_id
        return cls(id=role_id, name=str(getattr(role, "name", "") or ""), is_default=is_default)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


def _roles_of(obj: Any, guild_id: str | None) -> Tuple[RoleRef, ...]:
    roles: Iterable[Any] = getattr(obj, "roles", None) or ()
    return tuple(RoleRef.from_role(role, guild_id) for role in roles)


def _guild_id_of(obj: Any) -> str | None:
    guild = getattr(obj, "guild", None)
    if guild is not None:
        return snowflake(getattr(guild, "id", None))
    return snowflake(getattr(obj, "guild_id", None))


def _avatar_url(user: Any) -> str | None:
    avatar = getattr(user, "display_avatar", None) or getattr(user, "avatar", None)
    url = getattr(avatar, "url", None)
    return str(url) if url else None


@dataclass(frozen=True, slots=True)
class UserView:
    """Identity of a user or guild member.

    Attributes:
        id (str | None): User snowflake; None when the author is unknown.
        username (str | None): Account username.
        display_name (str | None): Guild nickname or global display name.
        bot (bool): Whether the account is a bot. False when unknown.
        created_at (datetime | None): Account creation instant.
        avatar_url (str | None): URL of the displayed avatar.
        roles (Tuple[RoleRef, ...]): Guild roles, empty for plain users.
    """

    id: str | None = None
    username: str | None = None
    display_name: str | None = None
    bot: bool = False
    created_at: datetime | None = None
    avatar_url: str | None = None
    roles: Tuple[RoleRef, ...] = ()

    @classmethod
    def from_user(cls, user: Any) -> "UserView":
        """Build a view from a ``discord.User``/``discord.Member``; None gives the unknown view."""
        if user is None:
            return cls()
        return cls(
            id=snowflake(getattr(user, "id", None)),
            username=getattr(user, "name", None),
            display_name=getattr(user, "display_name", None),
            bot=bool(getattr(user, "bot", False)),
            created_at=getattr(user, "created_at", None),
            avatar_url=_avatar_url(user),
            roles=_roles_of(user, _guild_id_of(user)),
        )


@dataclass(frozen=True, slots=True)
class ChannelView:
    """Channel identity as far as it could be resolved.

    Attributes:
        id (str | None): Channel snowflake.
        name (str | None): Channel name for guild channels, None otherwise.
        is_dm (bool): True for private and group DM channels.
    """

    id: str | None = None
    name: str | None = None
    is_dm: bool = False

    @classmethod
    def from_channel(cls, channel: Any, channel_id: Any = None) -> "ChannelView":
        """Build a view from a channel object; a missing channel keeps only ``channel_id``."""
        if channel is None:
            return cls(id=snowflake(channel_id))
        is_dm = getattr(channel, "type", None) in DM_CHANNEL_TYPES
        name = None if is_dm else getattr(channel, "name", None)
        return cls(
            id=snowflake(getattr(channel, "id", None)) or snowflake(channel_id),
            name=str(name) if name else None,
            is_dm=is_dm,
        )

    def label(self, dm_label: str, unknown_label: str) -> str:
        """Return the channel name to publish: the DM literal, the name, or the unknown literal."""
        if self.is_dm:
            return dm_label
        return self.name or unknown_label


@dataclass(frozen=True, slots=True)
class AttachmentView:
    id: str | None
    url: str | None
    filename: str | None
    type: str | None

    @classmethod
    def from_attachment(cls, attachment: Any) -> "AttachmentView":
        return cls(
            id=snowflake(getattr(attachment, "id", None)),
            url=getattr(attachment, "url", None),
            filename=getattr(attachment, "filename", None),
            type=getattr(attachment, "content_type", None),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "url": self.url, "filename": self.filename, "type": self.type}


@dataclass(frozen=True, slots=True)
class MessageView:
    """Message fields read by the normalizer.

    Attributes:
        id (str | None): Message snowflake.
        content (str | None): Text content; None when the message was not cached.
        channel (ChannelView): Channel the message belongs to.
        guild_id (str | None): Guild snowflake, None for DMs.
        author (UserView | None): Author, None when unknown.
        attachments (Tuple[AttachmentView, ...]): Attached files.
        mention_user_ids (Tuple[str, ...]): Mentioned users.
        mention_role_ids (Tuple[str, ...]): Mentioned roles.
        reply_to_message_id (str | None): Referenced message for replies.
        created_at (datetime | None): Creation instant.
    """

    id: str | None = None
    content: str | None = None
    channel: ChannelView = field(default_factory=ChannelView)
    guild_id: str | None = None
    author: UserView | None = None
    attachments: Tuple[AttachmentView, ...] = ()
    mention_user_ids: Tuple[str, ...] = ()
    mention_role_ids: Tuple[str, ...] = ()
    reply_to_message_id: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_message(cls, message: Any) -> "MessageView":
        """Build a view from a ``discord.Message`` (full or partial)."""
        author = getattr(message, "author", None)
        reference = getattr(message, "reference", None)
        return cls(
            id=snowflake(getattr(message, "id", None)),
            content=getattr(message, "content", None),
            channel=ChannelView.from_channel(getattr(message, "channel", None), getattr(message, "channel_id", None)),
            guild_id=_guild_id_of(message),
            author=UserView.from_user(author) if author is not None else None,
            attachments=tuple(AttachmentView.from_attachment(a) for a in getattr(message, "attachments", None) or ()),
            mention_user_ids=tuple(
                user_id for user_id in (snowflake(getattr(u, "id", None)) for u in getattr(message, "mentions", None) or ())
                if user_id
            ),
            mention_role_ids=tuple(
                role_id for role_id in (snowflake(getattr(r, "id", None)) for r in getattr(message, "role_mentions", None) or ())
                if role_id
            ),
            reply_to_message_id=snowflake(getattr(reference, "message_id", None)) if reference is not None else None,
            created_at=getattr(message, "created_at", None),
        )


@dataclass(frozen=True, slots=True)
class MemberSnapshot:
    """Point-in-time view of a guild member.

    Attributes:
        user (UserView): Member identity.
        nickname (str | None): Guild nickname; None (no nickname) differs from "".
        roles (frozenset[RoleRef]): Roles held, including ``@everyone``.
        guild_id (str | None): Guild snowflake.
        guild_name (str | None): Guild name.
        member_count (int | None): Guild member count when known.
        joined_at (datetime | None): When the member joined the guild.
    """

    user: UserView = field(default_factory=UserView)
    nickname: str | None = None
    roles: frozenset = frozenset()
    guild_id: str | None = None
    guild_name: str | None = None
    member_count: int | None = None
    joined_at: datetime | None = None

    @classmethod
    def from_member(cls, member: Any) -> "MemberSnapshot":
        """Snapshot a ``discord.Member``. Attributes that are missing fall back to defaults."""
        guild = getattr(member, "guild", None)
        guild_id = _guild_id_of(member)
        member_count = getattr(guild, "member_count", None)
        return cls(
            user=UserView.from_user(member),
            nickname=getattr(member, "nick", None),
            roles=frozenset(_roles_of(member, guild_id)),
            guild_id=guild_id,
            guild_name=getattr(guild, "name", None),
            member_count=int(member_count) if member_count is not None else None,
            joined_at=getattr(member, "joined_at", None),
        )
