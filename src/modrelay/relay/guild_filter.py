"""
Forward/reject decisions for gateway events.

Every check here is a pure function. The relay pipeline calls them before any
normalization so rejected events cost nothing beyond the check itself.
"""

from __future__ import annotations

from typing import Any

from modrelay.datatypes.discord_datatypes import MemberSnapshot, snowflake
from modrelay.relay.snapshot_differ import diff_roles, nickname_changed


def should_forward(event_guild_id: Any, configured_guild_id: Any) -> bool:
    """Return True if an event from ``event_guild_id`` is inside the configured scope.

    An empty scope means global mode: every guild is accepted. Events without
    a guild (direct messages) have nothing to compare against and are always
    accepted. Ids compare as decimal strings, so int and str snowflakes mix freely.
    """
    scope = snowflake(configured_guild_id)
    if scope is None:
        return True
    guild_id = snowflake(event_guild_id)
    if guild_id is None:
        return True
    return guild_id == scope


def is_bot_author(user: Any) -> bool:
    """Return True if ``user`` is a known bot account. Unknown authors are not bots."""
    return user is not None and bool(getattr(user, "bot", False))


def is_noop_edit(old_content: str | None, new_content: str | None) -> bool:
    """An edit whose text did not change (embed unfurls, pin toggles) is not relayed."""
    return old_content == new_content


def is_noop_member_update(before: MemberSnapshot, after: MemberSnapshot) -> bool:
    """A member update with no role delta and no nickname change is not relayed."""
    added, removed = diff_roles(before, after)
    return not added and not removed and not nickname_changed(before, after)
