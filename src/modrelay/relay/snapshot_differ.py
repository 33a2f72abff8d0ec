"""Role and nickname deltas between two member snapshots."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from modrelay.datatypes.discord_datatypes import MemberSnapshot, RoleRef


def visible_roles(roles: Iterable[RoleRef]) -> List[RoleRef]:
    """Drop ``@everyone`` and sort by id so listings are stable across calls."""
    return sorted((role for role in roles if not role.is_default), key=lambda role: (len(role.id), role.id))


def diff_roles(before: MemberSnapshot, after: MemberSnapshot) -> Tuple[List[RoleRef], List[RoleRef]]:
    """Return ``(added, removed)`` roles between two snapshots, compared by role id.

    ``@everyone`` never appears in either list.
    """
    before_roles = set(before.roles)
    after_roles = set(after.roles)
    added = visible_roles(after_roles - before_roles)
    removed = visible_roles(before_roles - after_roles)
    return added, removed


def current_roles(snapshot: MemberSnapshot) -> List[RoleRef]:
    return visible_roles(snapshot.roles)


def nickname_changed(before: MemberSnapshot, after: MemberSnapshot) -> bool:
    # No nickname (None) and an empty nickname are distinct values.
    return before.nickname != after.nickname
