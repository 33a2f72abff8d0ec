"""Tests for forward/reject decisions."""

from types import SimpleNamespace

import pytest

from modrelay.datatypes.discord_datatypes import MemberSnapshot, RoleRef
from modrelay.relay.guild_filter import is_bot_author, is_noop_edit, is_noop_member_update, should_forward


class TestShouldForward:
    def test_other_guild_rejected(self):
        assert should_forward("g1", "g2") is False

    def test_global_mode_accepts_any_guild(self):
        assert should_forward("g1", "") is True
        assert should_forward("g1", None) is True

    def test_dm_accepted_under_scope(self):
        assert should_forward(None, "g2") is True

    def test_matching_guild_accepted(self):
        assert should_forward("g2", "g2") is True

    def test_int_and_str_snowflakes_compare_equal(self):
        assert should_forward(123456789012345678, "123456789012345678") is True
        assert should_forward(123456789012345678, " 123456789012345678 ") is True


@pytest.mark.parametrize(
    "user, expected",
    [
        (SimpleNamespace(bot=True), True),
        (SimpleNamespace(bot=False), False),
        (SimpleNamespace(), False),
        (None, False),
    ],
)
def test_is_bot_author(user, expected):
    assert is_bot_author(user) is expected


def test_noop_edit():
    assert is_noop_edit("same", "same")
    assert not is_noop_edit("before", "after")
    assert not is_noop_edit(None, "after")


class TestNoopMemberUpdate:
    role = RoleRef("7", "Mentor")

    def test_nothing_changed(self):
        member = MemberSnapshot(nickname="x", roles=frozenset({self.role}))
        assert is_noop_member_update(member, member)

    def test_role_added(self):
        before = MemberSnapshot(roles=frozenset())
        after = MemberSnapshot(roles=frozenset({self.role}))
        assert not is_noop_member_update(before, after)

    def test_nickname_only(self):
        assert not is_noop_member_update(MemberSnapshot(nickname=None), MemberSnapshot(nickname="Ali"))

    def test_only_everyone_changed_is_noop(self):
        everyone = RoleRef("111", "@everyone", is_default=True)
        assert is_noop_member_update(MemberSnapshot(), MemberSnapshot(roles=frozenset({everyone})))
