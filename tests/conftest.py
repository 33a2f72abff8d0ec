"""
Pytest configuration and fixtures for Modrelay tests.

py-cord objects are replaced by ``SimpleNamespace`` fakes carrying only the
attributes the relay reads.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import discord
import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

GUILD_ID = 111
# Fakes are dated relative to the real clock because the pipeline stamps events with it
NOW = datetime.now(timezone.utc).replace(microsecond=0)


def fake_role(role_id, name):
    return SimpleNamespace(id=role_id, name=name)


def fake_guild(guild_id=GUILD_ID, name="Research Hub", member_count=42):
    return SimpleNamespace(id=guild_id, name=name, member_count=member_count)


def fake_user(user_id=500, name="alice", display_name=None, bot=False, created_days_ago=30):
    return SimpleNamespace(
        id=user_id,
        name=name,
        display_name=display_name or name,
        bot=bot,
        created_at=NOW - timedelta(days=created_days_ago),
        display_avatar=SimpleNamespace(url=f"https://cdn.example/avatars/{user_id}.png"),
    )


def fake_member(
    user_id=500,
    name="alice",
    nick=None,
    roles=(),
    guild=None,
    bot=False,
    created_days_ago=30,
    joined_at=None,
):
    guild = guild or fake_guild()
    member = fake_user(user_id=user_id, name=name, display_name=nick or name, bot=bot, created_days_ago=created_days_ago)
    member.nick = nick
    # Members always hold @everyone, whose id equals the guild id
    member.roles = [fake_role(guild.id, "@everyone"), *roles]
    member.guild = guild
    member.joined_at = joined_at or NOW - timedelta(hours=1)
    return member


def fake_text_channel(channel_id=222, name="general"):
    return SimpleNamespace(id=channel_id, name=name, type=discord.ChannelType.text)


def fake_dm_channel(channel_id=333):
    return SimpleNamespace(id=channel_id, type=discord.ChannelType.private)


def fake_message(
    message_id=900,
    content="hello",
    author=None,
    channel=None,
    guild=None,
    attachments=(),
    mentions=(),
    role_mentions=(),
    reference=None,
):
    return SimpleNamespace(
        id=message_id,
        content=content,
        author=author if author is not None else fake_member(),
        channel=channel if channel is not None else fake_text_channel(),
        guild=guild,
        attachments=list(attachments),
        mentions=list(mentions),
        role_mentions=list(role_mentions),
        reference=reference,
        created_at=NOW - timedelta(seconds=5),
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def guild():
    return fake_guild()


@pytest.fixture
def fakes():
    """Namespace of fake object factories."""
    return SimpleNamespace(
        role=fake_role,
        guild=fake_guild,
        user=fake_user,
        member=fake_member,
        text_channel=fake_text_channel,
        dm_channel=fake_dm_channel,
        message=fake_message,
    )
