"""Relay listener Cog for Modrelay.

This cog subscribes to the gateway events that are relayed downstream and
passes them to the relay pipeline. Delivery is scheduled in the background,
so every listener returns as soon as the event has been filtered and
normalized.

Raw listeners are used where py-cord only dispatches the regular event for
cached messages (edits, deletes, reactions).
"""

import discord
from discord.ext import commands

from modrelay.relay.relay_pipeline import RelayPipeline
from modrelay.util.logger import get_logger

logger = get_logger("relay_listener_cog")


class RelayListenerCog(commands.Cog):
    """Cog forwarding message, member and reaction events to the relay pipeline."""

    def __init__(self, discord_bot_instance, pipeline: RelayPipeline):
        """
        Initialize the relay listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        pipeline:
            Relay pipeline receiving every event.
        """
        self.bot = discord_bot_instance
        self.pipeline = pipeline
        logger.info("[RELAY LISTENER] Relay listener cog loaded")

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message):
        self.pipeline.submit(self.pipeline.message_create(message))

    @commands.Cog.listener(name="on_message_edit")
    async def on_message_edit(self, before: discord.Message, after: discord.Message):
        """Edits of cached messages, with the previous content available."""
        self.pipeline.submit(self.pipeline.message_update(before, after))

    @commands.Cog.listener(name="on_raw_message_edit")
    async def on_raw_message_edit(self, payload: discord.RawMessageUpdateEvent):
        """Edits of messages that were never cached. Cached edits are handled by on_message_edit."""
        if payload.cached_message is not None:
            return
        self.pipeline.submit(await self.pipeline.raw_message_update(payload))

    @commands.Cog.listener(name="on_raw_message_delete")
    async def on_raw_message_delete(self, payload: discord.RawMessageDeleteEvent):
        self.pipeline.submit(await self.pipeline.raw_message_delete(payload))

    @commands.Cog.listener(name="on_member_join")
    async def on_member_join(self, member: discord.Member):
        self.pipeline.submit(self.pipeline.member_add(member))

    @commands.Cog.listener(name="on_member_remove")
    async def on_member_remove(self, member: discord.Member):
        self.pipeline.submit(self.pipeline.member_remove(member))

    @commands.Cog.listener(name="on_member_update")
    async def on_member_update(self, before: discord.Member, after: discord.Member):
        self.pipeline.submit(self.pipeline.member_update(before, after))

    @commands.Cog.listener(name="on_raw_reaction_add")
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        self.pipeline.submit(await self.pipeline.raw_reaction_add(payload))


def setup(discord_bot_instance, pipeline: RelayPipeline):
    """
    Register the RelayListenerCog with the bot.

    Parameters
    ----------
    discord_bot_instance:
        The Discord bot instance to add this cog to.
    pipeline:
        Relay pipeline the cog forwards events to.
    """
    discord_bot_instance.add_cog(RelayListenerCog(discord_bot_instance, pipeline))
