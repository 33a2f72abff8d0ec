"""Event listener Cog for Modrelay.

This cog handles bot lifecycle events. Relayed gateway events are handled by
the RelayListenerCog.
"""

import discord
from discord.ext import commands

from modrelay.util.logger import get_logger

logger = get_logger("events_listener")


class EventsListenerCog(commands.Cog):
    """Cog reporting connection state and the active relay scope."""

    def __init__(self, discord_bot_instance, guild_id: str = "", webhook_url: str = ""):
        """
        Initialize the events listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        guild_id:
            Configured guild scope, empty for all guilds.
        webhook_url:
            Configured destination, empty when delivery is disabled.
        """
        self.bot = discord_bot_instance
        self.guild_id = guild_id
        self.webhook_url = webhook_url
        logger.info("[EVENTS LISTENER] Events listener cog loaded")

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        """Log the connected identity, relay scope and destination."""
        if self.bot.user:
            logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")
        else:
            logger.warning("[EVENTS LISTENER] Bot partially connected, but user information not yet available.")

        logger.info(f"[EVENTS LISTENER] Relay scope: {self.guild_id or 'ALL guilds'}")
        if self.webhook_url:
            logger.info(f"[EVENTS LISTENER] Relaying events to {self.webhook_url}")
        else:
            logger.critical("[EVENTS LISTENER] N8N_ROUTER_URL is not configured; events will not be forwarded.")

    @commands.Cog.listener(name="on_guild_join")
    async def on_guild_join(self, guild: discord.Guild):
        in_scope = not self.guild_id or str(guild.id) == self.guild_id
        logger.info(
            f"[EVENTS LISTENER] Joined guild {guild.name} (ID: {guild.id}); "
            f"{'relaying' if in_scope else 'outside relay scope'}"
        )


def setup(discord_bot_instance, guild_id: str = "", webhook_url: str = ""):
    """
    Register the EventsListenerCog with the bot.

    Parameters
    ----------
    discord_bot_instance:
        The Discord bot instance to add this cog to.
    """
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, guild_id, webhook_url))
