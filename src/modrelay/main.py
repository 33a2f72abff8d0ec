"""
Discord Event Relay
===================

Connects to Discord and relays message, member and reaction events to a
downstream automation webhook as normalized JSON envelopes.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project.
    Resolution order:
    1. MODRELAY_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller, Nuitka), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("MODRELAY_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()

import asyncio
import discord
from dotenv import load_dotenv

from modrelay.configuration.app_configuration import AppConfig
from modrelay.relay.dispatcher import RelayDispatcher
from modrelay.relay.relay_pipeline import RelayPipeline
from modrelay.util.logger import get_logger, handle_async_exception, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Returns
    -------
    str
        Discord bot token extracted from the loaded environment.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Construct the Discord intents required by the relayed events.

    Returns
    -------
    discord.Intents
        Intents enabling guild, member, message (guild and DM) and reaction events.
    """
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.dm_messages = True
    intents.reactions = True
    intents.members = True
    return intents


def build_pipeline(bot: discord.Bot, config: AppConfig) -> RelayPipeline:
    """Create the dispatcher and relay pipeline from configuration."""
    dispatcher = RelayDispatcher(config.webhook_url, timeout=config.request_timeout)
    if not dispatcher.is_configured:
        logger.critical("'N8N_ROUTER_URL' is not configured. Events will be received but not forwarded.")
    return RelayPipeline(
        dispatcher,
        client=bot,
        guild_id=config.guild_id,
        settings=config.normalizer_settings,
    )


def load_cogs(discord_bot_instance: discord.Bot, pipeline: RelayPipeline, config: AppConfig) -> None:
    """Register all operational cogs with the provided Discord bot instance."""
    from modrelay.bot.cogs import events_listener, relay_listener

    events_listener.setup(discord_bot_instance, config.guild_id, config.webhook_url)
    relay_listener.setup(discord_bot_instance, pipeline)

    logger.info("All cogs loaded successfully.")


def create_bot(config: AppConfig) -> discord.Bot:
    """Instantiate the Discord bot, the relay pipeline and register all cogs."""
    bot = discord.Bot(intents=build_intents())

    @bot.event
    async def on_error(event_method: str, *args, **kwargs) -> None:
        # A failing listener must not stop the relay for later events.
        logger.exception("Unhandled error in %s", event_method)

    pipeline = build_pipeline(bot, config)
    load_cogs(bot, pipeline, config)
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and handle lifecycle logging around the connection."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None = None) -> None:
    """Close the gateway connection if it is still open."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing Discord bot: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap configuration and the bot, then relay until disconnected.

    Returns
    -------
    int
        Process exit code reflecting success or failure of the session.
    """
    token = load_environment()
    asyncio.get_running_loop().set_exception_handler(handle_async_exception)

    config = AppConfig(BASE_DIR / "config" / "app_config.yml")

    try:
        bot = create_bot(config)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot)

    return exit_code


def main() -> int:
    """Entrypoint that orchestrates the async runtime and returns the process code."""
    logger.info("Starting Discord event relay…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        if code is None:
            return 1
        try:
            return int(code)
        except (ValueError, TypeError):
            logger.warning("SystemExit.code is not an int (%r); defaulting to 1", code)
            return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
