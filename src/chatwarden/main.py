"""
chatwarden
==========

A Discord bot that screens messages against an admin-managed phrase
blacklist, warns first-time offenders and bans repeat offenders from every
server it moderates.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the project base directory.

    Resolution order:
    1. CHATWARDEN_HOME environment variable, if set.
    2. Otherwise the grandparent of this package (the repository root).
    """
    if env_home := os.getenv("CHATWARDEN_HOME"):
        return Path(env_home).resolve()
    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()

import asyncio
import discord
from dotenv import load_dotenv

from chatwarden.bot.bot_services import BotServices, build_services
from chatwarden.configuration.app_configuration import AppConfig
from chatwarden.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load ``.env`` and return the Discord bot token.

    Raises
    ------
    SystemExit
        If ``DISCORD_BOT_TOKEN`` is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents for guild, member and message-content events."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot, services: BotServices) -> None:
    """Register all cogs with the bot."""
    from chatwarden.bot.cogs import blacklist_cmds, events_listener, message_listener

    events_listener.setup(discord_bot_instance, services)
    message_listener.setup(discord_bot_instance, services)
    blacklist_cmds.setup(discord_bot_instance, services)

    logger.info("All cogs loaded successfully.")


def create_bot(config: AppConfig) -> tuple[discord.Bot, BotServices]:
    """Instantiate the bot, its moderation services and cogs."""
    bot = discord.Bot(intents=build_intents())
    services = build_services(bot, config)
    load_cogs(bot, services)
    return bot, services


async def run_bot(bot: discord.Bot, services: BotServices, token: str) -> int:
    """Run the bot until it disconnects, then release scheduler resources."""
    logger.info("Attempting to connect to Discord…")
    exit_code = 0
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        if not bot.is_closed():
            await bot.close()
        await services.shutdown()
        logger.info("Shutdown complete.")
    return exit_code


async def async_main() -> int:
    token = load_environment()
    config = AppConfig(BASE_DIR / "config" / "app_config.yml")

    try:
        bot, services = create_bot(config)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    return await run_bot(bot, services, token)


def main() -> int:
    """Console entry point; returns the process exit code."""
    logger.info("Starting chatwarden…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        return code if isinstance(code, int) else 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
