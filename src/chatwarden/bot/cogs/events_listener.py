"""Event listener Cog for chatwarden.

Keeps the ban-everywhere chat registry in sync with the guilds the bot is in
and forgets the violations of members who leave.
"""

import asyncio
import discord
from discord.ext import commands

from chatwarden.bot.bot_services import BotServices
from chatwarden.util.logger import get_logger

logger = get_logger("events_listener_cog")


class EventsListenerCog(commands.Cog):
    """Cog containing guild lifecycle and membership handlers."""

    def __init__(self, discord_bot_instance, services: BotServices):
        self.bot = discord_bot_instance
        self.services = services
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        """Register every guild the bot already belongs to."""
        for guild in self.bot.guilds:
            self.services.actions.register_chat(guild.id)

        if self.bot.user:
            logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")
        logger.info(
            "Moderating %d guilds with %d blacklisted phrases",
            len(self.bot.guilds),
            len(self.services.phrase_store),
        )

    @commands.Cog.listener(name="on_guild_join")
    async def on_guild_join(self, guild: discord.Guild):
        self.services.actions.register_chat(guild.id)
        logger.info("Joined guild %s (%s)", guild.name, guild.id)

    @commands.Cog.listener(name="on_guild_remove")
    async def on_guild_remove(self, guild: discord.Guild):
        self.services.actions.forget_chat(guild.id)
        logger.info("Removed from guild %s (%s)", guild.name, guild.id)

    @commands.Cog.listener(name="on_member_remove")
    async def on_member_remove(self, member: discord.Member):
        """A member who leaves starts over with a clean record."""
        if await asyncio.to_thread(self.services.ledger.clear_violations, member.id):
            logger.info("Cleared violations of %s after leaving guild %s", member, member.guild.id)


def setup(discord_bot_instance, services: BotServices):
    """Register the EventsListenerCog with the bot."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, services))
