"""Message listener Cog for chatwarden.

Turns every guild message into an :class:`InboundMessage` and runs it through
the moderation policy.
"""

import discord
from discord.ext import commands

from chatwarden.bot.bot_services import BotServices
from chatwarden.datatypes.moderation_datatypes import InboundMessage
from chatwarden.util.discord_utils import is_guild_admin
from chatwarden.util.logger import get_logger

logger = get_logger("message_listener_cog")


def known_admin_status(message: discord.Message) -> bool | None:
    """Admin status readable from the cached member, or None if the policy must ask."""
    if not isinstance(message.author, discord.Member):
        return None
    return is_guild_admin(message.author)


class MessageListenerCog(commands.Cog):
    """Cog screening new messages against the blacklist."""

    def __init__(self, discord_bot_instance, services: BotServices):
        self.bot = discord_bot_instance
        self.services = services
        logger.info("Message listener cog loaded")

    def _create_inbound_message(self, message: discord.Message) -> InboundMessage:
        return InboundMessage(
            text=message.content or "",
            sender_id=message.author.id,
            chat_id=message.guild.id,
            channel_id=message.channel.id,
            is_from_admin=known_admin_status(message),
            message_ref=message,
            channel_ref=message.channel,
            sender_ref=message.author,
        )

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message):
        """Moderate guild messages from human authors; ignore DMs and bots."""
        if message.guild is None or message.author.bot:
            return
        if not message.content:
            return

        self.services.actions.register_chat(message.guild.id)
        await self.services.policy.moderate(self._create_inbound_message(message))


def setup(discord_bot_instance, services: BotServices):
    """Register the MessageListenerCog with the bot."""
    discord_bot_instance.add_cog(MessageListenerCog(discord_bot_instance, services))
