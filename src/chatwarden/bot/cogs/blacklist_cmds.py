"""
Blacklist cog: admin slash commands for the phrase blacklist and spam bans.

Commands
- ``/banword`` and ``/unbanword`` add or remove a phrase (words separated by
  spaces).
- ``/listbanword`` shows the blacklist.
- ``/spamban`` bans a user from every server the bot moderates. The user does
  not have to be a member of the current server; the "Spam ban author"
  message command bans the author of a message instead.
- ``/violations`` and ``/clearviolations`` inspect or reset a user's
  violation count.

Every command requires the administrator permission and is limited to one
use per second per user. Replies are ephemeral except the public spam-ban
announcement; every change is reported to the audit channel.
"""

import asyncio
import discord
from discord import Option
from discord.ext import commands

from chatwarden.bot.bot_services import BotServices
from chatwarden.util.discord_utils import chunk_lines, has_permissions, is_guild_admin
from chatwarden.util.logger import get_logger

logger = get_logger("blacklist_cog")

ADMIN_ONLY = "ℹ This command is only available to administrators."
COOLDOWN_MESSAGE = "⏱️ Please use at most one command per second."

# One command per second per user.
COMMAND_RATE = 1
COMMAND_PER_SECONDS = 1.0


class BlacklistCog(commands.Cog):
    """Cog containing the blacklist administration commands."""

    def __init__(self, discord_bot_instance, services: BotServices):
        self.discord_bot_instance = discord_bot_instance
        self.services = services
        logger.info("Blacklist cog loaded")

    async def cog_command_error(self, ctx: discord.ApplicationContext, error: Exception) -> None:
        if isinstance(error, commands.CommandOnCooldown):
            await ctx.respond(COOLDOWN_MESSAGE, ephemeral=True)
            return
        logger.error("Blacklist command failed: %s", error, exc_info=error)

    async def check_admin(self, ctx: discord.ApplicationContext) -> bool:
        """Defer ephemerally and reject non-administrators."""
        await ctx.defer(ephemeral=True)
        if not has_permissions(ctx, administrator=True):
            await ctx.send_followup(ADMIN_ONLY, ephemeral=True)
            return False
        return True

    def _invoker_name(self, ctx: discord.ApplicationContext) -> str:
        return self.services.actions.display_name(ctx.author)

    @commands.slash_command(name="banword", description="Add a phrase to the blacklist.")
    @commands.cooldown(COMMAND_RATE, COMMAND_PER_SECONDS, commands.BucketType.user)
    async def banword(
        self,
        ctx: discord.ApplicationContext,
        words: Option(str, "Words of the phrase, separated by spaces.", required=True),  # type: ignore
    ) -> None:
        if not await self.check_admin(ctx):
            return

        tokens = words.split()
        if not tokens:
            await ctx.send_followup("ℹ Usage: /banword word1 [word2 ...]", ephemeral=True)
            return

        phrase = " ".join(tokens).lower()
        added = await asyncio.to_thread(self.services.phrase_store.add_phrase, tokens)
        if not added:
            await ctx.send_followup(f"ℹ `{phrase}` is already blacklisted.", ephemeral=True)
            return

        await ctx.send_followup(f"✅ Blacklisted phrase added: `{phrase}`", ephemeral=True)
        await self.services.audit.log_to_admin(
            f"🚫 Blacklisted phrase added\n\nAdmin: {self._invoker_name(ctx)}\nPhrase: `{phrase}`"
        )

    @commands.slash_command(name="unbanword", description="Remove a phrase from the blacklist.")
    @commands.cooldown(COMMAND_RATE, COMMAND_PER_SECONDS, commands.BucketType.user)
    async def unbanword(
        self,
        ctx: discord.ApplicationContext,
        words: Option(str, "Words of the phrase, separated by spaces.", required=True),  # type: ignore
    ) -> None:
        if not await self.check_admin(ctx):
            return

        tokens = words.split()
        if not tokens:
            await ctx.send_followup("💡 Usage: /unbanword word1 [word2 ...]", ephemeral=True)
            return

        phrase = " ".join(tokens).lower()
        removed = await asyncio.to_thread(self.services.phrase_store.remove_phrase, tokens)
        if not removed:
            await ctx.send_followup("❌ That phrase is not on the blacklist.", ephemeral=True)
            return

        await ctx.send_followup(f"✅ Blacklisted phrase removed: `{phrase}`", ephemeral=True)
        await self.services.audit.log_to_admin(
            f"✅ Blacklisted phrase removed\n\nAdmin: {self._invoker_name(ctx)}\nPhrase: `{phrase}`"
        )

    @commands.slash_command(name="listbanword", description="Show the blacklisted phrases.")
    @commands.cooldown(COMMAND_RATE, COMMAND_PER_SECONDS, commands.BucketType.user)
    async def listbanword(self, ctx: discord.ApplicationContext) -> None:
        if not await self.check_admin(ctx):
            return

        phrases = await asyncio.to_thread(self.services.phrase_store.list)
        if not phrases:
            await ctx.send_followup("📭 The blacklist is empty.", ephemeral=True)
            return

        lines = ["🚫 Blacklisted phrases:", ""]
        lines.extend(f"{index}. `{' '.join(phrase)}`" for index, phrase in enumerate(phrases, start=1))
        for chunk in chunk_lines(lines):
            await ctx.send_followup(chunk, ephemeral=True)

    async def _spam_ban(self, ctx: discord.ApplicationContext, user: discord.abc.User) -> None:
        """Ban ``user`` everywhere, clear their violations and announce it."""
        # Users outside this server resolve to discord.User and are never admins here.
        if is_guild_admin(user):
            await ctx.send_followup("⛔ Administrators cannot be banned.", ephemeral=True)
            return

        if ctx.guild is not None:
            self.services.actions.register_chat(ctx.guild.id)
        banned_in = await self.services.actions.ban_user_everywhere(user.id)
        if not banned_in:
            await ctx.send_followup(f"❌ Could not ban {user.mention} anywhere.", ephemeral=True)
            return

        await asyncio.to_thread(self.services.ledger.clear_violations, user.id)
        name = self.services.actions.display_name(user)
        await ctx.send_followup(f"✅ Banned in {len(banned_in)} server(s).", ephemeral=True)
        if ctx.channel is not None:
            try:
                await ctx.channel.send(f"🔨 {name} was banned for spam.")
            except discord.HTTPException as exc:
                logger.warning("Failed to announce spam ban of %s: %s", user.id, exc)
        await self.services.audit.log_to_admin(
            f"🔨 Banned for spam.\n\nBanned: {name}\nAdmin: {self._invoker_name(ctx)}"
        )

    @commands.slash_command(name="spamban", description="Ban a user from every server the bot moderates.")
    @commands.cooldown(COMMAND_RATE, COMMAND_PER_SECONDS, commands.BucketType.user)
    async def spamban(
        self,
        ctx: discord.ApplicationContext,
        user: Option(discord.User, "The user to ban (mention or ID).", required=True),  # type: ignore
    ) -> None:
        if not await self.check_admin(ctx):
            return
        await self._spam_ban(ctx, user)

    @discord.message_command(name="Spam ban author")
    @commands.cooldown(COMMAND_RATE, COMMAND_PER_SECONDS, commands.BucketType.user)
    async def spamban_author(self, ctx: discord.ApplicationContext, message: discord.Message) -> None:
        if not await self.check_admin(ctx):
            return
        await self._spam_ban(ctx, message.author)

    @commands.slash_command(name="violations", description="Show a user's blacklist violation count.")
    @commands.cooldown(COMMAND_RATE, COMMAND_PER_SECONDS, commands.BucketType.user)
    async def violations(
        self,
        ctx: discord.ApplicationContext,
        user: Option(discord.User, "The user to inspect.", required=True),  # type: ignore
    ) -> None:
        if not await self.check_admin(ctx):
            return

        count = await asyncio.to_thread(self.services.ledger.get_violations, user.id)
        await ctx.send_followup(f"{user.mention} has {count} violation(s).", ephemeral=True)

    @commands.slash_command(name="clearviolations", description="Reset a user's blacklist violation count.")
    @commands.cooldown(COMMAND_RATE, COMMAND_PER_SECONDS, commands.BucketType.user)
    async def clearviolations(
        self,
        ctx: discord.ApplicationContext,
        user: Option(discord.User, "The user to reset.", required=True),  # type: ignore
    ) -> None:
        if not await self.check_admin(ctx):
            return

        cleared = await asyncio.to_thread(self.services.ledger.clear_violations, user.id)
        if not cleared:
            await ctx.send_followup(f"{user.mention} has no violations.", ephemeral=True)
            return

        await ctx.send_followup(f"✅ Violations of {user.mention} cleared.", ephemeral=True)
        await self.services.audit.log_to_admin(
            f"🧹 Violations cleared\n\nUser: {self.services.actions.display_name(user)}\n"
            f"Admin: {self._invoker_name(ctx)}"
        )


def setup(discord_bot_instance, services: BotServices):
    """Register the BlacklistCog with the bot."""
    discord_bot_instance.add_cog(BlacklistCog(discord_bot_instance, services))
