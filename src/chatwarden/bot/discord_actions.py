"""
py-cord implementations of the moderation core's collaborators.

- :class:`DiscordChatActions` performs deletes, bans and replies and keeps
  the registry of servers a "ban everywhere" fans out to.
- :class:`DiscordAuditSink` posts audit text into the configured admin
  channel.

A "chat" in the core is a Discord guild; chat ids are guild ids.
"""

from __future__ import annotations

import threading
from typing import Any, List, Optional, Set

import discord

from chatwarden.scheduler.deletion_scheduler import DeletionScheduler
from chatwarden.util.logger import get_logger

logger = get_logger("discord_actions")

BAN_REASON = "Repeated blacklist violations."


def format_display_name(user: Any) -> str:
    """Render a user as ``@name`` or ``Display Name (ID: n)`` for audit messages."""
    if user is None:
        return "Unknown user"
    if isinstance(user, int):
        return f"ID: {user}"

    name = getattr(user, "name", None)
    if name:
        return f"@{name}"

    display = getattr(user, "display_name", None) or getattr(user, "global_name", None) or "Unknown"
    return f"{display} (ID: {getattr(user, 'id', '?')})"


class DiscordChatActions:
    """Chat-action collaborator backed by a py-cord bot.

    Parameters
    ----------
    bot:
        Connected :class:`discord.Bot`.
    deletion_scheduler:
        Scheduler used for fire-and-forget delayed deletes.
    """

    def __init__(self, bot: discord.Bot, deletion_scheduler: DeletionScheduler) -> None:
        self.bot = bot
        self.deletion_scheduler = deletion_scheduler
        self._chat_ids: Set[int] = set()
        self._chat_lock = threading.Lock()

    # --------------------------
    # Chat registry
    # --------------------------
    def register_chat(self, chat_id: int) -> None:
        with self._chat_lock:
            if chat_id not in self._chat_ids:
                self._chat_ids.add(chat_id)
                logger.debug("[CHAT ACTIONS] Registered chat %s", chat_id)

    def forget_chat(self, chat_id: int) -> None:
        with self._chat_lock:
            self._chat_ids.discard(chat_id)

    def known_chat_ids(self) -> List[int]:
        with self._chat_lock:
            return sorted(self._chat_ids)

    # --------------------------
    # Actions
    # --------------------------
    async def delete_message(self, message_ref: discord.Message) -> None:
        await message_ref.delete()

    async def ban_user_in_chat(self, chat_id: int, user_id: int) -> None:
        guild = self.bot.get_guild(chat_id)
        if guild is None:
            raise LookupError(f"Guild {chat_id} is not available to the bot")
        await guild.ban(discord.Object(id=user_id), reason=BAN_REASON)

    async def ban_user_everywhere(self, user_id: int) -> List[int]:
        """Ban ``user_id`` in every registered guild; return the guilds where it worked."""
        chat_ids = self.known_chat_ids()
        if not chat_ids:
            logger.warning("[CHAT ACTIONS] No chats registered, cannot ban user %s anywhere", user_id)

        banned_in: List[int] = []
        for chat_id in chat_ids:
            try:
                await self.ban_user_in_chat(chat_id, user_id)
            except (discord.HTTPException, LookupError) as exc:
                logger.error("[CHAT ACTIONS] Failed to ban user %s in chat %s: %s", user_id, chat_id, exc)
                continue
            banned_in.append(chat_id)
            logger.info("[CHAT ACTIONS] User %s banned in chat %s", user_id, chat_id)
        return banned_in

    async def send_message(self, channel_ref: discord.abc.Messageable, text: str) -> discord.Message:
        return await channel_ref.send(text)

    def schedule_deletion(self, message_ref: Any, delay_seconds: float) -> None:
        self.deletion_scheduler.schedule_nowait(message_ref, delay_seconds)

    async def is_admin(self, chat_id: int, user_id: int) -> bool:
        """Administrators and the guild owner count as admins."""
        guild = self.bot.get_guild(chat_id)
        if guild is None:
            return False
        if guild.owner_id == user_id:
            return True

        member = guild.get_member(user_id)
        if member is None:
            try:
                member = await guild.fetch_member(user_id)
            except discord.NotFound:
                return False
            except discord.HTTPException as exc:
                logger.error("[CHAT ACTIONS] Failed to check member rights of %s in chat %s: %s", user_id, chat_id, exc)
                return False

        return bool(member.guild_permissions.administrator)

    def display_name(self, user_ref: Any) -> str:
        return format_display_name(user_ref)


class DiscordAuditSink:
    """Posts audit messages to the admin channel; never raises."""

    def __init__(self, bot: discord.Bot, admin_channel_id: Optional[int]) -> None:
        self.bot = bot
        self.admin_channel_id = admin_channel_id

    async def log_to_admin(self, text: str) -> None:
        if self.admin_channel_id is None:
            logger.info("[AUDIT] %s", text)
            return

        try:
            channel = self.bot.get_channel(self.admin_channel_id)
            if channel is None:
                channel = await self.bot.fetch_channel(self.admin_channel_id)
            await channel.send(text)
        except Exception as exc:
            logger.error("[AUDIT] Failed to send admin log to channel %s: %s", self.admin_channel_id, exc)
