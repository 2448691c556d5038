"""
discord_utils.py
================

Stateless Discord helpers used by the command cogs.
"""

from typing import Iterable, List

import discord

# Discord rejects message bodies longer than this.
MESSAGE_LIMIT = 2000


def has_permissions(application_context: discord.ApplicationContext, **required_permissions) -> bool:
    """
    Check if the command issuer has all specified permissions in the guild.

    Args:
        application_context (discord.ApplicationContext): The command context.
        **required_permissions: Permission flags to check.

    Returns:
        bool: True if all permissions are present, False otherwise.
    """
    if not isinstance(application_context.author, discord.Member):
        return False
    return all(
        getattr(application_context.author.guild_permissions, permission_name, False)
        for permission_name in required_permissions
    )


def is_guild_admin(member: discord.abc.User) -> bool:
    """True for guild owners and members with the administrator permission."""
    if not isinstance(member, discord.Member):
        return False
    if member.guild is not None and member.guild.owner_id == member.id:
        return True
    return bool(member.guild_permissions.administrator)


def chunk_lines(lines: Iterable[str], limit: int = MESSAGE_LIMIT) -> List[str]:
    """Join lines into as few messages as possible, each at most ``limit`` characters."""
    chunks: List[str] = []
    current = ""
    for line in lines:
        line = line[:limit]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks
