"""
Explicitly constructed moderation services shared by the cogs.

Everything is built once in :func:`build_services` and handed to each cog, so
several bots (or tests) can run side by side without module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass

import discord

from chatwarden.bot.discord_actions import DiscordAuditSink, DiscordChatActions
from chatwarden.configuration.app_configuration import AppConfig
from chatwarden.moderation.moderation_policy import ModerationPolicy
from chatwarden.moderation.phrase_store import PhraseStore
from chatwarden.moderation.violation_ledger import ViolationLedger
from chatwarden.scheduler.deletion_scheduler import DeletionScheduler


@dataclass
class BotServices:
    """Moderation stores, collaborators and policy for one bot instance."""

    config: AppConfig
    phrase_store: PhraseStore
    ledger: ViolationLedger
    deletion_scheduler: DeletionScheduler
    actions: DiscordChatActions
    audit: DiscordAuditSink
    policy: ModerationPolicy

    async def shutdown(self) -> None:
        await self.deletion_scheduler.shutdown()


def build_services(bot: discord.Bot, config: AppConfig) -> BotServices:
    """Load the persisted stores and wire the moderation policy to ``bot``."""
    phrase_store = PhraseStore(config.phrases_path)
    ledger = ViolationLedger(config.violations_path)
    deletion_scheduler = DeletionScheduler()
    actions = DiscordChatActions(bot, deletion_scheduler)
    audit = DiscordAuditSink(bot, config.admin_channel_id)
    policy = ModerationPolicy(
        phrase_store,
        ledger,
        actions,
        audit,
        admin_chat_id=config.admin_channel_id,
        command_prefix=config.command_prefix,
        ban_threshold=config.ban_threshold,
        warning_delete_delay=config.warning_delete_delay,
    )
    return BotServices(
        config=config,
        phrase_store=phrase_store,
        ledger=ledger,
        deletion_scheduler=deletion_scheduler,
        actions=actions,
        audit=audit,
        policy=policy,
    )
