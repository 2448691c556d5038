"""
Blacklist enforcement: warn on the first violation, ban on the next.

The escalation state lives entirely in :class:`ViolationLedger`; every
matching message causes exactly one increment and one resulting action.

Flow for one message:
1. Skip commands, the admin/audit chat, and chat administrators.
2. Stop unless :meth:`PhraseStore.check_message` reports a hit.
3. Take the user's escalation lock and increment the ledger. The count
   returned by the increment decides this message's action.
4. Delete the offending message (failures are logged only).
5. At or above the ban threshold: ban everywhere, then clear the count and
   audit the ban. A failed ban keeps the count.
6. Otherwise: post a short-lived warning and audit it.

Hits from one user are escalated one at a time. A hit that was already
waiting when its sender got banned is only deleted, so a burst of spam
ends in a single ban.

Nothing escapes :meth:`ModerationPolicy.moderate`; failures are logged so
the bot keeps moderating.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from chatwarden.datatypes.moderation_datatypes import EscalationDecision, InboundMessage
from chatwarden.moderation.interfaces import AuditSink, ChatActions
from chatwarden.moderation.phrase_store import PhraseStore
from chatwarden.moderation.violation_ledger import ViolationLedger
from chatwarden.util.logger import get_logger

logger = get_logger("moderation_policy")

WARNING_TEMPLATE = "⚠️ {name}, your message was removed. Another violation will get you banned."
WARNING_AUDIT_TEMPLATE = "⚠️ Blacklist violation.\n\nUser: {name}\nViolation: #{count}\nMessage: `{text}`"
BAN_AUDIT_TEMPLATE = "🔨 Banned for spam.\n\nBanned: {name}\nViolations: {count}"


class ModerationPolicy:
    """Ties the phrase store, the violation ledger and the chat collaborator together.

    Parameters
    ----------
    phrase_store:
        Blacklist consulted for every non-exempt message.
    ledger:
        Per-user violation counters.
    actions:
        Chat-action collaborator performing deletes, bans and replies.
    audit:
        Admin audit sink.
    admin_chat_id:
        Chat whose messages are never moderated.
    command_prefix:
        Messages starting with this prefix are never moderated.
    ban_threshold:
        Violation count at which a user gets banned.
    warning_delete_delay:
        Seconds before the public warning is removed again.
    """

    def __init__(
        self,
        phrase_store: PhraseStore,
        ledger: ViolationLedger,
        actions: ChatActions,
        audit: AuditSink,
        *,
        admin_chat_id: Optional[int] = None,
        command_prefix: str = "/",
        ban_threshold: int = 2,
        warning_delete_delay: float = 5.0,
        log: logging.Logger | None = None,
    ) -> None:
        self.phrase_store = phrase_store
        self.ledger = ledger
        self.actions = actions
        self.audit = audit
        self.admin_chat_id = admin_chat_id
        self.command_prefix = command_prefix
        self.ban_threshold = max(1, ban_threshold)
        self.warning_delete_delay = warning_delete_delay
        self.logger = log or logger
        self._per_user_locks: Dict[int, asyncio.Lock] = {}
        # Successful bans applied per user; lets queued hits notice a ban.
        self._bans_applied: Dict[int, int] = {}

    def _lock_for(self, user_id: int) -> asyncio.Lock:
        if user_id not in self._per_user_locks:
            self._per_user_locks[user_id] = asyncio.Lock()
        return self._per_user_locks[user_id]

    async def moderate(self, message: InboundMessage) -> Optional[EscalationDecision]:
        """Screen one message and apply the escalation it earns.

        Returns
        -------
        EscalationDecision | None
            The decision taken, or ``None`` when the message was exempt, clean,
            or processing failed unexpectedly.
        """
        try:
            return await self._moderate(message)
        except asyncio.CancelledError:
            raise
        except Exception:
            self.logger.exception(
                "[MODERATION] Unexpected error moderating message from user %s in chat %s",
                message.sender_id,
                message.chat_id,
            )
            return None

    async def is_exempt(self, message: InboundMessage) -> bool:
        """Commands, the admin chat, and chat administrators are never moderated."""
        if message.is_command or (self.command_prefix and (message.text or "").startswith(self.command_prefix)):
            return True

        if self.admin_chat_id is not None and self.admin_chat_id in (message.chat_id, message.channel_id):
            return True

        if message.is_from_admin is not None:
            return message.is_from_admin

        try:
            return await self.actions.is_admin(message.chat_id, message.sender_id)
        except Exception as exc:
            self.logger.error(
                "[MODERATION] Failed to check admin rights of user %s in chat %s: %s",
                message.sender_id,
                message.chat_id,
                exc,
            )
            return False

    async def _moderate(self, message: InboundMessage) -> Optional[EscalationDecision]:
        user_id = message.sender_id
        bans_seen = self._bans_applied.get(user_id, 0)

        if await self.is_exempt(message):
            return None

        self.logger.debug(
            "[MODERATION] Filtering message from user %s in chat %s: %s",
            user_id,
            message.chat_id,
            (message.text or "")[:80],
        )

        if not await asyncio.to_thread(self.phrase_store.check_message, message.text):
            return None

        async with self._lock_for(user_id):
            if self._bans_applied.get(user_id, 0) != bans_seen:
                await self._delete_offending_message(message, None)
                self.logger.info("[MODERATION] User %s was banned while this message waited", user_id)
                return None

            violation_count = await asyncio.to_thread(self.ledger.add_violation, user_id)
            decision = EscalationDecision.from_count(violation_count, self.ban_threshold)

            await self._delete_offending_message(message, violation_count)

            if decision is EscalationDecision.BAN:
                await self._ban(message, violation_count)
            else:
                await self._warn(message, violation_count)
            return decision

    async def _delete_offending_message(self, message: InboundMessage, violation_count: Optional[int]) -> None:
        try:
            await self.actions.delete_message(message.message_ref)
        except Exception as exc:
            self.logger.warning(
                "[MODERATION] Failed to delete blacklisted message from user %s in chat %s: %s",
                message.sender_id,
                message.chat_id,
                exc,
            )
            return
        self.logger.info(
            "[MODERATION] Deleted blacklisted message from user %s (violations=%s)",
            message.sender_id,
            violation_count,
        )

    async def _ban(self, message: InboundMessage, violation_count: int) -> None:
        name = self._display_name(message)
        try:
            self.actions.register_chat(message.chat_id)
            banned_in = await self.actions.ban_user_everywhere(message.sender_id)
        except Exception as exc:
            self.logger.error("[MODERATION] Failed to ban user %s for repeated violations: %s", message.sender_id, exc)
            return

        if not banned_in:
            self.logger.error(
                "[MODERATION] Ban of user %s for repeated violations failed in every chat", message.sender_id
            )
            return

        self._bans_applied[message.sender_id] = self._bans_applied.get(message.sender_id, 0) + 1
        await asyncio.to_thread(self.ledger.clear_violations, message.sender_id)
        await self.audit.log_to_admin(BAN_AUDIT_TEMPLATE.format(name=name, count=violation_count))
        self.logger.info(
            "[MODERATION] User %s banned in %d chats after %d violations",
            message.sender_id,
            len(banned_in),
            violation_count,
        )

    async def _warn(self, message: InboundMessage, violation_count: int) -> None:
        name = self._display_name(message)
        try:
            warning = await self.actions.send_message(message.channel_ref, WARNING_TEMPLATE.format(name=name))
        except Exception as exc:
            self.logger.warning("[MODERATION] Failed to send warning to user %s: %s", message.sender_id, exc)
        else:
            if warning is not None:
                self.actions.schedule_deletion(warning, self.warning_delete_delay)

        await self.audit.log_to_admin(
            WARNING_AUDIT_TEMPLATE.format(name=name, count=violation_count, text=message.text)
        )
        self.logger.info("[MODERATION] Warned user %s (violation #%d)", message.sender_id, violation_count)

    def _display_name(self, message: InboundMessage) -> str:
        try:
            return self.actions.display_name(message.sender_ref)
        except Exception as exc:
            self.logger.debug("[MODERATION] Could not render name of user %s: %s", message.sender_id, exc)
            return f"ID: {message.sender_id}"
