"""
Boundary contracts consumed by :class:`ModerationPolicy`.

The transport layer implements these; tests substitute mocks.
"""

from __future__ import annotations

from typing import Any, List, Protocol, runtime_checkable


@runtime_checkable
class ChatActions(Protocol):
    """Chat primitives the moderation core delegates to."""

    async def delete_message(self, message_ref: Any) -> None:
        """Delete a message. Raises when the platform refuses."""

    async def ban_user_in_chat(self, chat_id: int, user_id: int) -> None:
        """Ban a user from a single chat. Raises when the platform refuses."""

    async def ban_user_everywhere(self, user_id: int) -> List[int]:
        """Ban a user from every known chat and return the chats where it succeeded."""

    async def send_message(self, channel_ref: Any, text: str) -> Any:
        """Send ``text`` and return a ref to the sent message."""

    def schedule_deletion(self, message_ref: Any, delay_seconds: float) -> None:
        """Delete ``message_ref`` after ``delay_seconds``, fire-and-forget."""

    async def is_admin(self, chat_id: int, user_id: int) -> bool:
        """Return whether the user is an administrator or owner of the chat."""

    def register_chat(self, chat_id: int) -> None:
        """Remember a chat as a ban-everywhere target."""

    def display_name(self, user_ref: Any) -> str:
        """Human readable name for audit messages."""


@runtime_checkable
class AuditSink(Protocol):
    """Admin-facing audit channel. Best effort: implementations never raise."""

    async def log_to_admin(self, text: str) -> None:
        ...
