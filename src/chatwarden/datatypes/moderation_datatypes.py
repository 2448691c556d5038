"""
Data structures shared by the moderation core and the transport glue.

The core only ever sees plain integers and opaque ``*_ref`` objects; the
Discord layer decides what a ref actually is (usually the py-cord object).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Tuple

# A banned expression: ordered, lower-cased tokens.
Phrase = Tuple[str, ...]


def normalize_tokens(tokens: Iterable[str]) -> Phrase:
    """Lower-case and trim each token, dropping tokens that end up empty."""
    return tuple(token.strip().lower() for token in tokens if token and token.strip())


class EscalationDecision(Enum):
    """Consequence of a blacklist hit, derived from the post-increment count."""

    WARN = "warn"
    BAN = "ban"

    def __str__(self):
        return self.value

    @classmethod
    def from_count(cls, violation_count: int, ban_threshold: int = 2) -> "EscalationDecision":
        """Map a violation count to a decision: ban at or above ``ban_threshold``."""
        return cls.BAN if violation_count >= ban_threshold else cls.WARN


@dataclass(slots=True)
class InboundMessage:
    """
    A chat message handed to :meth:`ModerationPolicy.moderate`.

    Attributes:
        text (str): Raw message text.
        sender_id (int): 64-bit id of the author.
        chat_id (int): Id of the chat (guild) the message was posted in.
        channel_id (int | None): Id of the channel inside the chat, when the
            platform has one.
        is_command (bool): Transport already recognised the message as a command.
        is_from_admin (bool | None): Known admin status of the author; ``None``
            means "ask the chat-action collaborator".
        message_ref (Any): Transport handle used to delete the message.
        channel_ref (Any): Transport handle used to reply next to the message.
        sender_ref (Any): Transport handle used to render the author's name.
    """

    text: str
    sender_id: int
    chat_id: int
    channel_id: int | None = None
    is_command: bool = False
    is_from_admin: bool | None = None
    message_ref: Any = None
    channel_ref: Any = None
    sender_ref: Any = None
