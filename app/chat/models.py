"""
Chat system models.

This module defines the in-memory records for the chat system:
- Users with a role and a presence status
- Messages posted into named channels
- Reactions (one per message/user/emoji triple)
- MessageView, the read projection sent to clients

Models:
    User: Chat participant (founder, bot or member)
    Message: Text message within a channel
    Reaction: Emoji reaction by a user on a message
    MessageView: Message joined with its author and reaction counts

Design Decisions:
    - Records are frozen dataclasses; the store swaps whole records on update
    - Content and author of a message never change after creation
    - Spam annotation is computed during creation, before the record is stored
    - State lives only in process memory (see chat.store.ChatStore)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from django.db import models

from chat.constants import MESSAGE_CONFIG


class UserRole(models.TextChoices):
    """
    Role of a chat user.

    Sidebar order: FOUNDER, then BOT, then MEMBER.
    """

    FOUNDER = "founder", "Founder"
    BOT = "bot", "Bot"
    MEMBER = "member", "Member"


class PresenceStatus(models.TextChoices):
    """User presence status values."""

    ONLINE = "online", "Online"
    AWAY = "away", "Away"
    OFFLINE = "offline", "Offline"


ROLE_RANK = {
    UserRole.FOUNDER: 0,
    UserRole.BOT: 1,
    UserRole.MEMBER: 2,
}

STATUS_RANK = {
    PresenceStatus.ONLINE: 0,
    PresenceStatus.AWAY: 1,
    PresenceStatus.OFFLINE: 2,
}


@dataclass(frozen=True)
class User:
    """A chat participant."""

    id: int
    username: str
    role: str
    status: str
    created_at: datetime
    avatar: str | None = None

    @property
    def is_bot(self) -> bool:
        return self.role == UserRole.BOT

    def sort_key(self) -> tuple[int, int, str]:
        """Sidebar ordering: role rank, then status rank, then username."""
        return (
            ROLE_RANK.get(self.role, len(ROLE_RANK)),
            STATUS_RANK.get(self.status, len(STATUS_RANK)),
            self.username,
        )


@dataclass(frozen=True)
class Message:
    """A text message posted into a channel."""

    id: int
    content: str
    author_id: int
    created_at: datetime
    channel_id: str = MESSAGE_CONFIG.DEFAULT_CHANNEL
    is_spam: bool = False
    spam_score: int = 0

    def sort_key(self) -> tuple[datetime, int]:
        return (self.created_at, self.id)


@dataclass(frozen=True)
class Reaction:
    """One user's emoji reaction on one message."""

    message_id: int
    user_id: int
    emoji: str


@dataclass(frozen=True)
class MessageView:
    """
    Read projection of a message.

    The only message shape returned by the API or pushed over WebSockets.
    reaction_counts is a snapshot taken under the store lock.
    """

    message: Message
    author: User
    reaction_counts: dict[str, int] = field(default_factory=dict)
