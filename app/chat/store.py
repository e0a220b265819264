"""
In-memory chat state.

ChatStore is the single source of truth for users, messages and reactions.
It allocates identifiers, enforces referential integrity and builds the
MessageView projections that clients receive.

Design Decisions:
    - One instance per process, built by chat.runtime and injected into
      the services; tests build their own
    - Every public method runs under ``lock`` (a re-entrant lock), so
      readers never observe half-applied writes
    - Services take the same lock around "mutate + broadcast" so broadcasts
      leave in commit order
    - Ids come from monotonic counters and are never reused
    - Nothing is persisted; state lives for the lifetime of the process

Usage:
    store = ChatStore()
    alice = store.create_user("Alice")
    message = store.create_message("hello", author_id=alice.id)
    store.add_reaction(message.id, alice.id, "👍")
    store.reaction_counts(message.id)   # {"👍": 1}
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from django.utils import timezone

from chat.constants import MESSAGE_CONFIG
from chat.exceptions import DuplicateUsername, UnknownAuthor, UnknownMessage, UnknownUser
from chat.models import Message, MessageView, PresenceStatus, Reaction, User, UserRole
from chat.spam import SpamVerdict, score_content

logger = logging.getLogger(__name__)


class ChatStore:
    """
    Authoritative mutable chat state with id allocation.

    Attributes:
        lock: Re-entrant lock guarding all state; shared with the services
    """

    def __init__(
        self,
        scorer: Callable[[str], SpamVerdict] = score_content,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.lock = threading.RLock()
        self._scorer = scorer
        self._clock = clock
        self._users: dict[int, User] = {}
        self._messages: dict[int, Message] = {}
        # message_id -> {Reaction: None}, insertion ordered
        self._reactions: dict[int, dict[Reaction, None]] = {}
        self._user_ids = itertools.count(1)
        self._message_ids = itertools.count(1)

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def create_user(
        self,
        username: str,
        role: str = UserRole.MEMBER,
        status: str = PresenceStatus.ONLINE,
        avatar: str | None = None,
    ) -> User:
        """
        Register a new user.

        Raises:
            DuplicateUsername: If the username is already taken
        """
        with self.lock:
            if self._find_by_username(username) is not None:
                raise DuplicateUsername(
                    f"Username {username!r} is already taken",
                    details={"username": username},
                )
            user = User(
                id=next(self._user_ids),
                username=username,
                role=str(role),
                status=str(status),
                avatar=avatar,
                created_at=self._clock(),
            )
            self._users[user.id] = user

        logger.debug(f"Created user {user.id} ({user.username}, {user.role})")
        return user

    def get_user(self, user_id: int) -> User | None:
        with self.lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        with self.lock:
            return self._find_by_username(username)

    def all_users(self) -> list[User]:
        """All users ordered for the sidebar (role, status, username)."""
        with self.lock:
            return sorted(self._users.values(), key=User.sort_key)

    def update_user_status(self, user_id: int, status: str) -> User:
        """
        Change a user's presence status.

        Raises:
            UnknownUser: If no user has this id
        """
        with self.lock:
            user = self._require_user(user_id)
            updated = replace(user, status=str(status))
            self._users[user_id] = updated
        return updated

    def bot_user(self) -> User | None:
        """The first registered bot, if any."""
        with self.lock:
            return next((u for u in self._users.values() if u.is_bot), None)

    # -------------------------------------------------------------------------
    # Messages
    # -------------------------------------------------------------------------

    def create_message(
        self,
        content: str,
        author_id: int,
        channel_id: str = MESSAGE_CONFIG.DEFAULT_CHANNEL,
        created_at: datetime | None = None,
    ) -> Message:
        """
        Store a new message, scored for spam before it becomes visible.

        Args:
            content: Message text
            author_id: Id of an existing user
            channel_id: Target channel
            created_at: Override for back-dated seed messages

        Raises:
            UnknownAuthor: If author_id has no user
        """
        with self.lock:
            if author_id not in self._users:
                raise UnknownAuthor(
                    f"Author {author_id} does not exist",
                    details={"author_id": author_id},
                )
            verdict = self._scorer(content)
            message = Message(
                id=next(self._message_ids),
                content=content,
                author_id=author_id,
                channel_id=channel_id,
                is_spam=verdict.is_spam,
                spam_score=verdict.score,
                created_at=created_at or self._clock(),
            )
            self._messages[message.id] = message

        if verdict.is_spam:
            logger.info(
                f"Message {message.id} flagged as spam "
                f"(score={verdict.score}, matched={list(verdict.matched)})"
            )
        return message

    def get_message(self, message_id: int) -> Message | None:
        with self.lock:
            return self._messages.get(message_id)

    def get_messages(
        self,
        channel_id: str,
        limit: int = MESSAGE_CONFIG.DEFAULT_HISTORY_LIMIT,
    ) -> list[MessageView]:
        """
        Most recent messages of a channel, oldest first.

        Unknown channels and non-positive limits yield an empty list.
        """
        if limit <= 0:
            return []
        with self.lock:
            in_channel = sorted(
                (m for m in self._messages.values() if m.channel_id == channel_id),
                key=Message.sort_key,
            )
            return [self._view(message) for message in in_channel[-limit:]]

    def message_view(self, message_id: int) -> MessageView:
        """
        Build the client projection of one message.

        Raises:
            UnknownMessage: If the message does not exist
        """
        with self.lock:
            return self._view(self._require_message(message_id))

    def count_messages(self) -> int:
        with self.lock:
            return len(self._messages)

    def count_users(self) -> int:
        with self.lock:
            return len(self._users)

    # -------------------------------------------------------------------------
    # Reactions
    # -------------------------------------------------------------------------

    def add_reaction(self, message_id: int, user_id: int, emoji: str) -> bool:
        """
        Add a reaction; adding an existing triple is a no-op.

        Returns:
            True if the reaction was new

        Raises:
            UnknownMessage: If the message does not exist
            UnknownUser: If the user does not exist
        """
        with self.lock:
            self._require_message(message_id)
            self._require_user(user_id)
            reactions = self._reactions.setdefault(message_id, {})
            reaction = Reaction(message_id=message_id, user_id=user_id, emoji=emoji)
            if reaction in reactions:
                return False
            reactions[reaction] = None
            return True

    def remove_reaction(self, message_id: int, user_id: int, emoji: str) -> bool:
        """
        Remove a reaction; removing a missing triple is a no-op.

        Returns:
            True if a reaction was removed
        """
        with self.lock:
            reactions = self._reactions.get(message_id)
            reaction = Reaction(message_id=message_id, user_id=user_id, emoji=emoji)
            if not reactions or reaction not in reactions:
                return False
            del reactions[reaction]
            return True

    def reactions(self, message_id: int) -> list[Reaction]:
        """Reactions on a message in the order they were added."""
        with self.lock:
            return list(self._reactions.get(message_id, {}))

    def reaction_counts(self, message_id: int) -> dict[str, int]:
        """Emoji -> count for a message; empty when it has no reactions."""
        with self.lock:
            counts: dict[str, int] = {}
            for reaction in self._reactions.get(message_id, {}):
                counts[reaction.emoji] = counts.get(reaction.emoji, 0) + 1
            return counts

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _find_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    def _require_user(self, user_id: int) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UnknownUser(
                f"User {user_id} does not exist",
                details={"user_id": user_id},
            )
        return user

    def _require_message(self, message_id: int) -> Message:
        message = self._messages.get(message_id)
        if message is None:
            raise UnknownMessage(
                f"Message {message_id} does not exist",
                details={"message_id": message_id},
            )
        return message

    def _view(self, message: Message) -> MessageView:
        # Authors are never deleted, so the lookup always resolves
        return MessageView(
            message=message,
            author=self._users[message.author_id],
            reaction_counts=self.reaction_counts(message.id),
        )
