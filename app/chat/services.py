"""
Chat system service layer.

This module provides the business logic for the chat system: every write
coming from a client (or from the bot) passes through here, is applied to
the in-memory store and is broadcast to the affected channel.

Services:
    MessageService: Message ingestion (store, spam score, bot reply, broadcast)
    ReactionService: Reaction add/remove with count aggregation and broadcast
    UserService: User listing, registration and presence updates

Design Principles:
    - Services hold explicit references to the store, hub and responder
    - Expected failures return ServiceResult.failure()
    - Unexpected failures raise exceptions
    - Mutation and the broadcast describing it share one atomic() block, so
      each channel sees events in commit order

Usage:
    from chat.runtime import get_runtime

    runtime = get_runtime()
    result = runtime.messages.post_message(
        content="Hello everyone!",
        author_id=3,
        channel_id="general",
    )
    if result.success:
        view = result.data
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.services import BaseService, ServiceResult

from chat.broadcast import ChatEvent
from chat.constants import MESSAGE_CONFIG
from chat.exceptions import DuplicateUsername, UnknownAuthor, UnknownMessage, UnknownUser
from chat.models import MessageView, PresenceStatus, User, UserRole
from chat.serializers import MessageViewSerializer, ReactionUpdateSerializer

if TYPE_CHECKING:
    from chat.broadcast import ChannelHub
    from chat.responder import AutoResponder, ReplyPlan
    from chat.store import ChatStore

logger = logging.getLogger(__name__)


class MessageService(BaseService):
    """
    Service for message ingestion and history.

    Methods:
        post_message: Create, score, broadcast and maybe schedule a bot reply
        list_messages: Most recent messages of a channel, oldest first
    """

    def __init__(self, store: ChatStore, hub: ChannelHub, responder: AutoResponder):
        super().__init__(lock=store.lock)
        self.store = store
        self.hub = hub
        self.responder = responder

    def post_message(
        self,
        content: str,
        author_id: int,
        channel_id: str = MESSAGE_CONFIG.DEFAULT_CHANNEL,
    ) -> ServiceResult[MessageView]:
        """
        Post a message into a channel.

        Steps (inside one atomic block):
            1. Store the message; the store scores it for spam
            2. Ask the auto-responder whether the bot should reply
            3. Broadcast new_message with the author and empty reaction counts

        The bot reply, if any, is scheduled after the block and never
        delays this call.

        Args:
            content: Message text
            author_id: Id of the posting user
            channel_id: Target channel

        Returns:
            ServiceResult with the MessageView of the new message

        Error codes:
            VALIDATION_ERROR: Empty content or channel
            UNKNOWN_AUTHOR: author_id has no user
        """
        validation = self.validate_required(content=content, channel_id=channel_id)
        if validation is not None:
            return validation

        content = content.strip()

        with self.atomic():
            try:
                message = self.store.create_message(
                    content=content,
                    author_id=author_id,
                    channel_id=channel_id,
                )
            except UnknownAuthor as exc:
                self.get_logger().warning(f"Rejected message from unknown author {author_id}")
                return ServiceResult.from_error(exc)

            view = self.store.message_view(message.id)
            plan = self.responder.plan_reply(message, self.store.bot_user())
            self.hub.broadcast_sync(
                channel_id,
                ChatEvent.NEW_MESSAGE,
                MessageViewSerializer(view).data,
            )

        self.get_logger().debug(
            f"User {author_id} posted message {message.id} to channel {channel_id}"
        )

        if plan is not None:
            self.responder.schedule(plan, self._deliver_reply)

        return ServiceResult.success(view)

    def list_messages(
        self,
        channel_id: str,
        limit: int = MESSAGE_CONFIG.DEFAULT_HISTORY_LIMIT,
    ) -> ServiceResult[list[MessageView]]:
        """Most recent ``limit`` messages of a channel, oldest first."""
        return ServiceResult.success(self.store.get_messages(channel_id, limit))

    def _deliver_reply(self, plan: ReplyPlan, content: str) -> None:
        """Post a scheduled bot reply through the regular ingestion path."""
        result = self.post_message(
            content=content,
            author_id=plan.bot_user_id,
            channel_id=plan.channel_id,
        )
        if not result.success:
            self.get_logger().warning(
                f"Bot reply to message {plan.trigger_message_id} rejected: "
                f"{result.error} ({result.error_code})"
            )
            return

        self.get_logger().info(
            f"Bot posted reply {result.data.message.id} to message "
            f"{plan.trigger_message_id} in channel {plan.channel_id}"
        )


class ReactionService(BaseService):
    """
    Service for message reactions.

    Handles:
    - Adding reactions (idempotent per message/user/emoji)
    - Removing reactions (removing a missing one is a no-op)
    - Recomputing counts and broadcasting them with the mutation
    """

    def __init__(self, store: ChatStore, hub: ChannelHub):
        super().__init__(lock=store.lock)
        self.store = store
        self.hub = hub

    def add_reaction(self, message_id: int, user_id: int, emoji: str) -> ServiceResult[dict]:
        """
        Add a reaction to a message.

        Returns:
            ServiceResult with {"message_id", "reaction_counts"}

        Error codes:
            UNKNOWN_MESSAGE: Message does not exist
            UNKNOWN_USER: User does not exist
        """
        with self.atomic():
            try:
                added = self.store.add_reaction(message_id, user_id, emoji)
            except (UnknownMessage, UnknownUser) as exc:
                return ServiceResult.from_error(exc)

            counts = self._publish(message_id)

        if added:
            self.get_logger().debug(f"User {user_id} reacted {emoji} to message {message_id}")
        return ServiceResult.success({"message_id": message_id, "reaction_counts": counts})

    def remove_reaction(self, message_id: int, user_id: int, emoji: str) -> ServiceResult[dict]:
        """
        Remove a reaction from a message.

        Idempotent: removing a reaction that does not exist succeeds and
        leaves the counts unchanged. Nothing is broadcast for unknown messages.
        """
        with self.atomic():
            removed = self.store.remove_reaction(message_id, user_id, emoji)
            if self.store.get_message(message_id) is None:
                counts: dict[str, int] = {}
            else:
                counts = self._publish(message_id)

        if removed:
            self.get_logger().debug(
                f"User {user_id} removed {emoji} from message {message_id}"
            )
        return ServiceResult.success({"message_id": message_id, "reaction_counts": counts})

    def reaction_counts(self, message_id: int) -> dict[str, int]:
        return self.store.reaction_counts(message_id)

    def _publish(self, message_id: int) -> dict[str, int]:
        """Recompute counts and broadcast them. Caller holds the lock."""
        message = self.store.get_message(message_id)
        counts = self.store.reaction_counts(message_id)
        self.hub.broadcast_sync(
            message.channel_id,
            ChatEvent.REACTION_UPDATE,
            ReactionUpdateSerializer(
                {"message_id": message_id, "reaction_counts": counts}
            ).data,
        )
        return counts


class UserService(BaseService):
    """
    Service for the user directory.

    Methods:
        list_users: All users in sidebar order
        register_user: Create a user with a unique username
        set_status: Update a user's presence status
    """

    def __init__(self, store: ChatStore):
        super().__init__(lock=store.lock)
        self.store = store

    def list_users(self) -> ServiceResult[list[User]]:
        return ServiceResult.success(self.store.all_users())

    def register_user(
        self,
        username: str,
        role: str = UserRole.MEMBER,
        status: str = PresenceStatus.ONLINE,
        avatar: str | None = None,
    ) -> ServiceResult[User]:
        """
        Register a new user.

        Error codes:
            VALIDATION_ERROR: Empty username
            DUPLICATE_USERNAME: Username already taken (status 409)
        """
        validation = self.validate_required(username=username)
        if validation is not None:
            return validation

        try:
            user = self.store.create_user(
                username=username.strip(),
                role=role,
                status=status,
                avatar=avatar,
            )
        except DuplicateUsername as exc:
            return ServiceResult.from_error(exc)

        self.get_logger().info(f"Registered user {user.id} ({user.username}) as {user.role}")
        return ServiceResult.success(user)

    def set_status(self, user_id: int, status: str) -> ServiceResult[User]:
        """
        Update presence status.

        Error codes:
            UNKNOWN_USER: User does not exist
        """
        try:
            user = self.store.update_user_status(user_id, status)
        except UnknownUser as exc:
            return ServiceResult.from_error(exc)

        self.get_logger().debug(f"User {user_id} is now {status}")
        return ServiceResult.success(user)
