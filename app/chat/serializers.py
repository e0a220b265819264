"""
Serializers for chat API.

This module provides serializers for the chat system:
- User serializers (read, create, presence update)
- Message serializers (read, view projection, create, history query)
- Reaction serializers (request body, update broadcast)
- WebSocket frame serializers (join, typing)

Serializer Hierarchy:
    UserSerializer: User as listed in the sidebar
    UserCreateSerializer: Register a user
    PresenceSetSerializer: Change presence status

    MessageSerializer: Stored message without author
    MessageViewSerializer: Message with author and reaction counts
    MessageCreateSerializer: Post a new message
    MessageHistoryQuerySerializer: ?limit= for channel history

    ReactionSerializer: Add/remove reaction body
    ReactionUpdateSerializer: reaction_update event payload

    JoinChannelSerializer: join_channel frame
    TypingSerializer: typing_start / typing_stop frames
    UserTypingSerializer: user_typing event payload

Design Decisions:
    - Wire format uses camelCase keys; Python attributes stay snake_case
    - Records are plain dataclasses, so read serializers are plain
      Serializers with explicit sources rather than ModelSerializers
    - Read and write serializers are separate for clarity
"""

from __future__ import annotations

from rest_framework import serializers

from chat.constants import MESSAGE_CONFIG, REACTION_CONFIG
from chat.models import PresenceStatus, UserRole


# =============================================================================
# User Serializers
# =============================================================================


class UserSerializer(serializers.Serializer):
    """User as shown in the sidebar and embedded in message views."""

    id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(read_only=True)
    role = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    avatar = serializers.CharField(read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)


class UserCreateSerializer(serializers.Serializer):
    """Register a new user."""

    username = serializers.CharField(max_length=50, trim_whitespace=True)
    role = serializers.ChoiceField(choices=UserRole.choices, default=UserRole.MEMBER)
    status = serializers.ChoiceField(
        choices=PresenceStatus.choices,
        default=PresenceStatus.ONLINE,
    )
    avatar = serializers.CharField(
        max_length=500,
        required=False,
        allow_null=True,
        default=None,
    )


class PresenceSetSerializer(serializers.Serializer):
    """Change a user's presence status."""

    status = serializers.ChoiceField(choices=PresenceStatus.choices)


# =============================================================================
# Message Serializers
# =============================================================================


class MessageSerializer(serializers.Serializer):
    """A stored message, as returned when it is created."""

    id = serializers.IntegerField(read_only=True)
    content = serializers.CharField(read_only=True)
    authorId = serializers.IntegerField(source="author_id", read_only=True)
    channelId = serializers.CharField(source="channel_id", read_only=True)
    isSpam = serializers.BooleanField(source="is_spam", read_only=True)
    spamScore = serializers.IntegerField(source="spam_score", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)


class MessageViewSerializer(serializers.Serializer):
    """
    Message joined with its author and reaction counts.

    Used for channel history and the new_message event.
    """

    id = serializers.IntegerField(source="message.id", read_only=True)
    content = serializers.CharField(source="message.content", read_only=True)
    authorId = serializers.IntegerField(source="message.author_id", read_only=True)
    channelId = serializers.CharField(source="message.channel_id", read_only=True)
    isSpam = serializers.BooleanField(source="message.is_spam", read_only=True)
    spamScore = serializers.IntegerField(source="message.spam_score", read_only=True)
    createdAt = serializers.DateTimeField(source="message.created_at", read_only=True)
    author = UserSerializer(read_only=True)
    reactionCounts = serializers.DictField(
        source="reaction_counts",
        child=serializers.IntegerField(),
        read_only=True,
    )


class MessageCreateSerializer(serializers.Serializer):
    """Post a new message."""

    content = serializers.CharField(
        max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH,
        min_length=MESSAGE_CONFIG.MIN_CONTENT_LENGTH,
        trim_whitespace=True,
    )
    authorId = serializers.IntegerField(source="author_id", min_value=1)
    channelId = serializers.CharField(
        source="channel_id",
        max_length=MESSAGE_CONFIG.MAX_CHANNEL_ID_LENGTH,
        default=MESSAGE_CONFIG.DEFAULT_CHANNEL,
    )


class MessageHistoryQuerySerializer(serializers.Serializer):
    """Query parameters for channel history."""

    limit = serializers.IntegerField(
        min_value=1,
        max_value=MESSAGE_CONFIG.MAX_HISTORY_LIMIT,
        default=MESSAGE_CONFIG.DEFAULT_HISTORY_LIMIT,
    )


# =============================================================================
# Reaction Serializers
# =============================================================================


class ReactionSerializer(serializers.Serializer):
    """Body of POST and DELETE /reactions."""

    messageId = serializers.IntegerField(source="message_id", min_value=1)
    userId = serializers.IntegerField(source="user_id", min_value=1)
    emoji = serializers.CharField(
        max_length=REACTION_CONFIG.MAX_EMOJI_LENGTH,
        trim_whitespace=True,
    )


class ReactionUpdateSerializer(serializers.Serializer):
    """Payload of the reaction_update event and reaction responses."""

    messageId = serializers.IntegerField(source="message_id", read_only=True)
    reactionCounts = serializers.DictField(
        source="reaction_counts",
        child=serializers.IntegerField(),
        read_only=True,
    )


# =============================================================================
# WebSocket Frame Serializers
# =============================================================================


class JoinChannelSerializer(serializers.Serializer):
    """Client frame: {"type": "join_channel", "channelId": ...}"""

    channelId = serializers.CharField(
        source="channel_id",
        max_length=MESSAGE_CONFIG.MAX_CHANNEL_ID_LENGTH,
    )


class TypingSerializer(serializers.Serializer):
    """
    Client frame: {"type": "typing_start" | "typing_stop", ...}

    channelId may be omitted once the connection has joined a channel.
    """

    channelId = serializers.CharField(
        source="channel_id",
        max_length=MESSAGE_CONFIG.MAX_CHANNEL_ID_LENGTH,
        required=False,
    )
    userId = serializers.IntegerField(source="user_id")
    username = serializers.CharField(max_length=50)


class UserTypingSerializer(serializers.Serializer):
    """Payload of the user_typing event."""

    userId = serializers.IntegerField(source="user_id", read_only=True)
    username = serializers.CharField(read_only=True)
    isTyping = serializers.BooleanField(source="is_typing", read_only=True)
