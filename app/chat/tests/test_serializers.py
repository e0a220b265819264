"""
Tests for chat serializers.

This module tests the camelCase wire format:
- Read serializers for users, messages and message views
- Request serializers for messages, reactions and history queries
- WebSocket frame serializers
"""

import pytest
from django.utils import timezone

from chat.models import Message, MessageView, User, UserRole
from chat.serializers import (
    JoinChannelSerializer,
    MessageCreateSerializer,
    MessageHistoryQuerySerializer,
    MessageViewSerializer,
    ReactionSerializer,
    TypingSerializer,
    UserSerializer,
)


@pytest.fixture
def author():
    return User(
        id=3,
        username="Alice",
        role=UserRole.MEMBER,
        status="online",
        created_at=timezone.now(),
    )


class TestReadSerializers:
    """Tests for output shapes."""

    def test_user_keys(self, author):
        data = UserSerializer(author).data

        assert data["username"] == "Alice"
        assert data["avatar"] is None
        assert "createdAt" in data

    def test_message_view_flattens_message(self, author):
        """
        MessageView renders as the message fields plus author and counts.

        Why it matters: This is the single message shape clients receive.
        """
        message = Message(
            id=7,
            content="hello",
            author_id=author.id,
            created_at=timezone.now(),
            is_spam=True,
            spam_score=2,
        )
        view = MessageView(message=message, author=author, reaction_counts={"👍": 2})

        data = MessageViewSerializer(view).data

        assert data["id"] == 7
        assert data["authorId"] == 3
        assert data["channelId"] == "general"
        assert data["isSpam"] is True
        assert data["spamScore"] == 2
        assert data["author"]["username"] == "Alice"
        assert data["reactionCounts"] == {"👍": 2}


class TestRequestSerializers:
    """Tests for input validation."""

    def test_message_create_maps_to_snake_case(self):
        serializer = MessageCreateSerializer(
            data={"content": "  hi  ", "authorId": 3, "channelId": "random"}
        )

        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data == {
            "content": "hi",
            "author_id": 3,
            "channel_id": "random",
        }

    def test_message_create_rejects_long_channel(self):
        serializer = MessageCreateSerializer(
            data={"content": "hi", "authorId": 3, "channelId": "c" * 65}
        )

        assert not serializer.is_valid()
        assert "channelId" in serializer.errors

    def test_history_limit_defaults_to_50(self):
        serializer = MessageHistoryQuerySerializer(data={})

        assert serializer.is_valid()
        assert serializer.validated_data["limit"] == 50

    def test_reaction_emoji_length(self):
        serializer = ReactionSerializer(data={"messageId": 1, "userId": 3, "emoji": "x" * 33})

        assert not serializer.is_valid()
        assert "emoji" in serializer.errors

    def test_reaction_accepts_zwj_sequence(self):
        emoji = "\U0001F469\U0001F3FD\u200D\u2764\uFE0F\u200D\U0001F48B\u200D\U0001F468\U0001F3FB"
        serializer = ReactionSerializer(data={"messageId": 1, "userId": 3, "emoji": emoji})

        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data["emoji"] == emoji


class TestFrameSerializers:
    """Tests for WebSocket frame validation."""

    def test_join_requires_channel(self):
        assert not JoinChannelSerializer(data={"type": "join_channel"}).is_valid()

    def test_typing_channel_is_optional(self):
        serializer = TypingSerializer(data={"userId": 3, "username": "Alice"})

        assert serializer.is_valid(), serializer.errors
        assert "channel_id" not in serializer.validated_data
