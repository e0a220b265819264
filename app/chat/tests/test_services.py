"""
Tests for chat services.

This module tests the service layer which handles:
- MessageService: ingestion, spam annotation, broadcast, bot replies
- ReactionService: add/remove with count broadcast
- UserService: registration and presence

Broadcasts are captured with RecordingHub; the realtime path through the
channel layer is covered in test_consumers.py.
"""

import random

import pytest
from asgiref.sync import sync_to_async

from chat.broadcast import ChatEvent
from chat.constants import RESPONDER_CONFIG
from chat.models import PresenceStatus, UserRole
from chat.responder import AutoResponder
from chat.runtime import build_runtime


# =============================================================================
# MessageService
# =============================================================================


class TestPostMessage:
    """Tests for MessageService.post_message."""

    def test_post_message_success(self, recorded, community):
        """
        Posting stores the message and returns its view.

        Why it matters: Core ingestion path.
        """
        result = recorded.messages.post_message("Hello everyone", community.alice.id)

        assert result.success is True
        view = result.data
        assert view.message.content == "Hello everyone"
        assert view.message.channel_id == "general"
        assert view.author == community.alice
        assert view.reaction_counts == {}

    def test_content_is_trimmed(self, recorded, community):
        result = recorded.messages.post_message("   spaced out   ", community.alice.id)

        assert result.data.message.content == "spaced out"

    def test_new_message_broadcast_to_channel(self, recorded, recording_hub, community):
        """
        Every stored message is broadcast as new_message to its channel.

        Why it matters: Connected clients see messages without polling.
        """
        result = recorded.messages.post_message("Hi there", community.bob.id, channel_id="random")

        channel_id, event, data = recording_hub.events[-1]
        assert channel_id == "random"
        assert event == ChatEvent.NEW_MESSAGE
        assert data["id"] == result.data.message.id
        assert data["authorId"] == community.bob.id
        assert data["author"]["username"] == "Bob"
        assert data["reactionCounts"] == {}

    def test_unknown_author(self, recorded, recording_hub):
        """
        Unknown author fails with UNKNOWN_AUTHOR and broadcasts nothing.

        Why it matters: Failed writes must not be visible to anyone.
        """
        result = recorded.messages.post_message("hello", author_id=999)

        assert result.success is False
        assert result.error_code == "UNKNOWN_AUTHOR"
        assert result.status_code == 400
        assert recording_hub.events == []

    @pytest.mark.parametrize("content", ["", "   "])
    def test_blank_content_rejected(self, recorded, community, content):
        result = recorded.messages.post_message(content, community.alice.id)

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"

    def test_spam_flagged_but_still_listed(self, recorded, recording_hub, community):
        """
        "free discount click here" scores 3, is flagged, and is still listed.

        Why it matters: Spam is annotated for clients, never silently dropped.
        """
        result = recorded.messages.post_message("free discount click here", community.alice.id)

        assert result.data.message.is_spam is True
        assert result.data.message.spam_score == 3
        assert recording_hub.of_type(ChatEvent.NEW_MESSAGE)[-1]["isSpam"] is True
        history = recorded.messages.list_messages("general").data
        assert [v.message.id for v in history] == [result.data.message.id]

    def test_non_trigger_message_schedules_nothing(self, recorded, community):
        recorded.messages.post_message("good morning", community.alice.id)

        assert recorded.responder.pending == 0


class TestListMessages:
    """Tests for MessageService.list_messages."""

    def test_oldest_first_with_limit(self, recorded, community):
        ids = [
            recorded.messages.post_message(f"note {i}", community.alice.id).data.message.id
            for i in range(4)
        ]

        history = recorded.messages.list_messages("general", limit=3).data

        assert [v.message.id for v in history] == ids[1:]

    def test_unknown_channel_is_empty(self, recorded):
        assert recorded.messages.list_messages("nowhere").data == []


class TestBotReply:
    """
    End-to-end bot reply through the service layer.

    Async tests post through sync_to_async, so the reply task lives on the
    test's event loop. Plain sync posts use the responder's background loop.
    """

    @pytest.mark.asyncio
    async def test_coffee_question_gets_one_reply(
        self, recorded, recording_hub, recording_sleep, community
    ):
        """
        Alice asks "any coffee recs in Sydney mate?".

        The question is not spam; exactly one bot message follows in
        "general" after a delay in [1, 3) seconds, drawn from the base and
        coffee pools.

        Why it matters: Primary bot behaviour.
        """
        assert (community.marge.id, community.alice.id) == (2, 3)

        result = await sync_to_async(recorded.messages.post_message)(
            "any coffee recs in Sydney mate?", community.alice.id
        )
        await recorded.responder.join()

        assert result.data.message.is_spam is False
        history = recorded.messages.list_messages("general").data
        bot_messages = [v for v in history if v.author.id == community.marge.id]
        assert len(bot_messages) == 1
        assert bot_messages[0].message.content in (
            RESPONDER_CONFIG.BASE_RESPONSES + RESPONDER_CONFIG.COFFEE_RESPONSES
        )
        assert len(recording_sleep.delays) == 1
        assert 1.0 <= recording_sleep.delays[0] < 3.0

    @pytest.mark.asyncio
    async def test_bot_reply_is_broadcast_after_trigger(self, recorded, recording_hub, community):
        """
        The reply goes through the regular ingestion path.

        Why it matters: Clients receive the bot's message like any other.
        """
        await sync_to_async(recorded.messages.post_message)("help please", community.alice.id)
        await recorded.responder.join()

        new_messages = recording_hub.of_type(ChatEvent.NEW_MESSAGE)
        assert [m["authorId"] for m in new_messages] == [community.alice.id, community.marge.id]

    @pytest.mark.asyncio
    async def test_bot_reply_does_not_trigger_itself(self, recorded, community):
        """
        Bot replies contain trigger words but never re-trigger the bot.

        Why it matters: Prevents an endless reply loop.
        """
        await sync_to_async(recorded.messages.post_message)("hey Marge", community.alice.id)
        await recorded.responder.join()

        history = recorded.messages.list_messages("general").data
        assert len(history) == 2
        assert recorded.responder.pending == 0

    @pytest.mark.asyncio
    async def test_reply_in_same_channel(self, recorded, community):
        await sync_to_async(recorded.messages.post_message)(
            "aussie slang?", community.alice.id, "random"
        )
        await recorded.responder.join()

        assert len(recorded.messages.list_messages("random").data) == 2
        assert recorded.messages.list_messages("general").data == []

    def test_trigger_does_not_delay_the_poster(self, recorded, community):
        """
        Posting a trigger message returns immediately with the stored message.

        Why it matters: The delay never blocks the requesting client.
        """
        result = recorded.messages.post_message("any help?", community.alice.id)

        assert result.success is True
        assert result.data.author == community.alice
        assert recorded.responder.wait_idle(timeout=5)

    def test_sync_caller_still_gets_reply(self, store, recording_hub, community):
        """
        Posting from plain sync code, with no server loop, still yields a reply.

        Why it matters: Under WSGI or in a shell there is no event loop that
        outlives the call; the reply must not be cancelled with it.
        """
        responder = AutoResponder(min_delay=0.05, max_delay=0.05, rng=random.Random(5))
        sync_runtime = build_runtime(store=store, hub=recording_hub, responder=responder)

        result = sync_runtime.messages.post_message("hey Marge", community.alice.id)

        assert result.success is True
        assert responder.wait_idle(timeout=5)
        history = sync_runtime.messages.list_messages("general").data
        assert [v.author.username for v in history] == ["Alice", "Marge"]
        assert responder.pending == 0
        new_messages = recording_hub.of_type(ChatEvent.NEW_MESSAGE)
        assert [m["authorId"] for m in new_messages] == [community.alice.id, community.marge.id]


# =============================================================================
# ReactionService
# =============================================================================


class TestReactions:
    """Tests for ReactionService."""

    @pytest.fixture
    def message(self, recorded, community):
        return recorded.messages.post_message("react here", community.mozzy.id).data.message

    def test_add_and_remove_counts(self, recorded, community, message):
        """
        A 👍, B 👍 gives {👍: 2}; A removes gives {👍: 1}.

        Why it matters: Primary reaction scenario.
        """
        recorded.reactions.add_reaction(message.id, community.alice.id, "👍")
        result = recorded.reactions.add_reaction(message.id, community.bob.id, "👍")
        assert result.data["reaction_counts"] == {"👍": 2}

        result = recorded.reactions.remove_reaction(message.id, community.alice.id, "👍")
        assert result.data["reaction_counts"] == {"👍": 1}

    def test_each_change_broadcasts_counts(self, recorded, recording_hub, community, message):
        """
        Every add/remove broadcasts the recomputed counts, in order.

        Why it matters: Clients replace their counts with each update.
        """
        recorded.reactions.add_reaction(message.id, community.alice.id, "👍")
        recorded.reactions.add_reaction(message.id, community.bob.id, "❤️")
        recorded.reactions.remove_reaction(message.id, community.alice.id, "👍")

        updates = recording_hub.of_type(ChatEvent.REACTION_UPDATE)
        assert [u["reactionCounts"] for u in updates] == [
            {"👍": 1},
            {"👍": 1, "❤️": 1},
            {"❤️": 1},
        ]
        assert all(u["messageId"] == message.id for u in updates)

    def test_message_broadcast_precedes_its_reactions(
        self, recorded, recording_hub, community, message
    ):
        recorded.reactions.add_reaction(message.id, community.alice.id, "🎉")

        events = [event for _, event, _ in recording_hub.events]
        assert events == [ChatEvent.NEW_MESSAGE, ChatEvent.REACTION_UPDATE]

    def test_duplicate_add_is_idempotent(self, recorded, community, message):
        recorded.reactions.add_reaction(message.id, community.alice.id, "👍")
        result = recorded.reactions.add_reaction(message.id, community.alice.id, "👍")

        assert result.success is True
        assert result.data["reaction_counts"] == {"👍": 1}

    def test_remove_missing_reaction_succeeds(self, recorded, community, message):
        result = recorded.reactions.remove_reaction(message.id, community.alice.id, "😮")

        assert result.success is True
        assert result.data["reaction_counts"] == {}

    def test_remove_on_unknown_message_broadcasts_nothing(self, recorded, recording_hub, community):
        result = recorded.reactions.remove_reaction(999, community.alice.id, "👍")

        assert result.success is True
        assert recording_hub.of_type(ChatEvent.REACTION_UPDATE) == []

    def test_add_to_unknown_message(self, recorded, recording_hub, community):
        result = recorded.reactions.add_reaction(999, community.alice.id, "👍")

        assert result.success is False
        assert result.error_code == "UNKNOWN_MESSAGE"
        assert recording_hub.of_type(ChatEvent.REACTION_UPDATE) == []

    def test_add_by_unknown_user(self, recorded, message):
        result = recorded.reactions.add_reaction(message.id, 999, "👍")

        assert result.success is False
        assert result.error_code == "UNKNOWN_USER"

    def test_broadcast_goes_to_message_channel(self, recorded, recording_hub, community):
        elsewhere = recorded.messages.post_message("over here", community.bob.id, "random")

        recorded.reactions.add_reaction(elsewhere.data.message.id, community.alice.id, "👍")

        channel_id, event, _ = recording_hub.events[-1]
        assert (channel_id, event) == ("random", ChatEvent.REACTION_UPDATE)


# =============================================================================
# UserService
# =============================================================================


class TestUsers:
    """Tests for UserService."""

    def test_list_users_in_sidebar_order(self, recorded):
        usernames = [u.username for u in recorded.users.list_users().data]

        assert usernames == ["Mozzy", "Marge", "Alice", "Bob"]

    def test_register_user(self, recorded):
        result = recorded.users.register_user("  Carol  ", role=UserRole.MEMBER)

        assert result.success is True
        assert result.data.username == "Carol"
        assert result.data.id == 5

    def test_register_duplicate(self, recorded):
        """
        Duplicate usernames fail with 409.

        Why it matters: Conflicts are distinguishable from bad input.
        """
        result = recorded.users.register_user("Alice")

        assert result.success is False
        assert result.error_code == "DUPLICATE_USERNAME"
        assert result.status_code == 409

    def test_set_status(self, recorded, community):
        result = recorded.users.set_status(community.alice.id, PresenceStatus.AWAY)

        assert result.data.status == PresenceStatus.AWAY

    def test_set_status_unknown_user(self, recorded):
        result = recorded.users.set_status(999, PresenceStatus.AWAY)

        assert result.error_code == "UNKNOWN_USER"
