"""
Tests for runtime wiring and demo seeding.

This module tests:
- seed_demo_data: demo users and back-dated welcome messages
- build_runtime: services share one store, hub and lock
- install_runtime / get_runtime / health_probe
"""

import random
from datetime import timedelta

from django.utils import timezone

from chat.constants import SEED_CONFIG
from chat.models import PresenceStatus, UserRole
from chat.runtime import build_runtime, get_runtime, health_probe, seed_demo_data
from chat.store import ChatStore


class TestSeedDemoData:
    """Tests for seed_demo_data."""

    def test_seed_creates_founder_bot_and_members(self):
        """
        The demo community has a founder, a bot and eight members.

        Why it matters: The bot must exist for auto-replies to work.
        """
        store = ChatStore()

        seed_demo_data(store, random.Random(0))

        assert store.count_users() == 2 + len(SEED_CONFIG.SAMPLE_USERNAMES)
        assert store.get_user(1).username == "Mozzy"
        assert store.get_user(1).role == UserRole.FOUNDER
        assert store.bot_user().username == "Marge"
        assert store.bot_user().id == 2

    def test_members_are_online_or_away(self):
        store = ChatStore()

        seed_demo_data(store, random.Random(0))

        members = [u for u in store.all_users() if u.role == UserRole.MEMBER]
        assert {u.status for u in members} <= {PresenceStatus.ONLINE, PresenceStatus.AWAY}

    def test_online_probability_drives_status(self):
        """Each member is online when the draw falls below the probability."""

        class AlwaysLow(random.Random):
            def random(self):
                return 0.0

        store = ChatStore()
        seed_demo_data(store, AlwaysLow())

        assert all(u.status == PresenceStatus.ONLINE for u in store.all_users())

    def test_welcome_messages_are_back_dated(self):
        """
        Welcome messages are five and four minutes old, bot first.

        Why it matters: New messages always sort after the welcome.
        """
        store = ChatStore()
        before = timezone.now()

        seed_demo_data(store, random.Random(0))

        history = store.get_messages("general")
        assert [v.author.username for v in history] == ["Marge", "Mozzy"]
        assert history[0].message.created_at <= before - timedelta(seconds=299)
        assert history[1].message.created_at <= before - timedelta(seconds=239)
        assert history[0].message.is_spam is False


class TestBuildRuntime:
    """Tests for build_runtime."""

    def test_services_share_store_and_lock(self):
        runtime = build_runtime()

        assert runtime.messages.store is runtime.store
        assert runtime.reactions.store is runtime.store
        assert runtime.users.store is runtime.store
        assert runtime.messages._lock is runtime.store.lock
        assert runtime.reactions._lock is runtime.store.lock
        assert runtime.messages.hub is runtime.reactions.hub is runtime.hub

    def test_unseeded_runtime_is_empty(self):
        runtime = build_runtime(seed=False)

        assert runtime.store.count_users() == 0

    def test_seeded_runtime(self):
        runtime = build_runtime(seed=True, rng=random.Random(1))

        assert runtime.store.count_messages() == 2

    def test_delay_bounds_reach_responder(self):
        runtime = build_runtime(min_delay=0.1, max_delay=0.2)

        assert (runtime.responder.min_delay, runtime.responder.max_delay) == (0.1, 0.2)


class TestInstalledRuntime:
    """Tests for the process runtime accessors."""

    def test_get_runtime_returns_installed(self, runtime):
        assert get_runtime() is runtime

    def test_health_probe_counts(self, runtime, community):
        runtime.messages.post_message("status check", community.alice.id)

        assert health_probe() == {"users": 4, "messages": 1, "pending_bot_replies": 0}
