"""
Test configuration and fixtures for chat tests.

This module provides:
- A fresh in-memory channel layer per test
- A store populated with a small community (founder, bot, two members)
- A responder whose delay is recorded instead of slept
- A runtime wired from those pieces and installed for views and consumers
- A variant whose hub records broadcasts instead of sending them
- An API client

Community ids are stable: Mozzy=1 (founder), Marge=2 (bot), Alice=3, Bob=4.

Usage:
    def test_example(runtime, community, api_client):
        response = api_client.get("/api/users")
        assert response.status_code == 200
"""

import asyncio
import random
from types import SimpleNamespace

import pytest
from rest_framework.test import APIClient

from chat.broadcast import ChannelHub
from chat.models import PresenceStatus, UserRole
from chat.responder import AutoResponder
from chat.runtime import build_runtime, install_runtime
from chat.store import ChatStore


class RecordingSleep:
    """Stand-in for asyncio.sleep that records the delay and only yields once."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


class RecordingHub(ChannelHub):
    """ChannelHub that records synchronous broadcasts instead of sending them."""

    def __init__(self):
        super().__init__()
        self.events: list[tuple[str, str, dict]] = []

    def broadcast_sync(self, channel_id, event, data):
        self.events.append((channel_id, event, dict(data)))

    def of_type(self, event: str) -> list[dict]:
        return [data for _, name, data in self.events if name == event]


# =============================================================================
# Infrastructure Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def channel_layer(settings):
    """
    Fresh in-memory channel layer for every test.

    Changing CHANNEL_LAYERS makes Channels drop its cached layer instances,
    so no group membership or queued message leaks between tests.
    """
    settings.CHANNEL_LAYERS = {
        "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"},
    }
    from channels.layers import get_channel_layer

    return get_channel_layer()


@pytest.fixture
def api_client():
    return APIClient()


# =============================================================================
# State Fixtures
# =============================================================================


@pytest.fixture
def store():
    return ChatStore()


@pytest.fixture
def community(store):
    """Founder, bot and two members, created in id order."""
    return SimpleNamespace(
        mozzy=store.create_user("Mozzy", role=UserRole.FOUNDER),
        marge=store.create_user("Marge", role=UserRole.BOT),
        alice=store.create_user("Alice"),
        bob=store.create_user("Bob", status=PresenceStatus.AWAY),
    )


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def responder(recording_sleep):
    return AutoResponder(rng=random.Random(7), sleep=recording_sleep)


@pytest.fixture
def hub():
    return ChannelHub()


@pytest.fixture
def recording_hub():
    return RecordingHub()


@pytest.fixture
def recorded(store, recording_hub, responder, community):
    """Runtime whose broadcasts are captured in recording_hub.events."""
    return build_runtime(store=store, hub=recording_hub, responder=responder)


@pytest.fixture
def runtime(store, hub, responder, community):
    """
    Runtime over the test community, installed as the process runtime.

    Views and consumers resolve it through chat.runtime.get_runtime().
    """
    test_runtime = build_runtime(store=store, hub=hub, responder=responder)
    previous = install_runtime(test_runtime)
    yield test_runtime
    install_runtime(previous)
