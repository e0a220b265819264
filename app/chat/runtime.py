"""
Process-wide chat runtime.

Builds the object graph the chat system runs on and hands it out to views
and consumers:

    ChatStore ──┬── MessageService ── AutoResponder
                ├── ReactionService
                └── UserService
    ChannelHub ─┘

The graph is built once, when the chat app is ready (see ChatConfig.ready),
and stored on the app config. Tests build their own with build_runtime()
and install it with install_runtime().

Usage:
    from chat.runtime import get_runtime

    runtime = get_runtime()
    runtime.users.list_users()
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import timedelta

from django.apps import apps
from django.utils import timezone

from chat.broadcast import ChannelHub
from chat.constants import MESSAGE_CONFIG, RESPONDER_CONFIG, SEED_CONFIG
from chat.models import PresenceStatus, UserRole
from chat.responder import AutoResponder
from chat.services import MessageService, ReactionService, UserService
from chat.store import ChatStore

logger = logging.getLogger(__name__)


@dataclass
class ChatRuntime:
    """Everything a request or connection needs to talk to the chat system."""

    store: ChatStore
    hub: ChannelHub
    responder: AutoResponder
    messages: MessageService
    reactions: ReactionService
    users: UserService


def build_runtime(
    seed: bool = False,
    min_delay: float = RESPONDER_CONFIG.MIN_DELAY_SECONDS,
    max_delay: float = RESPONDER_CONFIG.MAX_DELAY_SECONDS,
    rng: random.Random | None = None,
    store: ChatStore | None = None,
    hub: ChannelHub | None = None,
    responder: AutoResponder | None = None,
) -> ChatRuntime:
    """
    Wire a fresh runtime.

    Args:
        seed: Populate the store with the demo community
        min_delay: Lower bound of the bot reply delay
        max_delay: Upper bound of the bot reply delay
        rng: Random source shared by the seed and the responder
        store: Pre-built store (tests)
        hub: Pre-built hub (tests)
        responder: Pre-built responder (tests)
    """
    rng = rng or random.Random()
    store = store or ChatStore()
    hub = hub or ChannelHub()
    responder = responder or AutoResponder(min_delay=min_delay, max_delay=max_delay, rng=rng)

    if seed:
        seed_demo_data(store, rng)

    return ChatRuntime(
        store=store,
        hub=hub,
        responder=responder,
        messages=MessageService(store, hub, responder),
        reactions=ReactionService(store, hub),
        users=UserService(store),
    )


def seed_demo_data(store: ChatStore, rng: random.Random | None = None) -> None:
    """
    Populate an empty store with the demo community.

    Creates the founder, the bot, the sample members (each online with
    probability SAMPLE_ONLINE_PROBABILITY, otherwise away) and two welcome
    messages back-dated a few minutes. Nothing is broadcast.
    """
    rng = rng or random.Random()
    now = timezone.now()

    founder = store.create_user(SEED_CONFIG.FOUNDER_USERNAME, role=UserRole.FOUNDER)
    bot = store.create_user(SEED_CONFIG.BOT_USERNAME, role=UserRole.BOT)

    for username in SEED_CONFIG.SAMPLE_USERNAMES:
        online = rng.random() < SEED_CONFIG.SAMPLE_ONLINE_PROBABILITY
        store.create_user(
            username,
            status=PresenceStatus.ONLINE if online else PresenceStatus.AWAY,
        )

    store.create_message(
        SEED_CONFIG.BOT_WELCOME,
        author_id=bot.id,
        channel_id=MESSAGE_CONFIG.DEFAULT_CHANNEL,
        created_at=now - timedelta(seconds=SEED_CONFIG.BOT_WELCOME_AGE_SECONDS),
    )
    store.create_message(
        SEED_CONFIG.FOUNDER_WELCOME,
        author_id=founder.id,
        channel_id=MESSAGE_CONFIG.DEFAULT_CHANNEL,
        created_at=now - timedelta(seconds=SEED_CONFIG.FOUNDER_WELCOME_AGE_SECONDS),
    )

    logger.info(
        f"Seeded demo data: {store.count_users()} users, {store.count_messages()} messages"
    )


def get_runtime() -> ChatRuntime:
    return apps.get_app_config("chat").runtime


def install_runtime(runtime: ChatRuntime) -> ChatRuntime:
    """Replace the process runtime; returns the previous one."""
    config = apps.get_app_config("chat")
    previous = config.runtime
    config.runtime = runtime
    return previous


def health_probe() -> dict:
    """Counters merged into the /health/ response."""
    runtime = get_runtime()
    return {
        "users": runtime.store.count_users(),
        "messages": runtime.store.count_messages(),
        "pending_bot_replies": runtime.responder.pending,
    }
