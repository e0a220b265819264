"""
Chat application configuration.

This app provides the community chat with:
- An in-memory store of users, messages and reactions
- Spam scoring of every message
- An assistant bot that answers trigger words after a short delay
- Real-time fan-out of messages, reactions and typing indicators
"""

from django.apps import AppConfig
from django.conf import settings


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    name = "chat"
    verbose_name = "Chat"

    runtime = None

    def ready(self):
        from chat.runtime import build_runtime

        self.runtime = build_runtime(
            seed=settings.CHAT_SEED_DEMO_DATA,
            min_delay=settings.CHAT_BOT_REPLY_MIN_DELAY_SECONDS,
            max_delay=settings.CHAT_BOT_REPLY_MAX_DELAY_SECONDS,
        )
