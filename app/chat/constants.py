"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Message operations (content limits, history page size)
- Reaction management (emoji limits)
- Spam scoring (keyword set, threshold)
- The auto-responder bot (trigger words, response pools, reply delay)
- Demo seed data (users, welcome messages)
- Realtime group naming

Delay bounds can be overridden via Django settings
(CHAT_BOT_REPLY_MIN_DELAY_SECONDS / CHAT_BOT_REPLY_MAX_DELAY_SECONDS).
Import example:
    from chat.constants import MESSAGE_CONFIG, SPAM_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    DEFAULT_CHANNEL: Final[str] = "general"
    MAX_CHANNEL_ID_LENGTH: Final[int] = 64

    # Content limits
    MAX_CONTENT_LENGTH: Final[int] = 2000  # Characters
    MIN_CONTENT_LENGTH: Final[int] = 1

    # History settings
    DEFAULT_HISTORY_LIMIT: Final[int] = 50
    MAX_HISTORY_LIMIT: Final[int] = 200


# =============================================================================
# Reaction Configuration
# =============================================================================


class REACTION_CONFIG:
    """Configuration for message reactions."""

    # Code points; ZWJ sequences with skin tones run past ten
    MAX_EMOJI_LENGTH: Final[int] = 32


# =============================================================================
# Spam Configuration
# =============================================================================


class SPAM_CONFIG:
    """Configuration for keyword spam scoring."""

    # Each distinct keyword found in the lower-cased content scores one point
    KEYWORDS: Final[tuple] = (
        "buy now",
        "save",
        "deal",
        "discount",
        "free",
        "click here",
        "limited time",
        "act now",
        "special offer",
        "bonus",
        "prize",
    )

    THRESHOLD: Final[int] = 2


# =============================================================================
# Auto-Responder Configuration
# =============================================================================


class RESPONDER_CONFIG:
    """Configuration for the assistant bot's automatic replies."""

    TRIGGER_WORDS: Final[tuple] = (
        "marge",
        "bot",
        "help",
        "coffee",
        "sydney",
        "melbourne",
        "brisbane",
        "perth",
        "adelaide",
        "darwin",
        "canberra",
        "australia",
        "aussie",
        "mate",
        "recommendation",
    )

    BASE_RESPONSES: Final[tuple] = (
        "G'day! How can I help you out, mate? 🇦🇺",
        "Fair dinkum! What can I do for you? 🤖",
        "Too right! I'm here to help, cobber! 👍",
        "No worries! What do you need assistance with? ☕",
        "Beauty! Let me know what you're after! 🌟",
    )

    # Added to the pool when the triggering message mentions coffee
    COFFEE_KEYWORD: Final[str] = "coffee"
    COFFEE_RESPONSES: Final[tuple] = (
        "For coffee in Sydney, try Single O in Surry Hills or The Grounds of Alexandria! ☕️",
        "Melbourne's got amazing coffee culture - try Patricia Coffee Brewers or Seven Seeds! ☕️",
        "Brisbane coffee? Check out Blackbird Espresso or Coffee Anthology! ☕️",
    )

    # Reply delay is drawn uniformly from [MIN, MAX)
    MIN_DELAY_SECONDS: Final[float] = 1.0
    MAX_DELAY_SECONDS: Final[float] = 3.0


# =============================================================================
# Demo Seed Configuration
# =============================================================================


class SEED_CONFIG:
    """Users and messages created at startup when demo seeding is enabled."""

    FOUNDER_USERNAME: Final[str] = "Mozzy"
    BOT_USERNAME: Final[str] = "Marge"

    SAMPLE_USERNAMES: Final[tuple] = (
        "SydneyMate",
        "MelbourneMate",
        "BrisbaneBuddy",
        "PerthPal",
        "AdelaideAce",
        "DarwinDude",
        "CanberraCrew",
        "TassieTiger",
    )

    # Probability that a sample member starts online (otherwise away)
    SAMPLE_ONLINE_PROBABILITY: Final[float] = 0.7

    BOT_WELCOME: Final[str] = (
        "G'day everyone! I'm Marge, your friendly AI assistant. "
        "Just mention my name if you need help! 🤖"
    )
    FOUNDER_WELCOME: Final[str] = (
        "Thanks Marge! Welcome to the community everyone. "
        "Let's keep it friendly and fair dinkum! 🇦🇺"
    )
    BOT_WELCOME_AGE_SECONDS: Final[int] = 300
    FOUNDER_WELCOME_AGE_SECONDS: Final[int] = 240


# =============================================================================
# Realtime Configuration
# =============================================================================


class REALTIME_CONFIG:
    """Configuration for WebSocket fan-out."""

    # Channel layer group names must stay below 100 ASCII characters
    GROUP_PREFIX: Final[str] = "chat"
    GROUP_SLUG_LENGTH: Final[int] = 40
