"""
Chat app for real-time community messaging.

This app handles:
- Users with roles (founder, bot, member) and presence status
- Messages in named channels, scored for spam on arrival
- Emoji reactions with per-message counts
- An assistant bot that answers trigger words after a short delay
- WebSocket fan-out of messages, reactions and typing indicators

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.runtime import get_runtime

    runtime = get_runtime()

    # Post a message (broadcast to the channel, may trigger the bot)
    result = runtime.messages.post_message(
        content="Any coffee recs in Sydney, mate?",
        author_id=3,
        channel_id="general",
    )

    # React to it
    runtime.reactions.add_reaction(result.data.message.id, user_id=4, emoji="👍")
"""
