"""
Channel fan-out hub.

Maps chat channels onto Django Channels layer groups and keeps an explicit
registry of which WebSocket connection is subscribed to which chat channel.

Connection lifecycle:
    connected (unsubscribed) -> subscribed(channel_id) -> ... -> disconnected

    - A connection has at most one active channel; subscribing to another
      channel leaves the previous one first
    - Disconnect is terminal and drops the subscription
    - Only subscribe() and disconnect() mutate the registry

Delivery:
    broadcast() is best-effort: no acknowledgement, no retry and no backlog
    for clients that are not connected. A connection leaving while a
    broadcast is in flight is simply skipped by the channel layer.

Events (layer message "type" -> consumer handler):
    chat.event   -> ChatConsumer.chat_event   (new_message, reaction_update)
    chat.typing  -> ChatConsumer.chat_typing  (user_typing, sender excluded)

Usage:
    hub = ChannelHub()

    # from a consumer
    await hub.subscribe(self.channel_name, "general")

    # from synchronous service code
    hub.broadcast_sync("general", "new_message", payload)
"""

from __future__ import annotations

import hashlib
import logging
import re
import threading
from collections import defaultdict
from typing import Any

from asgiref.sync import async_to_sync
from channels.layers import DEFAULT_CHANNEL_LAYER, get_channel_layer

from chat.constants import REALTIME_CONFIG

logger = logging.getLogger(__name__)

_UNSAFE_GROUP_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


class ChatEvent:
    """Server-to-client event names."""

    NEW_MESSAGE = "new_message"
    REACTION_UPDATE = "reaction_update"
    USER_TYPING = "user_typing"


def group_name_for(channel_id: str) -> str:
    """
    Build a valid channel layer group name for a chat channel.

    Layer group names are limited to ASCII letters, digits, hyphens,
    underscores and periods, below 100 characters. A digest of the raw id
    keeps distinct channels apart after the readable part is sanitized.
    """
    slug = _UNSAFE_GROUP_CHARS.sub("_", channel_id)[: REALTIME_CONFIG.GROUP_SLUG_LENGTH]
    digest = hashlib.sha1(channel_id.encode("utf-8")).hexdigest()[:12]
    return f"{REALTIME_CONFIG.GROUP_PREFIX}.{slug}.{digest}"


class ChannelHub:
    """
    Subscription registry plus broadcast helpers for chat channels.

    Attributes:
        layer_alias: Channel layer alias from settings.CHANNEL_LAYERS
    """

    def __init__(self, layer_alias: str = DEFAULT_CHANNEL_LAYER):
        self.layer_alias = layer_alias
        self._lock = threading.Lock()
        self._channel_of: dict[str, str] = {}
        self._members: dict[str, set[str]] = defaultdict(set)

    @property
    def layer(self):
        # Resolved on every use so a reconfigured layer is picked up
        return get_channel_layer(self.layer_alias)

    # -------------------------------------------------------------------------
    # Connection lifecycle
    # -------------------------------------------------------------------------

    async def subscribe(self, connection: str, channel_id: str) -> None:
        """
        Subscribe a connection to a chat channel.

        Leaves the connection's previous channel, if any.
        """
        with self._lock:
            previous = self._channel_of.get(connection)
            self._channel_of[connection] = channel_id
            if previous is not None:
                self._drop_member(previous, connection)
            self._members[channel_id].add(connection)

        if previous is not None and previous != channel_id:
            await self.layer.group_discard(group_name_for(previous), connection)
        await self.layer.group_add(group_name_for(channel_id), connection)

        logger.debug(f"Connection {connection} subscribed to channel {channel_id}")

    async def disconnect(self, connection: str) -> None:
        """Drop a connection's subscription. Safe to call when unsubscribed."""
        with self._lock:
            channel_id = self._channel_of.pop(connection, None)
            if channel_id is not None:
                self._drop_member(channel_id, connection)

        if channel_id is not None:
            await self.layer.group_discard(group_name_for(channel_id), connection)
            logger.debug(f"Connection {connection} left channel {channel_id}")

    def channel_of(self, connection: str) -> str | None:
        with self._lock:
            return self._channel_of.get(connection)

    def subscribers(self, channel_id: str) -> frozenset[str]:
        """Connections currently subscribed to a channel."""
        with self._lock:
            return frozenset(self._members.get(channel_id, ()))

    # -------------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------------

    async def broadcast(self, channel_id: str, event: str, data: dict[str, Any]) -> None:
        """Deliver an event to every subscriber of a channel."""
        await self.layer.group_send(
            group_name_for(channel_id),
            {"type": "chat.event", "event": event, "data": data},
        )

    def broadcast_sync(self, channel_id: str, event: str, data: dict[str, Any]) -> None:
        """
        Synchronous broadcast for service code.

        Under ASGI this runs on the server event loop, so successive calls
        from one thread reach the layer in call order.
        """
        async_to_sync(self.broadcast)(channel_id, event, data)
        logger.debug(f"Broadcast {event} to channel {channel_id}")

    async def relay_typing(self, channel_id: str, sender: str, data: dict[str, Any]) -> None:
        """Deliver a typing indicator to every subscriber except the sender."""
        await self.layer.group_send(
            group_name_for(channel_id),
            {"type": "chat.typing", "sender": sender, "data": data},
        )

    def _drop_member(self, channel_id: str, connection: str) -> None:
        members = self._members.get(channel_id)
        if members is None:
            return
        members.discard(connection)
        if not members:
            del self._members[channel_id]
