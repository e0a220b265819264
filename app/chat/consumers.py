"""
WebSocket consumers for the chat application.

This module implements the WebSocket consumer for real-time chat
functionality: channel subscription, typing indicators and delivery of
events broadcast by the service layer.

Consumers:
    ChatConsumer: One instance per WebSocket connection

Authentication:
    None. Every connection is accepted; identity in typing frames is
    whatever the client claims.

Channel Groups:
    Each chat channel maps to one channel layer group (see
    chat.broadcast.group_name_for). A connection belongs to at most one
    group at a time.

Message Types (from client):
    - join_channel: Subscribe to a channel, leaving the previous one
    - typing_start: Tell the channel the user is typing
    - typing_stop: Tell the channel the user stopped typing

Message Types (to client):
    - channel_joined: Acknowledges join_channel
    - new_message: Message posted in the subscribed channel
    - reaction_update: Reaction counts of a message changed
    - user_typing: Another connection is (not) typing
    - error: Malformed or unknown frame
"""

from __future__ import annotations

import json
import logging

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from chat.broadcast import ChatEvent
from chat.runtime import get_runtime
from chat.serializers import JoinChannelSerializer, TypingSerializer, UserTypingSerializer

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for real-time chat functionality.

    Handles:
        - Joining and switching chat channels
        - Typing indicators (never echoed to the sender)
        - Forwarding new_message and reaction_update events

    Attributes:
        hub: ChannelHub of the running chat runtime
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.hub = None

    async def connect(self):
        """Accept the connection; it stays unsubscribed until join_channel."""
        self.hub = get_runtime().hub
        await self.accept()
        logger.info(f"Connection {self.channel_name} opened")

    async def disconnect(self, close_code):
        """Drop the connection's subscription, if any."""
        if self.hub is not None:
            await self.hub.disconnect(self.channel_name)
        logger.info(f"Connection {self.channel_name} closed ({close_code})")

    async def receive(self, text_data=None, bytes_data=None, **kwargs):
        # Binary or empty frames get an error frame like any other malformed input
        if not text_data:
            await self._send_error("Malformed frame: expected a JSON text frame")
            return
        await super().receive(text_data=text_data, bytes_data=bytes_data, **kwargs)

    @classmethod
    async def decode_json(cls, text_data):
        # Unparseable text becomes an error frame instead of closing the socket
        try:
            return json.loads(text_data)
        except ValueError:
            return None

    async def receive_json(self, content, **kwargs):
        """
        Handle incoming WebSocket frames.

        Expected frame format:
            {"type": "join_channel", "channelId": "general"}
            {"type": "typing_start", "channelId": "general", "userId": 3, "username": "Alice"}
            {"type": "typing_stop", "channelId": "general", "userId": 3, "username": "Alice"}

        Args:
            content: Parsed JSON frame from the client
        """
        if not isinstance(content, dict):
            await self._send_error("Malformed frame: expected a JSON object")
            return

        frame_type = content.get("type")
        if frame_type == "join_channel":
            await self._handle_join(content)
        elif frame_type == "typing_start":
            await self._handle_typing(content, is_typing=True)
        elif frame_type == "typing_stop":
            await self._handle_typing(content, is_typing=False)
        else:
            await self._send_error(f"Unknown message type: {frame_type}")

    async def _handle_join(self, content):
        serializer = JoinChannelSerializer(data=content)
        if not serializer.is_valid():
            await self._send_error("join_channel requires a channelId")
            return

        channel_id = serializer.validated_data["channel_id"]
        await self.hub.subscribe(self.channel_name, channel_id)
        await self.send_json({"type": "channel_joined", "data": {"channelId": channel_id}})
        logger.info(f"Connection {self.channel_name} joined channel {channel_id}")

    async def _handle_typing(self, content, is_typing: bool):
        """Relay a typing indicator to every other subscriber of the channel."""
        serializer = TypingSerializer(data=content)
        if not serializer.is_valid():
            await self._send_error(f"{content['type']} requires userId and username")
            return

        data = serializer.validated_data
        channel_id = data.get("channel_id") or self.hub.channel_of(self.channel_name)
        if channel_id is None:
            await self._send_error("Join a channel before sending typing indicators")
            return

        payload = UserTypingSerializer(
            {"user_id": data["user_id"], "username": data["username"], "is_typing": is_typing}
        ).data
        await self.hub.relay_typing(channel_id, self.channel_name, payload)

    async def _send_error(self, message: str):
        await self.send_json({"type": "error", "message": message})

    async def chat_event(self, event):
        """
        Handle chat.event messages from the channel layer.

        Forwards new_message and reaction_update events to the client.
        """
        await self.send_json({"type": event["event"], "data": event["data"]})

    async def chat_typing(self, event):
        """
        Handle chat.typing messages from the channel layer.

        Sends the typing indicator to the client unless it came from here.
        """
        if event["sender"] == self.channel_name:
            return

        await self.send_json({"type": ChatEvent.USER_TYPING, "data": event["data"]})
