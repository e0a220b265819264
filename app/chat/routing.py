"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/ - Single realtime endpoint; channels are chosen with join_channel
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path("ws/chat/", consumers.ChatConsumer.as_asgi()),
]
