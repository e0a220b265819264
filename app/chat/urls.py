"""
URL configuration for chat API.

URL Structure:
    Users:
        /users                          GET, POST
        /users/{id}/status              PATCH

    Messages:
        /messages                       POST
        /messages/{channel_id}          GET

    Reactions:
        /reactions                      POST, DELETE

All URLs are prefixed with /api/ in the main URL configuration.
"""

from django.urls import path

from chat.views import (
    ChannelMessagesView,
    MessageCreateView,
    ReactionView,
    UserListView,
    UserStatusView,
)

app_name = "chat"

urlpatterns = [
    path("users", UserListView.as_view(), name="user-list"),
    path("users/<int:user_id>/status", UserStatusView.as_view(), name="user-status"),
    path("messages", MessageCreateView.as_view(), name="message-create"),
    path("messages/<str:channel_id>", ChannelMessagesView.as_view(), name="channel-messages"),
    path("reactions", ReactionView.as_view(), name="reactions"),
]
