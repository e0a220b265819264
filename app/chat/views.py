"""
API views for chat.

This module provides REST API endpoints for the chat system:
- UserListView: List and register users
- UserStatusView: Change a user's presence status
- ChannelMessagesView: Channel history
- MessageCreateView: Post a message
- ReactionView: Add and remove reactions

URL Structure:
    /api/users                      GET, POST
    /api/users/{id}/status          PATCH
    /api/messages/{channel_id}      GET
    /api/messages                   POST
    /api/reactions                  POST, DELETE

Design Decisions:
    - Views validate input with serializers and delegate to the services
    - Service failures carry their HTTP status (400, or 409 for conflicts)
    - Every write broadcasts from inside the service, never from the view
    - No authentication: the community chat is open
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.services import ServiceResult

from chat.runtime import get_runtime
from chat.serializers import (
    MessageCreateSerializer,
    MessageHistoryQuerySerializer,
    MessageSerializer,
    MessageViewSerializer,
    PresenceSetSerializer,
    ReactionSerializer,
    ReactionUpdateSerializer,
    UserCreateSerializer,
    UserSerializer,
)


def failure_response(result: ServiceResult) -> Response:
    """Render a failed ServiceResult with its own HTTP status."""
    payload = {"error": result.error, "error_code": result.error_code}
    if result.errors:
        payload["errors"] = result.errors
    return Response(payload, status=result.status_code)


# =============================================================================
# Users
# =============================================================================


class UserListView(APIView):
    """
    User directory.

    GET /api/users
        All users, ordered by role, presence and username.

    POST /api/users
        Register a user.
    """

    @extend_schema(
        operation_id="list_users",
        summary="List users",
        description=(
            "All users ordered for the sidebar: founder first, then bots, then "
            "members; within a role online before away before offline; then by "
            "username."
        ),
        responses={200: UserSerializer(many=True)},
        tags=["Chat - Users"],
    )
    def get(self, request):
        result = get_runtime().users.list_users()
        return Response(UserSerializer(result.data, many=True).data)

    @extend_schema(
        operation_id="create_user",
        summary="Register user",
        request=UserCreateSerializer,
        responses={
            201: UserSerializer,
            400: OpenApiResponse(description="Invalid body"),
            409: OpenApiResponse(description="Username already taken"),
        },
        tags=["Chat - Users"],
    )
    def post(self, request):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = get_runtime().users.register_user(**serializer.validated_data)
        if not result.success:
            return failure_response(result)

        return Response(UserSerializer(result.data).data, status=status.HTTP_201_CREATED)


class UserStatusView(APIView):
    """
    Presence status of one user.

    PATCH /api/users/{id}/status
        Payload: {"status": "online" | "away" | "offline"}
    """

    @extend_schema(
        operation_id="set_user_status",
        summary="Set presence status",
        request=PresenceSetSerializer,
        responses={
            200: UserSerializer,
            400: OpenApiResponse(description="Invalid status or unknown user"),
        },
        tags=["Chat - Users"],
    )
    def patch(self, request, user_id: int):
        serializer = PresenceSetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = get_runtime().users.set_status(user_id, serializer.validated_data["status"])
        if not result.success:
            return failure_response(result)

        return Response(UserSerializer(result.data).data)


# =============================================================================
# Messages
# =============================================================================


class ChannelMessagesView(APIView):
    """
    Channel history.

    GET /api/messages/{channel_id}?limit=N
        Most recent N messages (default 50, max 200), oldest first.
        Unknown channels return an empty list.
    """

    @extend_schema(
        operation_id="list_channel_messages",
        summary="Channel history",
        parameters=[
            OpenApiParameter(
                name="limit",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Number of messages (default 50, max 200)",
                required=False,
            ),
        ],
        responses={
            200: MessageViewSerializer(many=True),
            400: OpenApiResponse(description="Invalid limit"),
        },
        tags=["Chat - Messages"],
    )
    def get(self, request, channel_id: str):
        query = MessageHistoryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        result = get_runtime().messages.list_messages(
            channel_id,
            limit=query.validated_data["limit"],
        )
        return Response(MessageViewSerializer(result.data, many=True).data)


class MessageCreateView(APIView):
    """
    Post a message.

    POST /api/messages
        Payload: {"content": str, "authorId": int, "channelId": str}

    The message is scored for spam, stored and broadcast as new_message.
    If it mentions a trigger word the assistant bot replies later.
    """

    @extend_schema(
        operation_id="create_message",
        summary="Post message",
        request=MessageCreateSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="Invalid body or unknown author"),
        },
        tags=["Chat - Messages"],
    )
    def post(self, request):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = get_runtime().messages.post_message(**serializer.validated_data)
        if not result.success:
            return failure_response(result)

        return Response(
            MessageSerializer(result.data.message).data,
            status=status.HTTP_201_CREATED,
        )


# =============================================================================
# Reactions
# =============================================================================


class ReactionView(APIView):
    """
    Reactions on a message.

    POST /api/reactions
        Add a reaction. Adding the same reaction twice is a no-op.

    DELETE /api/reactions
        Remove a reaction. Removing a missing reaction is a no-op.

    Payload (both):
        {"messageId": int, "userId": int, "emoji": str}
    """

    @extend_schema(
        operation_id="add_reaction",
        summary="Add reaction",
        request=ReactionSerializer,
        responses={
            200: OpenApiResponse(description="{success, messageId, reactionCounts}"),
            400: OpenApiResponse(description="Invalid body, unknown message or user"),
        },
        tags=["Chat - Reactions"],
    )
    def post(self, request):
        serializer = ReactionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = get_runtime().reactions.add_reaction(**serializer.validated_data)
        if not result.success:
            return failure_response(result)

        return Response(self._ack(result.data))

    @extend_schema(
        operation_id="remove_reaction",
        summary="Remove reaction",
        request=ReactionSerializer,
        responses={
            200: OpenApiResponse(description="{success, messageId, reactionCounts}"),
            400: OpenApiResponse(description="Invalid body"),
        },
        tags=["Chat - Reactions"],
    )
    def delete(self, request):
        serializer = ReactionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = get_runtime().reactions.remove_reaction(**serializer.validated_data)
        return Response(self._ack(result.data))

    @staticmethod
    def _ack(data: dict) -> dict:
        return {"success": True, **ReactionUpdateSerializer(data).data}
