"""
Tests for chat app.

This package contains test modules for:
- test_store.py: In-memory store (users, messages, reactions)
- test_spam.py: Keyword spam scoring
- test_responder.py: Bot trigger decision and deferred replies
- test_broadcast.py: Channel fan-out hub
- test_services.py: Service layer and bot reply scenarios
- test_serializers.py: camelCase wire format
- test_runtime.py: Runtime wiring and demo seed
- test_consumers.py: WebSocket consumer tests
- test_views.py: REST API endpoint tests

Usage:
    pytest app/chat/tests/
    pytest app/chat/tests/test_consumers.py
"""
