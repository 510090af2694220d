"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Model constraints and helpers
- test_conversations.py: Conversation variants
- test_visibility.py: History, unread counts, read marking
- test_services.py: Message, group and community services
- test_governance.py: Governance invariants and end-to-end scenarios
- test_presence.py: PresenceRegistry
- test_consumers.py: WebSocket consumer tests
- test_middleware.py: WebSocket JWT authentication
- test_views.py: REST API endpoint tests
- test_tasks.py: Celery task tests

Usage:
    pytest app/chat/tests/
    pytest app/chat/tests/test_consumers.py
"""
