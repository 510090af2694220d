"""
Tests for JWTAuthMiddleware.

The middleware wraps a stub ASGI app that records the scope it receives,
so these tests check user resolution without a consumer.
"""

import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from chat.middleware import JWTAuthMiddleware

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]


class ScopeRecorder:
    def __init__(self):
        self.scope = None

    async def __call__(self, scope, receive, send):
        self.scope = scope


async def run_middleware(query_string=b"", subprotocols=()):
    inner = ScopeRecorder()
    scope = {
        "type": "websocket",
        "path": "/ws/chat/",
        "query_string": query_string,
        "subprotocols": list(subprotocols),
    }
    await JWTAuthMiddleware(inner)(scope, None, None)
    return inner.scope


class TestJWTAuthMiddleware:
    async def test_token_in_query_string(self, alice):
        token = str(AccessToken.for_user(alice))

        scope = await run_middleware(query_string=f"token={token}".encode())

        assert scope["user"] == alice

    async def test_token_in_subprotocol(self, alice):
        token = str(AccessToken.for_user(alice))

        scope = await run_middleware(subprotocols=["jwt", token])

        assert scope["user"] == alice

    async def test_query_string_takes_precedence(self, alice, bob):
        scope = await run_middleware(
            query_string=f"token={AccessToken.for_user(alice)}".encode(),
            subprotocols=["jwt", str(AccessToken.for_user(bob))],
        )

        assert scope["user"] == alice

    async def test_no_token_is_anonymous(self):
        scope = await run_middleware()

        assert isinstance(scope["user"], AnonymousUser)

    async def test_malformed_token_is_anonymous(self):
        scope = await run_middleware(query_string=b"token=garbage")

        assert isinstance(scope["user"], AnonymousUser)

    async def test_refresh_token_is_not_accepted(self, alice):
        """Only access tokens open a socket."""
        token = str(RefreshToken.for_user(alice))

        scope = await run_middleware(query_string=f"token={token}".encode())

        assert isinstance(scope["user"], AnonymousUser)

    async def test_inactive_user_is_anonymous(self, alice):
        token = str(AccessToken.for_user(alice))
        alice.is_active = False
        await alice.asave(update_fields=["is_active"])

        scope = await run_middleware(query_string=f"token={token}".encode())

        assert isinstance(scope["user"], AnonymousUser)

    async def test_deleted_user_is_anonymous(self, alice):
        token = str(AccessToken.for_user(alice))
        await alice.adelete()

        scope = await run_middleware(query_string=f"token={token}".encode())

        assert isinstance(scope["user"], AnonymousUser)

    async def test_original_scope_is_not_mutated(self):
        inner = ScopeRecorder()
        scope = {"type": "websocket", "query_string": b""}

        await JWTAuthMiddleware(inner)(scope, None, None)

        assert "user" not in scope
