"""Tests for the client-credentials token provider."""

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from core.auth import TokenProvider
from core.errors import AuthenticationError
from core.models import AccessToken


@pytest.fixture
async def http(fake_graph):
    client = httpx.AsyncClient(transport=fake_graph.transport)
    yield client
    await client.aclose()


class TestTokenProvider:

    async def test_exchanges_client_credentials(self, settings, fake_graph, http):
        tokens = TokenProvider(settings, http)

        assert await tokens.get_token() == "token-1"

        request = fake_graph.requests[0]
        assert request.method == "POST"
        assert str(request.url) == (
            "https://login.microsoftonline.com/tenant-id/oauth2/v2.0/token"
        )
        form = parse_qs(request.content.decode())
        assert form == {
            "client_id": ["client-id"],
            "client_secret": ["client-secret"],
            "scope": ["https://graph.microsoft.com/.default"],
            "grant_type": ["client_credentials"],
        }

    async def test_token_is_cached(self, settings, fake_graph, http):
        tokens = TokenProvider(settings, http)

        await tokens.get_token()
        await tokens.get_token()

        assert fake_graph.token_calls == 1

    async def test_expired_token_is_refreshed(self, settings, fake_graph, http):
        tokens = TokenProvider(settings, http)
        await tokens.get_token()
        tokens._token = AccessToken(value="token-1", expires_at=0)

        assert await tokens.get_token() == "token-2"
        assert fake_graph.token_calls == 2

    async def test_concurrent_callers_share_one_refresh(self, settings, fake_graph):
        async def slow_handler(request):
            await asyncio.sleep(0.01)
            return fake_graph.handler(request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(slow_handler)) as http:
            tokens = TokenProvider(settings, http)
            await tokens.get_token()
            tokens._token = AccessToken(value="token-1", expires_at=0)

            first, second = await asyncio.gather(tokens.get_token(), tokens.get_token())

        assert first == second == "token-2"
        assert fake_graph.token_calls == 2

    async def test_rejected_credentials(self, settings, fake_graph, http):
        fake_graph.token_responses.append(
            httpx.Response(
                401,
                json={
                    "error": "invalid_client",
                    "error_description": "AADSTS7000215: Invalid client secret provided.",
                },
            )
        )
        tokens = TokenProvider(settings, http)

        with pytest.raises(AuthenticationError, match="Invalid client secret"):
            await tokens.get_token()
        assert tokens.token is None

    async def test_response_without_token(self, settings, fake_graph, http):
        fake_graph.token_responses.append(httpx.Response(200, json={"token_type": "Bearer"}))
        tokens = TokenProvider(settings, http)

        with pytest.raises(AuthenticationError, match="HTTP 200"):
            await tokens.get_token()


class TestAccessToken:

    def test_expiry_from_response(self):
        token = AccessToken.from_response({"access_token": "abc", "expires_in": 100}, now=1000)

        assert token.expires_at == 1100
        assert not token.is_expired(now=1099)
        assert token.is_expired(now=1100)
        assert token.is_expired(skew=60, now=1040)
