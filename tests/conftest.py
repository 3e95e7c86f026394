"""
Shared fixtures: settings and a fake Microsoft identity platform + Graph
served through httpx.MockTransport.
"""

import httpx
import pytest

from core.config import Settings

GRAPH_PREFIX = "/v1.0"


class FakeGraph:
    """Routes token and Graph requests to canned responses and records them."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, httpx.Response] = {}
        self.token_responses: list[httpx.Response] = []
        self.token_calls = 0
        self.failure: Exception | None = None

    def add(self, path: str, value=None, status_code: int = 200, json=None):
        body = json if json is not None else {"value": value if value is not None else []}
        self.routes[GRAPH_PREFIX + path] = httpx.Response(status_code, json=body)

    def graph_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "graph.microsoft.com"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host == "login.microsoftonline.com":
            self.token_calls += 1
            if self.token_responses:
                return self.token_responses.pop(0)
            return httpx.Response(
                200,
                json={
                    "token_type": "Bearer",
                    "expires_in": 3599,
                    "access_token": f"token-{self.token_calls}",
                },
            )

        if self.failure is not None:
            raise self.failure

        response = self.routes.get(request.url.path)
        if response is None:
            return httpx.Response(
                404,
                json={"error": {"code": "ResourceNotFound", "message": "Resource not found"}},
            )
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        client_id="client-id",
        client_secret="client-secret",
        tenant_id="tenant-id",
    )


@pytest.fixture
def fake_graph() -> FakeGraph:
    return FakeGraph()
