# =============================================================================
# core/graph.py  —  Minimal Microsoft Graph REST client
# =============================================================================
#
# One capability: an authenticated GET against the Graph base URL, with an
# optional OData $filter.  Paging links (@odata.nextLink) are not followed
# and nothing is retried.  Transport errors raised by httpx propagate
# unchanged; non-2xx answers become GraphError.
# =============================================================================

import logging
from typing import Optional

import httpx

from core.auth import TokenProvider
from core.errors import GraphError

logger = logging.getLogger(__name__)


class GraphClient:
    """Thin async wrapper over httpx for Graph GET requests."""

    def __init__(self, http: httpx.AsyncClient, tokens: TokenProvider):
        self._http = http
        self._tokens = tokens

    async def get(self, path: str, filter: Optional[str] = None) -> dict:
        token = await self._tokens.get_token()
        params = {"$filter": filter} if filter else None

        logger.debug("GET %s filter=%r", path, filter)
        response = await self._http.get(
            path,
            params=params,
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
        )
        if response.is_error:
            raise _graph_error(response)
        return response.json()

    async def aclose(self) -> None:
        await self._http.aclose()


def _graph_error(response: httpx.Response) -> GraphError:
    """Build a GraphError from Graph's {"error": {"code", "message"}} body."""
    code = None
    message = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        code = body["error"].get("code")
        message = body["error"].get("message")
    return GraphError(
        status_code=response.status_code,
        message=message or f"HTTP {response.status_code}",
        code=code,
    )
