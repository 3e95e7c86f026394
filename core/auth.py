# =============================================================================
# core/auth.py  —  OAuth2 client-credentials token provider
# =============================================================================
#
# HOW IT WORKS:
#   1. The first get_token() call POSTs the client id/secret to the tenant's
#      token endpoint (grant_type=client_credentials) and caches the result.
#      The server performs this call once at startup; if it fails, the server
#      never becomes ready.
#   2. Later calls return the cached token.
#   3. Once the cached token is within REFRESH_SKEW_SECONDS of expiry, the next
#      call exchanges the credentials again.  Concurrent callers wait on one
#      lock so only a single refresh is in flight.
# =============================================================================

import asyncio
import logging
from typing import Optional

import httpx

from core.config import Settings
from core.errors import AuthenticationError
from core.models import AccessToken

logger = logging.getLogger(__name__)

REFRESH_SKEW_SECONDS = 60.0


class TokenProvider:
    """Acquires and caches an app-only Microsoft Graph token."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self._settings = settings
        self._http = http
        self._token: Optional[AccessToken] = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> Optional[AccessToken]:
        return self._token

    async def get_token(self) -> str:
        """Return a valid bearer token, exchanging credentials when needed."""
        token = self._token
        if token is not None and not token.is_expired(REFRESH_SKEW_SECONDS):
            return token.value

        async with self._lock:
            # Another caller may have refreshed while we waited.
            token = self._token
            if token is None or token.is_expired(REFRESH_SKEW_SECONDS):
                if token is not None:
                    logger.info("Access token expired, re-authenticating")
                self._token = token = await self._acquire()
            return token.value

    async def _acquire(self) -> AccessToken:
        settings = self._settings
        response = await self._http.post(
            settings.token_url,
            data={
                "client_id": settings.client_id,
                "client_secret": settings.client_secret,
                "scope": settings.scope,
                "grant_type": "client_credentials",
            },
        )

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.is_error or not payload.get("access_token"):
            detail = (
                payload.get("error_description")
                or payload.get("error")
                or f"HTTP {response.status_code}"
            )
            raise AuthenticationError(f"Token request failed: {detail}")

        token = AccessToken.from_response(payload)
        logger.info("Acquired Microsoft Graph access token for tenant %s", settings.tenant_id)
        return token
