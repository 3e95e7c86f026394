# =============================================================================
# core/config.py  —  Process configuration (read once at startup)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Reads the Microsoft Graph credentials and a handful of optional knobs
#   from the environment and freezes them into a Settings object.
#
#   The three credentials are REQUIRED.  If any is missing, load_settings()
#   raises ConfigurationError and the server never starts.
#
#   .env files are loaded by the entry point (tools/mcp_server.py)
#   with python-dotenv before this runs, so os.environ is the single source.
# =============================================================================

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from core.errors import ConfigurationError

REQUIRED_VARIABLES = (
    "MICROSOFT_GRAPH_CLIENT_ID",
    "MICROSOFT_GRAPH_CLIENT_SECRET",
    "MICROSOFT_GRAPH_TENANT_ID",
)

DEFAULT_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_AUTHORITY = "https://login.microsoftonline.com"
DEFAULT_SCOPE = "https://graph.microsoft.com/.default"


@dataclass(frozen=True)
class Settings:
    """Immutable process configuration."""

    client_id: str
    client_secret: str = field(repr=False)
    tenant_id: str
    base_url: str = DEFAULT_BASE_URL
    authority: str = DEFAULT_AUTHORITY
    scope: str = DEFAULT_SCOPE
    timeout: Optional[float] = None    # None → httpx default
    log_level: str = "INFO"

    @property
    def token_url(self) -> str:
        return f"{self.authority.rstrip('/')}/{self.tenant_id}/oauth2/v2.0/token"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment, failing fast on missing credentials."""
    env = os.environ if environ is None else environ

    missing = [name for name in REQUIRED_VARIABLES if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    raw_timeout = (env.get("MICROSOFT_GRAPH_TIMEOUT") or "").strip()
    timeout = None
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(
                f"MICROSOFT_GRAPH_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
            ) from None

    return Settings(
        client_id=env["MICROSOFT_GRAPH_CLIENT_ID"].strip(),
        client_secret=env["MICROSOFT_GRAPH_CLIENT_SECRET"].strip(),
        tenant_id=env["MICROSOFT_GRAPH_TENANT_ID"].strip(),
        base_url=env.get("MICROSOFT_GRAPH_BASE_URL") or DEFAULT_BASE_URL,
        authority=env.get("MICROSOFT_GRAPH_AUTHORITY") or DEFAULT_AUTHORITY,
        scope=env.get("MICROSOFT_GRAPH_SCOPE") or DEFAULT_SCOPE,
        timeout=timeout,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )
