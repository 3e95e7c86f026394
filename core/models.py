# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# The gateway owns almost no data: Bookings records are passed through
# verbatim from Microsoft Graph.  What it does own is transient:
#
#   - AccessToken     → the bearer token and when it stops being valid
#   - *Arguments      → the validated argument shape of each tool call
#   - ToolResult      → what goes back to the MCP host
#
# ARGUMENT MODELS:
#   Each tool name maps to exactly one pydantic model (TOOL_ARGUMENTS below).
#   That mapping is a tagged union keyed by tool name: the gateway looks up
#   the model for the requested tool and validates the raw argument dict
#   against it before any HTTP call is made.
#
#   Field names stay camelCase (businessId, startDate, endDate) because they
#   ARE the wire names the agent host sends.
# =============================================================================

import time
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# -----------------------------------------------------------------------------
# AccessToken — a bearer token with an absolute expiry
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class AccessToken:
    """An OAuth2 bearer token and its expiry (epoch seconds)."""

    value: str
    expires_at: float

    @classmethod
    def from_response(cls, payload: dict, now: Optional[float] = None) -> "AccessToken":
        # Identity platform tokens last ~1h; assume that if expires_in is absent.
        issued = time.time() if now is None else now
        lifetime = float(payload.get("expires_in") or 3600)
        return cls(value=payload["access_token"], expires_at=issued + lifetime)

    def is_expired(self, skew: float = 0.0, now: Optional[float] = None) -> bool:
        current = time.time() if now is None else now
        return current >= self.expires_at - skew


# -----------------------------------------------------------------------------
# Tool argument models
# -----------------------------------------------------------------------------
class ToolArguments(BaseModel):
    """Base for per-tool arguments.  Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class BusinessesArguments(ToolArguments):
    """get_bookings_businesses takes no arguments."""


class BusinessArguments(ToolArguments):
    businessId: str = Field(min_length=1, description="ID of the Bookings business")


class AppointmentsArguments(BusinessArguments):
    startDate: Optional[str] = Field(
        default=None, description="Start date for appointments (ISO format)"
    )
    endDate: Optional[str] = Field(
        default=None, description="End date for appointments (ISO format)"
    )


TOOL_ARGUMENTS: dict[str, type[ToolArguments]] = {
    "get_bookings_businesses": BusinessesArguments,
    "get_business_staff": BusinessArguments,
    "get_business_services": BusinessArguments,
    "get_business_appointments": AppointmentsArguments,
}


# -----------------------------------------------------------------------------
# ToolResult — the text payload handed back to the MCP host
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolResult:
    """A single text content item, optionally flagged as an error."""

    text: str
    is_error: bool = False

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(text=f"Error: {message}", is_error=True)

    def to_dict(self) -> dict:
        """Render the MCP call-tool result shape."""
        result: dict = {"content": [{"type": "text", "text": self.text}]}
        if self.is_error:
            result["isError"] = True
        return result
