# =============================================================================
# core/errors.py  —  Exception hierarchy for the Bookings gateway
# =============================================================================
#
# WHERE EACH ERROR SURFACES:
#   - ConfigurationError    → startup; the server refuses to start
#   - AuthenticationError   → startup (first token exchange) or, later,
#                             a single tool call (failed token refresh)
#   - GraphError            → a single tool call (upstream non-2xx)
#   - InvalidArgumentsError → a single tool call (bad tool arguments)
#   - UnknownToolError      → the MCP layer, as a "method not found" error
#
# Everything except UnknownToolError is contained at the tool-call boundary
# (core/gateway.py) and turned into an "Error: ..." tool result.
# =============================================================================

from mcp.shared.exceptions import McpError
from mcp.types import METHOD_NOT_FOUND, ErrorData


class BookingsError(Exception):
    """Base class for every error raised by core/."""


class ConfigurationError(BookingsError):
    """A required setting is missing or malformed."""


class AuthenticationError(BookingsError):
    """The client-credentials token exchange failed."""


class GraphError(BookingsError):
    """Microsoft Graph answered with a non-success status."""

    def __init__(self, status_code: int, message: str, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


class InvalidArgumentsError(BookingsError):
    """Tool arguments failed validation."""


class UnknownToolError(McpError):
    """A tool name outside the catalog was requested."""

    def __init__(self, name: str):
        super().__init__(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))
        self.tool_name = name
