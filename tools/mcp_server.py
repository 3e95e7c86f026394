# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server for Microsoft Bookings
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the four read-only Bookings tools over MCP.  Each tool is a thin
#   wrapper around core/gateway.call_tool(): it logs the call, hands the
#   arguments to the gateway and turns the gateway's ToolResult into what
#   FastMCP expects.
#
# HOW IT WORKS (the flow):
#   1. main() loads .env and the settings; missing credentials stop here.
#   2. FastMCP starts the lifespan below, which exchanges the credentials for
#      a Graph token ONCE and yields a BookingsContext.
#   3. The agent host calls a tool by name (e.g., "get_business_staff").
#   4. The decorated function below passes the arguments to call_tool().
#   5. Success → the pretty-printed JSON text.
#      Failure → ToolError("Error: ...") so the host sees isError: true.
#
# TOOLS:
#   get_bookings_businesses    → every Bookings business in the tenant
#   get_business_staff         → staff members of one business
#   get_business_services      → services offered by one business
#   get_business_appointments  → appointments of one business, optionally
#                                limited to a start/end date range
#
# RUNNING THIS SERVER:
#     a) Standalone:  python -m tools.mcp_server
#     b) From the Bookings assistant (agent/bookings_agent.py) via stdio
# =============================================================================

import copy
import logging
import sys
from contextlib import asynccontextmanager
from typing import Annotated, AsyncIterator, Optional

import httpx
from dotenv import load_dotenv
from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from mcp import types
from pydantic import Field

from core.config import Settings, load_settings
from core.errors import AuthenticationError, ConfigurationError, UnknownToolError
from core.gateway import TOOLS_BY_NAME, BookingsContext, call_tool, open_context

SERVER_NAME = "m365-bookings"
SERVER_VERSION = "1.0.0"

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: stdout carries the MCP JSON-RPC stream and any stray
# output there corrupts the protocol.
#
#   CYAN   → incoming tool calls with their arguments
#   GREEN  → responses
#   YELLOW → status/progress messages
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logger = logging.getLogger("m365_bookings.mcp")

# Responses can be whole appointment books; keep the log line readable.
_MAX_LOGGED_RESPONSE = 500


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    """Log the tool response in GREEN, then return it."""
    shown = text if len(text) <= _MAX_LOGGED_RESPONSE else text[:_MAX_LOGGED_RESPONSE] + "…"
    logger.info(f"{_GREEN}  ← {tool_name} response: {shown}{_RESET}")
    return text


# =============================================================================
# Server factory
# =============================================================================

BusinessId = Annotated[str, Field(description="ID of the Bookings business")]
StartDate = Annotated[
    Optional[str], Field(description="Start date for appointments (ISO format)")
]
EndDate = Annotated[
    Optional[str], Field(description="End date for appointments (ISO format)")
]


def create_server(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastMCP:
    """Build the Bookings MCP server.

    The lifespan authenticates once against the identity platform; the
    resulting BookingsContext is shared by every tool call and closed on
    shutdown.  ``transport`` lets callers swap the HTTP transport (tests use
    httpx.MockTransport).
    """

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[dict]:
        _log_status("Authenticating with Microsoft Graph")
        context = await open_context(settings, transport=transport)
        _log_status("Microsoft Graph client ready")
        try:
            yield {"bookings": context}
        finally:
            await context.aclose()

    mcp = FastMCP(SERVER_NAME, version=SERVER_VERSION, lifespan=lifespan)

    async def _run(ctx: Context, name: str, arguments: dict) -> str:
        bookings: BookingsContext = ctx.request_context.lifespan_context["bookings"]
        result = await call_tool(bookings, name, arguments)
        if result.is_error:
            _log_status(result.text)
            raise ToolError(result.text)
        return _log_response(name, result.text)

    @mcp.tool(description=TOOLS_BY_NAME["get_bookings_businesses"].description)
    async def get_bookings_businesses(ctx: Context) -> str:
        _log_request("get_bookings_businesses")
        return await _run(ctx, "get_bookings_businesses", {})

    @mcp.tool(description=TOOLS_BY_NAME["get_business_staff"].description)
    async def get_business_staff(businessId: BusinessId, ctx: Context) -> str:
        _log_request("get_business_staff", businessId=businessId)
        return await _run(ctx, "get_business_staff", {"businessId": businessId})

    @mcp.tool(description=TOOLS_BY_NAME["get_business_services"].description)
    async def get_business_services(businessId: BusinessId, ctx: Context) -> str:
        _log_request("get_business_services", businessId=businessId)
        return await _run(ctx, "get_business_services", {"businessId": businessId})

    @mcp.tool(description=TOOLS_BY_NAME["get_business_appointments"].description)
    async def get_business_appointments(
        businessId: BusinessId,
        ctx: Context,
        startDate: StartDate = None,
        endDate: EndDate = None,
    ) -> str:
        _log_request(
            "get_business_appointments",
            businessId=businessId, startDate=startDate, endDate=endDate,
        )
        return await _run(
            ctx,
            "get_business_appointments",
            {"businessId": businessId, "startDate": startDate, "endDate": endDate},
        )

    # Advertise the catalog schemas verbatim rather than the ones derived from
    # the signatures (which render optional dates as string-or-null).
    for tool in (
        get_bookings_businesses,
        get_business_staff,
        get_business_services,
        get_business_appointments,
    ):
        tool.parameters = copy.deepcopy(TOOLS_BY_NAME[tool.name].input_schema)

    _reject_unknown_tools(mcp)
    return mcp


def _reject_unknown_tools(mcp: FastMCP) -> None:
    """Answer calls to names outside the catalog with a JSON-RPC error.

    The SDK's call-tool handler turns every exception into an isError
    result, so the name check sits in front of it, where a raised McpError
    reaches the host as "method not found".
    """
    handlers = mcp._mcp_server.request_handlers
    dispatch = handlers[types.CallToolRequest]

    async def call_tool_request(request: types.CallToolRequest):
        name = request.params.name
        if name not in TOOLS_BY_NAME:
            _log_status(f"Rejected unknown tool {name!r}")
            raise UnknownToolError(name)
        return await dispatch(request)

    handlers[types.CallToolRequest] = call_tool_request


# =============================================================================
# Server entry point
# =============================================================================
# Exit codes: 0 on interrupt (Ctrl-C), 1 on configuration or startup
# authentication failure.
# =============================================================================
def main() -> int:
    load_dotenv()

    try:
        settings = load_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.error(f"Configuration error: {e}")
        return 1

    configure_logging(settings.log_level)
    server = create_server(settings)

    logger.info("Microsoft 365 Bookings MCP server running on stdio")
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 0
    except Exception as e:
        # anyio task groups wrap lifespan failures in an ExceptionGroup.
        cause = _first_leaf(e)
        if isinstance(cause, (AuthenticationError, httpx.HTTPError)):
            logger.error(f"Startup failed: {cause}")
            return 1
        raise
    return 0


def _first_leaf(exc: BaseException) -> BaseException:
    while isinstance(exc, BaseExceptionGroup) and exc.exceptions:
        exc = exc.exceptions[0]
    return exc


if __name__ == "__main__":
    sys.exit(main())
