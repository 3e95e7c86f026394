# =============================================================================
# core/gateway.py  —  Tool Gateway: catalog, context and dispatcher
# =============================================================================
#
# HOW IT WORKS (the flow):
#   1. At startup, open_context() builds the HTTP client, exchanges the
#      credentials for a token (once) and returns a BookingsContext.  Until
#      that succeeds the gateway is not ready; there is no way back.
#   2. list_tools() advertises the static TOOL_CATALOG.
#   3. call_tool(context, name, arguments):
#        a) unknown name     → UnknownToolError ("method not found"), raised
#        b) validate args    → pydantic model from TOOL_ARGUMENTS
#        c) one Graph GET    → core/bookings.py
#        d) shape the result → pretty-printed JSON in a single text item
#      Any failure in (b)-(d) is caught and returned as an "Error: ..."
#      tool result, so one bad call never takes the server down.
# =============================================================================

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from core import bookings
from core.auth import TokenProvider
from core.config import Settings
from core.errors import InvalidArgumentsError, UnknownToolError
from core.graph import GraphClient
from core.models import (
    AppointmentsArguments,
    BusinessArguments,
    TOOL_ARGUMENTS,
    ToolArguments,
    ToolResult,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Tool catalog
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_schema: dict

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


_BUSINESS_ID = {"type": "string", "description": "ID of the Bookings business"}

TOOL_CATALOG: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="get_bookings_businesses",
        description="Get list of Bookings businesses",
        input_schema={"type": "object", "properties": {}},
    ),
    ToolSpec(
        name="get_business_staff",
        description="Get staff members for a Bookings business",
        input_schema={
            "type": "object",
            "properties": {"businessId": _BUSINESS_ID},
            "required": ["businessId"],
        },
    ),
    ToolSpec(
        name="get_business_services",
        description="Get services offered by a Bookings business",
        input_schema={
            "type": "object",
            "properties": {"businessId": _BUSINESS_ID},
            "required": ["businessId"],
        },
    ),
    ToolSpec(
        name="get_business_appointments",
        description="Get appointments for a Bookings business",
        input_schema={
            "type": "object",
            "properties": {
                "businessId": _BUSINESS_ID,
                "startDate": {
                    "type": "string",
                    "description": "Start date for appointments (ISO format)",
                },
                "endDate": {
                    "type": "string",
                    "description": "End date for appointments (ISO format)",
                },
            },
            "required": ["businessId"],
        },
    ),
)

TOOLS_BY_NAME = {spec.name: spec for spec in TOOL_CATALOG}


def list_tools() -> list[ToolSpec]:
    return list(TOOL_CATALOG)


# -----------------------------------------------------------------------------
# Context
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class BookingsContext:
    """Everything a dispatch needs: settings and the authenticated client.

    Built once by open_context() and shared read-only by every call.
    """

    settings: Settings
    graph: GraphClient
    tokens: TokenProvider

    async def aclose(self) -> None:
        await self.graph.aclose()


async def open_context(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BookingsContext:
    """Authenticate once and return a ready BookingsContext.

    Raises AuthenticationError (or an httpx transport error) if the initial
    token exchange fails; the HTTP client is closed before re-raising.
    """
    client_kwargs: dict[str, Any] = {"base_url": settings.base_url}
    if settings.timeout is not None:
        client_kwargs["timeout"] = settings.timeout
    if transport is not None:
        client_kwargs["transport"] = transport
    http = httpx.AsyncClient(**client_kwargs)

    tokens = TokenProvider(settings, http)
    try:
        await tokens.get_token()
    except Exception:
        await http.aclose()
        raise

    return BookingsContext(settings=settings, graph=GraphClient(http, tokens), tokens=tokens)


# -----------------------------------------------------------------------------
# Dispatch
# -----------------------------------------------------------------------------
async def _businesses(context: BookingsContext, args: ToolArguments) -> Any:
    return await bookings.list_businesses(context.graph)


async def _staff(context: BookingsContext, args: BusinessArguments) -> Any:
    return await bookings.list_staff(context.graph, args.businessId)


async def _services(context: BookingsContext, args: BusinessArguments) -> Any:
    return await bookings.list_services(context.graph, args.businessId)


async def _appointments(context: BookingsContext, args: AppointmentsArguments) -> Any:
    return await bookings.list_appointments(
        context.graph, args.businessId, args.startDate, args.endDate
    )


_HANDLERS: dict[str, Callable[[BookingsContext, Any], Awaitable[Any]]] = {
    "get_bookings_businesses": _businesses,
    "get_business_staff": _staff,
    "get_business_services": _services,
    "get_business_appointments": _appointments,
}


def parse_arguments(name: str, arguments: Optional[dict]) -> ToolArguments:
    """Validate raw arguments against the tool's model."""
    model = TOOL_ARGUMENTS[name]
    try:
        return model.model_validate(arguments or {})
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidArgumentsError(f"Invalid arguments for {name}: {problems}") from None


async def call_tool(
    context: BookingsContext,
    name: str,
    arguments: Optional[dict] = None,
) -> ToolResult:
    """Route one tool call to its Graph request and shape the result."""
    handler = _HANDLERS.get(name)
    if handler is None:
        raise UnknownToolError(name)

    try:
        args = parse_arguments(name, arguments)
        value = await handler(context, args)
    except Exception as e:
        logger.error(
            "Error executing tool %s: %s", name, e,
            exc_info=not isinstance(e, InvalidArgumentsError),
        )
        return ToolResult.error(str(e) or type(e).__name__)

    return ToolResult(text=json.dumps(value, indent=2, ensure_ascii=False))
