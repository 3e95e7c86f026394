"""Tests for the tool gateway: catalog, context and dispatch."""

import json

import httpx
import pytest
from mcp.shared.exceptions import McpError
from mcp.types import METHOD_NOT_FOUND

from core.errors import AuthenticationError, InvalidArgumentsError, UnknownToolError
from core.gateway import call_tool, list_tools, open_context, parse_arguments
from core.models import AppointmentsArguments

STAFF = [
    {"id": "S1", "displayName": "Dana Reyes", "role": "administrator"},
    {"id": "S2", "displayName": "Kai Müller", "role": "guest"},
]


@pytest.fixture
async def context(settings, fake_graph):
    ctx = await open_context(settings, transport=fake_graph.transport)
    yield ctx
    await ctx.aclose()


class TestCatalog:

    def test_exactly_four_tools(self):
        assert [spec.name for spec in list_tools()] == [
            "get_bookings_businesses",
            "get_business_staff",
            "get_business_services",
            "get_business_appointments",
        ]

    def test_input_schemas(self):
        schemas = {spec.name: spec.input_schema for spec in list_tools()}

        assert schemas["get_bookings_businesses"] == {"type": "object", "properties": {}}
        for name in ("get_business_staff", "get_business_services"):
            assert schemas[name]["required"] == ["businessId"]
            assert list(schemas[name]["properties"]) == ["businessId"]
        appointments = schemas["get_business_appointments"]
        assert appointments["required"] == ["businessId"]
        assert set(appointments["properties"]) == {"businessId", "startDate", "endDate"}
        assert appointments["properties"]["startDate"]["type"] == "string"

    def test_wire_shape(self):
        entry = list_tools()[1].to_dict()

        assert entry["name"] == "get_business_staff"
        assert entry["description"] == "Get staff members for a Bookings business"
        assert entry["inputSchema"]["type"] == "object"


class TestOpenContext:

    async def test_authenticates_once_at_startup(self, settings, fake_graph):
        ctx = await open_context(settings, transport=fake_graph.transport)
        try:
            assert fake_graph.token_calls == 1
            assert ctx.tokens.token.value == "token-1"
        finally:
            await ctx.aclose()

    async def test_failed_exchange_prevents_readiness(self, settings, fake_graph):
        fake_graph.token_responses.append(
            httpx.Response(400, json={"error": "invalid_request"})
        )

        with pytest.raises(AuthenticationError, match="invalid_request"):
            await open_context(settings, transport=fake_graph.transport)


class TestArguments:

    def test_appointments_arguments(self):
        args = parse_arguments(
            "get_business_appointments",
            {"businessId": "B1", "startDate": "2024-01-01", "extra": True},
        )

        assert isinstance(args, AppointmentsArguments)
        assert args.businessId == "B1"
        assert args.startDate == "2024-01-01"
        assert args.endDate is None

    def test_missing_business_id(self):
        with pytest.raises(InvalidArgumentsError, match="businessId"):
            parse_arguments("get_business_staff", {})

    def test_none_arguments_for_businesses(self):
        parse_arguments("get_bookings_businesses", None)


class TestCallTool:

    async def test_staff_request_and_result(self, context, fake_graph):
        fake_graph.add("/solutions/bookingBusinesses/B1/staffMembers", STAFF)

        result = await call_tool(context, "get_business_staff", {"businessId": "B1"})

        request = fake_graph.graph_requests()[0]
        assert request.method == "GET"
        assert request.url.path == "/v1.0/solutions/bookingBusinesses/B1/staffMembers"
        assert not result.is_error
        assert result.text == json.dumps(STAFF, indent=2, ensure_ascii=False)
        assert result.to_dict() == {"content": [{"type": "text", "text": result.text}]}

    async def test_businesses(self, context, fake_graph):
        fake_graph.add("/solutions/bookingBusinesses", [{"id": "B1"}])

        result = await call_tool(context, "get_bookings_businesses")

        assert json.loads(result.text) == [{"id": "B1"}]

    @pytest.mark.parametrize(
        "arguments, expected_filter",
        [
            (
                {"startDate": "2024-01-01", "endDate": "2024-01-31"},
                "start ge 2024-01-01 and end le 2024-01-31",
            ),
            ({"startDate": "2024-01-01"}, "start ge 2024-01-01"),
            ({}, None),
        ],
    )
    async def test_appointment_filters(self, context, fake_graph, arguments, expected_filter):
        fake_graph.add("/solutions/bookingBusinesses/B1/appointments", [])

        result = await call_tool(
            context, "get_business_appointments", {"businessId": "B1", **arguments}
        )

        assert not result.is_error
        params = fake_graph.graph_requests()[0].url.params
        assert params.get("$filter") == expected_filter

    async def test_unknown_tool_is_method_not_found(self, context, fake_graph):
        with pytest.raises(UnknownToolError) as excinfo:
            await call_tool(context, "delete_business", {"businessId": "B1"})

        assert isinstance(excinfo.value, McpError)
        assert excinfo.value.error.code == METHOD_NOT_FOUND
        assert "delete_business" in excinfo.value.error.message
        assert fake_graph.graph_requests() == []

    async def test_network_failure_becomes_error_result(self, context, fake_graph):
        fake_graph.failure = httpx.ConnectError("Connection refused")

        result = await call_tool(context, "get_business_services", {"businessId": "B1"})

        assert result.is_error
        assert result.text == "Error: Connection refused"
        assert result.to_dict()["isError"] is True

    async def test_upstream_error_becomes_error_result(self, context, fake_graph):
        result = await call_tool(context, "get_business_staff", {"businessId": "missing"})

        assert result.is_error
        assert result.text.startswith("Error: ")
        assert "Resource not found" in result.text

    async def test_invalid_arguments_become_error_result(self, context, fake_graph):
        result = await call_tool(context, "get_business_staff", {"businessId": ""})

        assert result.is_error
        assert result.text.startswith("Error: Invalid arguments for get_business_staff")
        assert fake_graph.graph_requests() == []

    async def test_server_keeps_serving_after_failure(self, context, fake_graph):
        fake_graph.add("/solutions/bookingBusinesses", [{"id": "B1"}])
        fake_graph.failure = httpx.ConnectError("boom")
        failed = await call_tool(context, "get_bookings_businesses")

        fake_graph.failure = None
        recovered = await call_tool(context, "get_bookings_businesses")

        assert failed.is_error
        assert not recovered.is_error
