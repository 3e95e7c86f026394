# =============================================================================
# tools/__init__.py
# =============================================================================
# The FastMCP server that exposes the Bookings gateway as MCP tools.
#
# Each tool here only logs, forwards its arguments to core.gateway.call_tool()
# and maps the result onto FastMCP (text on success, ToolError on failure).
# Validation, HTTP and result shaping live in core/.
# =============================================================================
