# =============================================================================
# core/__init__.py
# =============================================================================
# Configuration, authentication, the Microsoft Graph client, the Bookings
# read operations and the tool gateway (catalog + dispatcher).
#
# Nothing in this package imports FastMCP or Google ADK; the MCP server in
# tools/ and the agent in agent/ are wiring on top of it.
# =============================================================================
