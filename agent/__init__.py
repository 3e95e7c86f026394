# =============================================================================
# agent/__init__.py
# =============================================================================
# The Google ADK agent that answers questions about Microsoft Bookings by
# calling the MCP tools in tools/mcp_server.py.  It holds no Graph logic
# of its own: a system prompt, an LLM (via LiteLlm) and an MCP connection.
# =============================================================================
