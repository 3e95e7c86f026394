# =============================================================================
# agent/bookings_agent.py  —  Google ADK agent for the Bookings tools
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Creates the Google ADK agent that answers Bookings questions.  The agent
#   has no Graph access of its own; everything goes through the MCP server
#   in tools/mcp_server.py.
#
#   ┌──────────────────────────┐  stdio  ┌──────────────────────┐  HTTPS  ┌─────────────────┐
#   │ ADK Agent (LiteLlm LLM)  │ ──────▶ │ FastMCP server       │ ──────▶ │ Microsoft Graph │
#   │ agent/bookings_agent.py  │         │ tools/mcp_server.py  │         │ Bookings API    │
#   └──────────────────────────┘         └──────────────────────┘         └─────────────────┘
#
# MODEL:
#   LiteLlm model string, read from BOOKINGS_AGENT_MODEL.  The default routes
#   through OpenRouter and needs OPENROUTER_API_KEY in the environment.
#
# MCP CONNECTION:
#   ADK spawns the server as a subprocess ("uv run python -m tools.mcp_server")
#   from the project root, forwarding this process's environment so the
#   MICROSOFT_GRAPH_* credentials reach it.
# =============================================================================

import os

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_bookings_assistant_prompt

AGENT_NAME = "bookings_assistant"
DEFAULT_MODEL = "openrouter/openai/gpt-4o"

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def server_parameters() -> StdioServerParameters:
    """How ADK launches the Bookings MCP server."""
    return StdioServerParameters(
        command="uv",
        args=["run", "python", "-m", "tools.mcp_server"],
        cwd=PROJECT_ROOT,
        env=dict(os.environ),
    )


def create_agent(model: str | None = None) -> Agent:
    """Create the Bookings assistant agent.

    Args:
        model: LiteLlm model string; falls back to BOOKINGS_AGENT_MODEL,
            then DEFAULT_MODEL.
    """
    model_name = model or os.getenv("BOOKINGS_AGENT_MODEL") or DEFAULT_MODEL

    mcp_tools = MCPToolset(connection_params=server_parameters())

    return Agent(
        name=AGENT_NAME,
        model=LiteLlm(model=model_name),
        instruction=get_bookings_assistant_prompt(),
        tools=[mcp_tools],
    )
