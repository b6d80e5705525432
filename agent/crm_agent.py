# =============================================================================
# agent/crm_agent.py  —  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Creates the Google ADK agent that answers CRM questions by calling the
#   Pipedrive MCP server (tools/mcp_server.py).
#
#   ADK     → orchestration, tool calling, sessions
#   LiteLlm → the reasoning model (any provider LiteLLM can reach)
#   MCP     → the CRM tools, served over stdio by a subprocess
#
# CONFIGURATION:
#   CRM_AGENT_MODEL     LiteLLM model string (default openrouter/openai/gpt-4o)
#   PIPEDRIVE_API_KEY   forwarded to the MCP server subprocess
#   The model provider's own key (e.g. OPENROUTER_API_KEY) is read by
#   LiteLLM from the environment.
# =============================================================================

import os
import sys
from typing import Mapping, Optional

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from google.adk.tools.mcp_tool.mcp_session_manager import StdioServerParameters

from agent.prompt import get_crm_assistant_prompt


DEFAULT_MODEL = "openrouter/openai/gpt-4o"
AGENT_NAME = "pipedrive_crm_assistant"

_FORWARDED_ENV = ("PIPEDRIVE_API_KEY", "PIPEDRIVE_BASE_URL", "PIPEDRIVE_TIMEOUT", "LOG_LEVEL", "PATH")


def _project_root() -> str:
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def server_parameters(environ: Optional[Mapping[str, str]] = None) -> StdioServerParameters:
    """How ADK should launch the MCP server subprocess.

    The server runs with the current interpreter as ``python -m
    tools.mcp_server`` from the project root, so it shares this process's
    virtual environment.
    """
    env = os.environ if environ is None else environ
    return StdioServerParameters(
        command=sys.executable,
        args=["-m", "tools.mcp_server"],
        env={key: env[key] for key in _FORWARDED_ENV if env.get(key)},
        cwd=_project_root(),
    )


def create_agent(model: Optional[str] = None) -> Agent:
    """Create the CRM assistant agent.

    Args:
        model: LiteLLM model string; falls back to CRM_AGENT_MODEL, then
            DEFAULT_MODEL.
    """
    mcp_tools = MCPToolset(connection_params=server_parameters())

    return Agent(
        name=AGENT_NAME,
        model=LiteLlm(model=model or os.environ.get("CRM_AGENT_MODEL") or DEFAULT_MODEL),
        instruction=get_crm_assistant_prompt(),
        tools=[mcp_tools],
    )
