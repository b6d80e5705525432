# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the CRM tool catalog over MCP.  Each tool below is a thin
#   wrapper: it forwards its arguments to the core Dispatcher and turns the
#   resulting ToolResult into an MCP response.
#
# HOW IT WORKS (the flow):
#   1. An agent calls a tool by name via MCP (e.g., "get_deal_details")
#   2. FastMCP routes the call to the matching wrapper function below
#      (names it does not know go to UnknownToolMiddleware instead)
#   3. The function hands the arguments to Dispatcher.dispatch()
#   4. Success  → the JSON text is returned as the tool's content
#      Failure  → ToolError is raised, which FastMCP reports with isError=true
#
# Names, descriptions and input schemas come from core/catalog.py, so what
# the agent sees here is exactly what the dispatcher accepts.
#
# RUNNING THIS SERVER:
#     python -m tools.mcp_server        (or the pipedrive-mcp console script)
#   PIPEDRIVE_API_KEY must be set (environment or .env), otherwise the
#   process exits with status 1 before serving anything.
# =============================================================================

import asyncio
import logging
import sys
from typing import Any

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import Middleware, MiddlewareContext
from fastmcp.tools import Tool

from core.catalog import get_descriptor, tool_names
from core.config import ConfigurationError, Settings, load_settings
from core.dispatcher import Dispatcher
from core.provider import PipedriveProvider


SERVER_NAME = "pipedrive-mcp"

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: STDOUT carries the MCP JSON-RPC stream.
#
#   CYAN   → incoming tool calls
#   GREEN  → responses
#   YELLOW → errors and status lines
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

_MAX_LOGGED_CHARS = 500


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logging.info(f"{_CYAN}{tool_name} called with: {param_str or '(no arguments)'}{_RESET}")


def _log_status(message: str) -> None:
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    shown = text if len(text) <= _MAX_LOGGED_CHARS else text[:_MAX_LOGGED_CHARS] + "…"
    logging.info(f"{_GREEN}  ← {tool_name} response: {shown}{_RESET}")
    return text


# =============================================================================
# Unknown tool names
# =============================================================================
# FastMCP answers a call to an unregistered name before any tool function
# runs.  This middleware hands such calls to the dispatcher instead, so the
# caller always sees the dispatcher's own "Unknown tool: <name>" failure.
# =============================================================================
class UnknownToolMiddleware(Middleware):
    def __init__(self, dispatcher: Dispatcher):
        self.dispatcher = dispatcher

    async def on_call_tool(self, context: MiddlewareContext, call_next):
        name = context.message.name
        if name in tool_names():
            return await call_next(context)
        _log_request(name)
        result = await self.dispatcher.call_tool(name, context.message.arguments or {})
        _log_status(f"{name} failed: {result.text}")
        raise ToolError(result.text)


# =============================================================================
# Server factory
# =============================================================================
def _register(mcp: FastMCP, fn) -> None:
    """Add ``fn`` as a tool, advertising the catalog's schema for it.

    The wrapper functions accept any value and leave type checks to the
    dispatcher, so the schema FastMCP would derive from their signatures
    is replaced with the catalog's own.
    """
    descriptor = get_descriptor(fn.__name__)
    tool = Tool.from_function(fn, name=descriptor.name, description=descriptor.description)
    mcp.add_tool(tool.model_copy(update={"parameters": descriptor.input_schema()}))


def build_server(dispatcher: Dispatcher) -> FastMCP:
    """Create a FastMCP server whose tools all route through ``dispatcher``."""
    mcp = FastMCP(SERVER_NAME)
    mcp.add_middleware(UnknownToolMiddleware(dispatcher))

    async def call(tool_name: str, **arguments) -> str:
        _log_request(tool_name, **arguments)
        provided = {k: v for k, v in arguments.items() if v is not None}
        result = await dispatcher.call_tool(tool_name, provided)
        if result.is_error:
            _log_status(f"{tool_name} failed: {result.text}")
            raise ToolError(result.text)
        return _log_response(tool_name, result.text)

    # -------------------------------------------------------------------------
    # TOOL: get_deals
    # -------------------------------------------------------------------------
    async def get_deals(pipelineId: Any = None, stageId: Any = None, status: Any = None) -> str:
        return await call("get_deals", pipelineId=pipelineId, stageId=stageId, status=status)

    # -------------------------------------------------------------------------
    # TOOL: get_deal_details (deal + person + organization)
    # -------------------------------------------------------------------------
    # id defaults to None so a missing id reaches the dispatcher's own check.
    async def get_deal_details(id: Any = None) -> str:
        return await call("get_deal_details", id=id)

    # -------------------------------------------------------------------------
    # TOOL: get_activities
    # -------------------------------------------------------------------------
    async def get_activities(dealId: Any = None, userId: Any = None, type: Any = None) -> str:
        return await call("get_activities", dealId=dealId, userId=userId, type=type)

    # -------------------------------------------------------------------------
    # TOOL: get_leads
    # -------------------------------------------------------------------------
    async def get_leads(ownerId: Any = None) -> str:
        return await call("get_leads", ownerId=ownerId)

    # -------------------------------------------------------------------------
    # TOOL: get_pipelines
    # -------------------------------------------------------------------------
    async def get_pipelines() -> str:
        return await call("get_pipelines")

    # -------------------------------------------------------------------------
    # TOOL: get_stages
    # -------------------------------------------------------------------------
    async def get_stages(pipelineId: Any = None) -> str:
        return await call("get_stages", pipelineId=pipelineId)

    # -------------------------------------------------------------------------
    # TOOL: get_users
    # -------------------------------------------------------------------------
    async def get_users() -> str:
        return await call("get_users")

    for fn in (get_deals, get_deal_details, get_activities, get_leads,
               get_pipelines, get_stages, get_users):
        _register(mcp, fn)

    return mcp


# =============================================================================
# Server entry point
# =============================================================================
async def serve(settings: Settings) -> None:
    async with PipedriveProvider(
        settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
    ) as provider:
        mcp = build_server(Dispatcher(provider))
        logging.info(f"{SERVER_NAME} serving {len(tool_names())} tools over stdio")
        await mcp.run_async(transport="stdio")


def main() -> None:
    load_dotenv()
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        sys.stderr.write(f"{exc}\n")
        sys.exit(1)

    configure_logging(settings.log_level)
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
