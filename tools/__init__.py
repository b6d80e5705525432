# =============================================================================
# tools/__init__.py
# =============================================================================
# The MCP transport layer.
#
# tools/mcp_server.py is the translation layer between MCP and core/:
#   1. It registers one FastMCP tool per catalog entry
#   2. Each tool forwards its arguments to core.dispatcher.Dispatcher
#   3. It maps the ToolResult envelope onto MCP content / isError
#
# No CRM logic lives here; a tool function is a few lines of glue.
# =============================================================================
