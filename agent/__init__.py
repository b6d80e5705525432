# =============================================================================
# agent/__init__.py
# =============================================================================
# The Google ADK assistant that talks to the Pipedrive MCP server.
#
#   agent/  → orchestration only (prompt, model, MCP connection)
#   tools/  → the MCP server
#   core/   → catalog, dispatch, handlers, CRM client
#
# The agent holds no CRM logic of its own: everything it knows about deals,
# leads or activities comes back through the MCP tools.
# =============================================================================
