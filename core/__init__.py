# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains the tool catalog, the dispatcher, the handlers and
# the CRM data-provider client.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or Google ADK.  The dispatcher
#   can be driven directly from a test or a REPL with any object that
#   implements core.provider.CrmDataProvider.
# =============================================================================
