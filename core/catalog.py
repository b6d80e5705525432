# =============================================================================
# core/catalog.py  —  The Tool Catalog
# =============================================================================
#
# The complete, fixed list of tools this server offers.  Every caller-facing
# name, description and argument lives here; the MCP layer (tools/) and the
# dispatcher both read from this table.
#
# TOOL NAMING:
#   Every tool is a read-only get_* lookup against the CRM.  Unmarked
#   parameters are optional filters; required ones are flagged explicitly.
# =============================================================================

from typing import Optional

from core.models import ToolDescriptor, ToolParameter


DEAL_STATUSES = ("open", "won", "lost", "deleted", "all_not_deleted")


TOOL_CATALOG: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name="get_deals",
        description="Get all deals with optional filters",
        parameters=(
            ToolParameter("pipelineId", "number", "Filter by pipeline ID", integer=True),
            ToolParameter("stageId", "number", "Filter by stage ID", integer=True),
            ToolParameter("status", "string", "Filter by status", enum=DEAL_STATUSES),
        ),
    ),
    ToolDescriptor(
        name="get_deal_details",
        description=(
            "Get detailed information about a specific deal, "
            "including person and organization info"
        ),
        parameters=(
            ToolParameter("id", "number", "The ID of the deal", required=True, integer=True),
        ),
    ),
    ToolDescriptor(
        name="get_activities",
        description="Get activities with optional filters",
        parameters=(
            ToolParameter("dealId", "number", "Filter by deal ID", integer=True),
            ToolParameter("userId", "number", "Filter by user ID", integer=True),
            ToolParameter("type", "string", "Filter by activity type"),
        ),
    ),
    ToolDescriptor(
        name="get_leads",
        description="Get leads with optional filters",
        parameters=(
            ToolParameter("ownerId", "number", "Filter by owner ID", integer=True),
        ),
    ),
    ToolDescriptor(
        name="get_pipelines",
        description="Get all pipelines",
    ),
    ToolDescriptor(
        name="get_stages",
        description="Get all stages for a pipeline",
        parameters=(
            ToolParameter("pipelineId", "number", "The ID of the pipeline", required=True, integer=True),
        ),
    ),
    ToolDescriptor(
        name="get_users",
        description="Get all users in the company",
    ),
)

_BY_NAME: dict[str, ToolDescriptor] = {tool.name: tool for tool in TOOL_CATALOG}


def list_tools() -> list[ToolDescriptor]:
    """Return every tool descriptor, always in catalog order."""
    return list(TOOL_CATALOG)


def get_descriptor(name: str) -> Optional[ToolDescriptor]:
    return _BY_NAME.get(name)


def tool_names() -> list[str]:
    return [tool.name for tool in TOOL_CATALOG]
