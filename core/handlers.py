# =============================================================================
# core/handlers.py  —  Tool Handlers
# =============================================================================
#
# One coroutine per catalog tool.  Handlers receive arguments that the
# dispatcher has already validated and return a plain JSON-serialisable
# payload; wrapping it in a ToolResult is the dispatcher's job.
#
# SIX PASS-THROUGHS:
#   get_deals, get_activities, get_leads, get_pipelines, get_stages,
#   get_users each make exactly one provider call and return its payload
#   unchanged.
#
# ONE ENRICHMENT:
#   get_deal_details fetches the deal, then resolves its person and
#   organization links:
#       absent            →  None
#       Resolved(entity)  →  the embedded entity, no extra call
#       Unresolved(id)    →  one get_person / get_organization call
#   The two secondary lookups do not depend on each other and run
#   concurrently; both finish before the result is composed.
# =============================================================================

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from core.models import (
    ActivityFilter,
    DealFilter,
    DealLookup,
    EntityRef,
    LeadFilter,
    Resolved,
    StageFilter,
    Unresolved,
    parse_reference,
)
from core.provider import CrmDataProvider


logger = logging.getLogger(__name__)

Handler = Callable[[dict], Awaitable[Any]]


async def _resolve(
    ref: Optional[EntityRef],
    fetch: Callable[[int], Awaitable[Any]],
) -> Any:
    if ref is None:
        return None
    if isinstance(ref, Resolved):
        return ref.entity
    if isinstance(ref, Unresolved):
        return await fetch(ref.id)
    raise TypeError(f"Unexpected entity reference: {ref!r}")


class CrmToolHandlers:
    """The tool implementations, bound to one data provider."""

    def __init__(self, provider: CrmDataProvider):
        self.provider = provider
        self._handlers: dict[str, Handler] = {
            "get_deals": self.get_deals,
            "get_deal_details": self.get_deal_details,
            "get_activities": self.get_activities,
            "get_leads": self.get_leads,
            "get_pipelines": self.get_pipelines,
            "get_stages": self.get_stages,
            "get_users": self.get_users,
        }

    def handler_for(self, name: str) -> Optional[Handler]:
        return self._handlers.get(name)

    # -------------------------------------------------------------------------
    # Pass-through tools
    # -------------------------------------------------------------------------
    async def get_deals(self, arguments: dict) -> Any:
        return await self.provider.list_deals(DealFilter.from_arguments(arguments))

    async def get_activities(self, arguments: dict) -> Any:
        return await self.provider.list_activities(ActivityFilter.from_arguments(arguments))

    async def get_leads(self, arguments: dict) -> Any:
        return await self.provider.list_leads(LeadFilter.from_arguments(arguments))

    async def get_pipelines(self, arguments: dict) -> Any:
        return await self.provider.list_pipelines()

    async def get_stages(self, arguments: dict) -> Any:
        stages = StageFilter.from_arguments(arguments)
        return await self.provider.list_stages(stages.pipeline_id)

    async def get_users(self, arguments: dict) -> Any:
        return await self.provider.list_users()

    # -------------------------------------------------------------------------
    # Enrichment: get_deal_details
    # -------------------------------------------------------------------------
    async def get_deal_details(self, arguments: dict) -> dict:
        """Fetch a deal together with its person and organization.

        A missing deal is not special-cased: the provider's fault propagates
        and the dispatcher reports it like any other.

        Returns:
            {"deal": ..., "person": ... | None, "organization": ... | None}
        """
        lookup = DealLookup.from_arguments(arguments)
        deal = await self.provider.get_deal(lookup.id)

        person_ref = org_ref = None
        if isinstance(deal, dict):
            person_ref = parse_reference(deal.get("person_id"))
            org_ref = parse_reference(deal.get("org_id"))

        logger.debug("deal %s: person=%r organization=%r", lookup.id, person_ref, org_ref)

        person, organization = await asyncio.gather(
            _resolve(person_ref, self.provider.get_person),
            _resolve(org_ref, self.provider.get_organization),
        )
        return {"deal": deal, "person": person, "organization": organization}
