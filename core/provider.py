# =============================================================================
# core/provider.py  —  CRM Data Provider (contract + Pipedrive client)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   1. Declares CrmDataProvider, the read-only capability interface the tool
#      handlers depend on.  Handlers receive a provider at construction time,
#      so tests can pass in any object with these coroutine methods.
#   2. Implements PipedriveProvider, the live client, on top of httpx.
#
# PIPEDRIVE API GENERATIONS:
#   Deals, activities, pipelines, stages, persons and organizations are
#   served by the v2 API (/api/v2/...).  Leads and users only exist on the
#   v1 API (/v1/...).  Both accept the api_token query parameter.
#
# RETURN SHAPES:
#   list_*  →  the decoded response body, untouched (data + additional_data)
#   get_*   →  the entity under the body's "data" key
#
# ERRORS:
#   Every failure (HTTP status, {"success": false}, network, bad JSON) is
#   raised as CrmProviderError.  Nothing is retried here; the request timeout
#   comes from configuration.
# =============================================================================

import logging
from typing import Any, Optional, Protocol

import httpx

from core.models import ActivityFilter, DealFilter, LeadFilter, StageFilter


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.pipedrive.com"
DEFAULT_TIMEOUT = 30.0


class CrmProviderError(Exception):
    """A fault reported by (or while talking to) the CRM."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CrmDataProvider(Protocol):
    """Read operations the tool handlers need from a CRM."""

    async def list_deals(self, filter: DealFilter) -> Any: ...

    async def get_deal(self, id: int) -> Any: ...

    async def list_activities(self, filter: ActivityFilter) -> Any: ...

    async def list_leads(self, filter: LeadFilter) -> Any: ...

    async def list_pipelines(self) -> Any: ...

    async def list_stages(self, pipeline_id: int) -> Any: ...

    async def list_users(self) -> Any: ...

    async def get_person(self, id: int) -> Any: ...

    async def get_organization(self, id: int) -> Any: ...


class PipedriveProvider:
    """CrmDataProvider backed by the Pipedrive REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "PipedriveProvider":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # HTTP plumbing
    # -------------------------------------------------------------------------
    async def _get(self, path: str, params: Optional[dict] = None) -> dict:
        query = dict(params or {})
        query["api_token"] = self._api_key

        try:
            response = await self._client.get(path, params=query)
        except httpx.HTTPError as exc:
            raise CrmProviderError(f"Pipedrive request to {path} failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            detail = _error_detail(body) or response.reason_phrase
            raise CrmProviderError(
                f"Pipedrive returned {response.status_code} for {path}: {detail}",
                status_code=response.status_code,
            )
        if not isinstance(body, dict):
            raise CrmProviderError(f"Pipedrive returned a non-JSON body for {path}")
        if body.get("success") is False:
            detail = _error_detail(body) or "unknown error"
            raise CrmProviderError(f"Pipedrive rejected {path}: {detail}")

        logger.debug("GET %s -> %s", path, response.status_code)
        return body

    async def _get_entity(self, path: str) -> Any:
        body = await self._get(path)
        return body.get("data")

    # -------------------------------------------------------------------------
    # CrmDataProvider
    # -------------------------------------------------------------------------
    async def list_deals(self, filter: DealFilter) -> dict:
        return await self._get("/api/v2/deals", filter.to_query())

    async def get_deal(self, id: int) -> Any:
        return await self._get_entity(f"/api/v2/deals/{id}")

    async def list_activities(self, filter: ActivityFilter) -> dict:
        return await self._get("/api/v2/activities", filter.to_query())

    async def list_leads(self, filter: LeadFilter) -> dict:
        return await self._get("/v1/leads", filter.to_query())

    async def list_pipelines(self) -> dict:
        return await self._get("/api/v2/pipelines")

    async def list_stages(self, pipeline_id: int) -> dict:
        return await self._get("/api/v2/stages", StageFilter(pipeline_id=pipeline_id).to_query())

    async def list_users(self) -> dict:
        return await self._get("/v1/users")

    async def get_person(self, id: int) -> Any:
        return await self._get_entity(f"/api/v2/persons/{id}")

    async def get_organization(self, id: int) -> Any:
        return await self._get_entity(f"/api/v2/organizations/{id}")


def _error_detail(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    info = body.get("error_info")
    if error and info:
        return f"{error} ({info})"
    return error or info
