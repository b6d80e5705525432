"""Shared fixtures: an in-memory CRM provider that records every call."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from core.dispatcher import Dispatcher
from core.provider import CrmProviderError


class FakeProvider:
    """CrmDataProvider double backed by plain dicts.

    ``calls`` records (method, argument) pairs in call order.
    """

    def __init__(
        self,
        *,
        deals: dict[int, Any] | None = None,
        persons: dict[int, Any] | None = None,
        organizations: dict[int, Any] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.deals = deals or {}
        self.persons = persons or {}
        self.organizations = organizations or {}
        self.delay = delay
        self.calls: list[tuple[str, Any]] = []

        self.deal_list = {"success": True, "data": [{"id": 1, "title": "Big deal"}]}
        self.activity_list = {"success": True, "data": [{"id": 10, "type": "call"}]}
        self.lead_list = {"success": True, "data": [{"id": "a1b2", "title": "Lead"}]}
        self.pipeline_list = {"success": True, "data": [{"id": 1, "name": "Sales"}]}
        self.stage_list = {"success": True, "data": [{"id": 3, "pipeline_id": 1}]}
        self.user_list = {"success": True, "data": [{"id": 7, "name": "Ada"}]}

    async def _record(self, method: str, argument: Any = None) -> None:
        self.calls.append((method, argument))
        if self.delay:
            await asyncio.sleep(self.delay)

    def calls_to(self, method: str) -> list[Any]:
        return [arg for name, arg in self.calls if name == method]

    async def list_deals(self, filter):
        await self._record("list_deals", filter)
        return self.deal_list

    async def get_deal(self, id):
        await self._record("get_deal", id)
        if id not in self.deals:
            raise CrmProviderError(f"Deal {id} not found", status_code=404)
        return self.deals[id]

    async def list_activities(self, filter):
        await self._record("list_activities", filter)
        return self.activity_list

    async def list_leads(self, filter):
        await self._record("list_leads", filter)
        return self.lead_list

    async def list_pipelines(self):
        await self._record("list_pipelines")
        return self.pipeline_list

    async def list_stages(self, pipeline_id):
        await self._record("list_stages", pipeline_id)
        return self.stage_list

    async def list_users(self):
        await self._record("list_users")
        return self.user_list

    async def get_person(self, id):
        await self._record("get_person", id)
        if id not in self.persons:
            raise CrmProviderError(f"Person {id} not found", status_code=404)
        return self.persons[id]

    async def get_organization(self, id):
        await self._record("get_organization", id)
        if id not in self.organizations:
            raise CrmProviderError(f"Organization {id} not found", status_code=404)
        return self.organizations[id]


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def dispatcher(provider: FakeProvider) -> Dispatcher:
    return Dispatcher(provider)


def run(coro):
    """Drive a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)
