"""Unit tests — fastapi_multitenancy.resolution.scope.RequestTenancy

Verified:
* Resolution runs at most once per request
* Concurrent first calls share a single lookup
* Cancellation during a lookup caches nothing; a retry re-runs the chain
* Store failures propagate and cache nothing
* require_tenant raises TenantNotFoundError on RESOLVED_NONE
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from fastapi_multitenancy.core.exceptions import TenantNotFoundError
from fastapi_multitenancy.core.types import ResolutionState, Tenant
from fastapi_multitenancy.normalization import CaseFoldingNormalizer
from fastapi_multitenancy.parsers import HeaderParser
from fastapi_multitenancy.request import RequestView
from fastapi_multitenancy.resolution.resolver import TenantResolver
from fastapi_multitenancy.resolution.scope import RequestTenancy

pytestmark = pytest.mark.unit

_NOW = datetime(2024, 1, 1, tzinfo=UTC)
_ACME = Tenant(id="t-001", identifier="acme", name="Acme", created_at=_NOW, updated_at=_NOW)


def _mock_store(tenant: Tenant | None = _ACME) -> AsyncMock:
    store = AsyncMock()
    store.find_by_canonical_name.return_value = tenant
    store.get_tenant_id.side_effect = lambda t: t.id
    return store


def _tenancy(store: AsyncMock, header: str | None = "acme") -> RequestTenancy:
    resolver = TenantResolver([HeaderParser("X-Tenant")], store, CaseFoldingNormalizer())
    headers = {"X-Tenant": header} if header is not None else {}
    return RequestTenancy(resolver, RequestView.build(headers=headers))


class TestMemoisation:
    async def test_starts_unresolved(self):
        tenancy = _tenancy(_mock_store())
        assert tenancy.state is ResolutionState.UNRESOLVED
        assert not tenancy.is_resolved
        assert tenancy.tenant is None

    async def test_resolves_tenant_once(self):
        store = _mock_store()
        tenancy = _tenancy(store)

        first = await tenancy.get_tenant()
        second = await tenancy.get_tenant()

        assert first is second is _ACME
        assert tenancy.state is ResolutionState.RESOLVED_TENANT
        store.find_by_canonical_name.assert_awaited_once()

    async def test_resolved_none_is_cached(self):
        store = _mock_store(tenant=None)
        tenancy = _tenancy(store)

        assert await tenancy.get_tenant() is None
        assert await tenancy.get_tenant() is None
        assert tenancy.state is ResolutionState.RESOLVED_NONE
        store.find_by_canonical_name.assert_awaited_once()

    async def test_events_recorded(self):
        tenancy = _tenancy(_mock_store())
        await tenancy.get_tenant()
        assert len(tenancy.events) == 1

    async def test_concurrent_callers_share_one_lookup(self):
        store = _mock_store()

        async def _slow_lookup(name: str) -> Tenant:
            await asyncio.sleep(0.01)
            return _ACME

        store.find_by_canonical_name.side_effect = _slow_lookup
        tenancy = _tenancy(store)

        results = await asyncio.gather(*(tenancy.get_tenant() for _ in range(10)))

        assert all(r is _ACME for r in results)
        assert store.find_by_canonical_name.await_count == 1


class TestFailures:
    async def test_cancellation_is_not_cached(self):
        store = _mock_store()
        started = asyncio.Event()

        async def _hanging_lookup(name: str) -> Tenant:
            started.set()
            await asyncio.Event().wait()
            return _ACME

        store.find_by_canonical_name.side_effect = _hanging_lookup
        tenancy = _tenancy(store)

        task = asyncio.create_task(tenancy.get_tenant())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert tenancy.state is ResolutionState.UNRESOLVED

        store.find_by_canonical_name.side_effect = None
        assert await tenancy.get_tenant() is _ACME
        assert store.find_by_canonical_name.await_count == 2

    async def test_store_error_propagates_and_is_not_cached(self):
        store = _mock_store()
        store.find_by_canonical_name.side_effect = ConnectionError("db down")
        tenancy = _tenancy(store)

        with pytest.raises(ConnectionError):
            await tenancy.get_tenant()
        assert tenancy.state is ResolutionState.UNRESOLVED

        store.find_by_canonical_name.side_effect = None
        assert await tenancy.get_tenant() is _ACME
        assert tenancy.state is ResolutionState.RESOLVED_TENANT


class TestRequireTenant:
    async def test_returns_tenant(self):
        assert await _tenancy(_mock_store()).require_tenant() is _ACME

    async def test_raises_when_resolved_none(self):
        tenancy = _tenancy(_mock_store(), header=None)
        with pytest.raises(TenantNotFoundError) as exc_info:
            await tenancy.require_tenant()
        assert exc_info.value.details["request"] == tenancy.request.display_url

    async def test_repr_shows_state(self):
        tenancy = _tenancy(_mock_store())
        assert "unresolved" in repr(tenancy)
