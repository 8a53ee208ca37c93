"""Integration tests — fastapi_multitenancy.manager.TenancyManager"""

from __future__ import annotations

from unittest.mock import AsyncMock

from fastapi import FastAPI
import pytest

from fastapi_multitenancy.core.config import ParserSpec, TenancyConfig
from fastapi_multitenancy.core.exceptions import ConfigurationError
from fastapi_multitenancy.core.types import ResolutionState
from fastapi_multitenancy.manager import TenancyManager, generate_tenant_id
from fastapi_multitenancy.normalization import (
    CaseFoldingNormalizer,
    UpperInvariantNormalizer,
)
from fastapi_multitenancy.parsers import HeaderParser, HostParser, QueryParser
from fastapi_multitenancy.request import RequestView
from fastapi_multitenancy.storage.database import SQLAlchemyTenantStore
from fastapi_multitenancy.storage.memory import InMemoryTenantStore

pytestmark = pytest.mark.integration


class TestWiring:
    async def test_chain_built_from_config(self, manager):
        assert [type(p) for p in manager.resolver.parsers][:2] == [HeaderParser, HostParser]
        assert isinstance(manager.normalizer, CaseFoldingNormalizer)

    def test_explicit_parsers_override_config(self, config, mem_store):
        m = TenancyManager(config, mem_store, parsers=[QueryParser("t")])
        assert [type(p) for p in m.resolver.parsers] == [QueryParser]

    def test_normalizer_from_config(self, mem_store):
        m = TenancyManager(TenancyConfig(normalizer="upper"), mem_store)
        assert isinstance(m.normalizer, UpperInvariantNormalizer)

    def test_missing_store_raises(self, config):
        with pytest.raises(ConfigurationError):
            TenancyManager(config, None)

    async def test_store_built_from_database_url(self):
        m = TenancyManager(TenancyConfig(database_url="sqlite+aiosqlite:///:memory:"))
        assert isinstance(m.store, SQLAlchemyTenantStore)
        await m.initialize()
        try:
            t = await m.register_tenant("Initech", "Initech LLC")
            assert await m.store.find_by_canonical_name("initech") == t
        finally:
            await m.close()

    async def test_event_sink_receives_events(self, config, mem_store, acme):
        seen = []
        m = TenancyManager(config, mem_store, event_sink=seen.append)
        tenancy = m.request_tenancy(RequestView.build(headers={"X-Tenant": "acme-corp"}))
        assert await tenancy.get_tenant() == acme
        assert len(seen) == 1

    async def test_request_tenancy_starts_unresolved(self, manager):
        tenancy = manager.request_tenancy(RequestView.build())
        assert tenancy.state is ResolutionState.UNRESOLVED


class TestLifecycle:
    async def test_lifespan_initialises_and_closes_store(self, config):
        store = AsyncMock(spec=InMemoryTenantStore)
        m = TenancyManager(config, store)
        lifespan = m.create_lifespan()

        async with lifespan(FastAPI()):
            store.initialize.assert_awaited_once()
            store.close.assert_not_awaited()
        store.close.assert_awaited_once()


class TestRegisterTenant:
    async def test_identifier_is_normalised(self, manager):
        t = await manager.register_tenant("  Acme-Corp ", "Acme Corporation", {"plan": "pro"})
        assert t.identifier == "acme-corp"
        assert t.id.startswith("tenant-")
        assert t.metadata == {"plan": "pro"}

    async def test_registered_tenant_resolves(self, manager):
        t = await manager.register_tenant("Globex", "Globex Inc")
        tenancy = manager.request_tenancy(RequestView.build(headers={"X-Tenant": "GLOBEX"}))
        assert await tenancy.get_tenant() == t

    async def test_blank_name_rejected(self, manager):
        with pytest.raises(ValueError, match="Invalid tenant canonical name"):
            await manager.register_tenant("   ", "Nobody")

    async def test_duplicate_rejected(self, manager):
        await manager.register_tenant("acme", "Acme")
        with pytest.raises(ValueError):
            await manager.register_tenant("ACME", "Acme again")


def test_generate_tenant_id_is_unique():
    ids = {generate_tenant_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(i.startswith("tenant-") for i in ids)
