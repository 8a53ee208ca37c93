"""Shared pytest fixtures for the fastapi-multitenancy test suite.

Hierarchy
---------
tenant_factory          callable that builds Tenant objects with sensible defaults
mem_store               fresh InMemoryTenantStore per test
acme                    one active Tenant seeded into mem_store
globex                  second active Tenant seeded into mem_store
sqlite_store            SQLAlchemyTenantStore backed by SQLite :memory:
config                  TenancyConfig with header, host, path and query parsers
manager                 TenancyManager with InMemoryTenantStore
app_factory             builds a minimal FastAPI + TenancyMiddleware for a manager
asgi_app                app_factory applied to manager
http_client             httpx.AsyncClient → asgi_app
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
import uuid

from fastapi import FastAPI, Request, WebSocket
from httpx import ASGITransport, AsyncClient
import pytest
import pytest_asyncio

from fastapi_multitenancy.core.config import ParserSpec, TenancyConfig
from fastapi_multitenancy.core.types import Tenant, TenantStatus
from fastapi_multitenancy.dependencies import (
    RequestTenancyDep,
    TenantDep,
    TenantOptionalDep,
)
from fastapi_multitenancy.manager import TenancyManager
from fastapi_multitenancy.middleware.tenancy import TenancyMiddleware
from fastapi_multitenancy.storage.database import SQLAlchemyTenantStore
from fastapi_multitenancy.storage.memory import InMemoryTenantStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

##################
# Tenant factory #
##################


@pytest.fixture
def tenant_factory():
    """Return a factory that produces unique Tenant objects."""
    counter = [0]

    def _make(
        *,
        identifier: str | None = None,
        name: str | None = None,
        status: TenantStatus = TenantStatus.ACTIVE,
        metadata: dict[str, Any] | None = None,
        tenant_id: str | None = None,
    ) -> Tenant:
        counter[0] += 1
        n = counter[0]
        ts = datetime.now(UTC)
        return Tenant(
            id=tenant_id or f"t-{uuid.uuid4().hex[:16]}",
            identifier=identifier or f"tenant-{n:04d}",
            name=name or f"Test Tenant {n}",
            status=status,
            metadata=metadata or {},
            created_at=ts,
            updated_at=ts,
        )

    return _make


###################
# In-memory store #
###################


@pytest.fixture
def mem_store() -> InMemoryTenantStore:
    return InMemoryTenantStore()


@pytest_asyncio.fixture
async def acme(mem_store: InMemoryTenantStore, tenant_factory) -> Tenant:
    t = tenant_factory(
        identifier="acme-corp",
        name="Acme Corporation",
        metadata={"plan": "enterprise"},
    )
    return await mem_store.create(t)


@pytest_asyncio.fixture
async def globex(mem_store: InMemoryTenantStore, tenant_factory) -> Tenant:
    t = tenant_factory(identifier="globex", name="Globex Inc")
    return await mem_store.create(t)


################
# SQLite store #
################


@pytest_asyncio.fixture
async def sqlite_store() -> AsyncIterator[SQLAlchemyTenantStore]:
    s = SQLAlchemyTenantStore("sqlite+aiosqlite:///:memory:")
    await s.initialize()
    yield s
    await s.close()


##########
# Config #
##########


@pytest.fixture
def config() -> TenancyConfig:
    return TenancyConfig(
        parsers=[
            ParserSpec(kind="header", name="X-Tenant"),
            ParserSpec(kind="host", parent=".tenants.example.com"),
            ParserSpec(kind="path", parent="/tenants/"),
            ParserSpec(kind="query", name="tenant"),
        ],
        excluded_paths=["/health"],
    )


###########
# Manager #
###########


@pytest_asyncio.fixture
async def manager(
    config: TenancyConfig,
    mem_store: InMemoryTenantStore,
) -> AsyncIterator[TenancyManager]:
    m = TenancyManager(config, mem_store)
    await m.initialize()
    yield m
    await m.close()


##########################
# ASGI app + HTTP client #
##########################


def build_app(manager: TenancyManager, **middleware_kwargs: Any):
    """Return a minimal FastAPI app wrapped in TenancyMiddleware."""
    app = FastAPI()
    app.add_middleware(TenancyMiddleware, manager=manager, **middleware_kwargs)

    @app.get("/health")
    async def health(request: Request):
        return {"status": "ok", "tenancy": "tenancy" in request.scope.get("state", {})}

    @app.get("/whoami")
    async def whoami(tenant: TenantDep):
        return {"id": tenant.id, "identifier": tenant.identifier}

    @app.get("/optional")
    async def optional(tenant: TenantOptionalDep):
        return {"identifier": tenant.identifier if tenant else None}

    @app.get("/public/status")
    async def public_status(tenant: TenantOptionalDep):
        return {"tenant": tenant.identifier if tenant else None}

    @app.get("/tenants/{name}/dashboard")
    async def dashboard(name: str, tenant: TenantDep):
        return {"segment": name, "identifier": tenant.identifier}

    @app.get("/untouched")
    async def untouched(tenancy: RequestTenancyDep):
        return {"state": tenancy.state.value}

    @app.get("/events")
    async def events(tenancy: RequestTenancyDep):
        await tenancy.get_tenant()
        return {
            "state": tenancy.state.value,
            "events": [event.kind.value for event in tenancy.events],
        }

    @app.get("/state")
    async def state(request: Request):
        tenant = await request.state.tenancy.get_tenant()
        return {"identifier": tenant.identifier if tenant else None}

    @app.websocket("/ws")
    async def ws(websocket: WebSocket, tenant: TenantDep):
        await websocket.accept()
        await websocket.send_json({"identifier": tenant.identifier})
        await websocket.close()

    return app


@pytest.fixture
def app_factory():
    """Return the app builder so tests can wire their own manager."""
    return build_app


@pytest_asyncio.fixture
async def asgi_app(manager: TenancyManager):
    return build_app(manager)


@pytest_asyncio.fixture
async def http_client(asgi_app, acme: Tenant) -> AsyncIterator[AsyncClient]:
    """Return AsyncClient bound to asgi_app with acme seeded."""
    async with AsyncClient(
        transport=ASGITransport(app=asgi_app),
        base_url="http://testserver",
    ) as client:
        yield client
