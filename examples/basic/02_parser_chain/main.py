"""
Basic Example 2 — Parser Chain
================================
Several ways of naming a tenant, tried in order of trust, backed by SQLite.

What you'll learn
-----------------
- Build a parser chain (header → sub-domain → path → query)
- Persist tenants with SQLAlchemyTenantStore
- Inspect resolution diagnostics from a handler
- Turn on DEBUG logging to see every parser decision

Run
---
    pip install "fastapi-multitenancy[sqlite]"
    pip install "fastapi[standard]"
    uvicorn main:app --reload

Test
----
    curl http://localhost:8000/whoami -H "X-Tenant: acme"
    curl http://localhost:8000/whoami -H "Host: acme.tenants.localhost:8000"
    curl http://localhost:8000/tenants/Acme/whoami
    curl "http://localhost:8000/whoami?tenant=beta"

    # Header names an unknown tenant → falls through to the query parameter
    curl "http://localhost:8000/debug/resolution?tenant=beta" -H "X-Tenant: ghost"
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from fastapi_multitenancy import (
    ParserChainBuilder,
    SQLAlchemyTenantStore,
    TenancyConfig,
    TenancyManager,
    TenancyMiddleware,
    TenantNotFoundError,
)
from fastapi_multitenancy.dependencies import RequestTenancyDep, TenantDep

logging.basicConfig(level=logging.INFO)
logging.getLogger("fastapi_multitenancy.resolution").setLevel(logging.DEBUG)

# ── 1. Parser chain ───────────────────────────────────────────────────────────
#
# Earlier parsers win.  A parser whose candidate is not a known tenant does
# not stop the chain; the next parser is tried.
#
parsers = (
    ParserChainBuilder()
    .add_header_parser("X-Tenant")
    .add_host_parser_for_parent(".tenants.localhost")
    .add_path_parser_for_parent("/tenants/")
    .add_query_parser("tenant")
    .build()
)

config  = TenancyConfig(database_url="sqlite+aiosqlite:///./tenants.db")
store   = SQLAlchemyTenantStore(config.database_url)
manager = TenancyManager(config, store, parsers=parsers)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with manager.create_lifespan()(app):
        for name, display in (("acme", "Acme Corp"), ("beta", "Beta Labs")):
            try:
                await store.get_by_identifier(name)
            except TenantNotFoundError:
                await manager.register_tenant(name, display)
        yield

app = FastAPI(title="Parser Chain — Basic Example", lifespan=lifespan)
app.add_middleware(TenancyMiddleware, manager=manager, excluded_paths=["/docs", "/openapi.json"])


@app.get("/whoami")
@app.get("/tenants/{segment}/whoami")
async def whoami(tenant: TenantDep):
    return {"id": tenant.id, "tenant": tenant.identifier, "name": tenant.name}


@app.get("/debug/resolution")
async def resolution(tenancy: RequestTenancyDep):
    """Show how the current request was resolved."""
    tenant = await tenancy.get_tenant()
    return {
        "tenant": tenant.identifier if tenant else None,
        "state": tenancy.state.value,
        "events": [event.describe() for event in tenancy.events],
    }
