"""
Basic Example 1 — Hello Tenant
================================
The simplest possible multi-tenant FastAPI application.

What you'll learn
-----------------
- Declare a one-parser chain in TenancyConfig
- Add TenancyMiddleware to your FastAPI app
- Inject the current Tenant into a route
- Bootstrap seed tenants at startup

Run
---
    pip install "fastapi-multitenancy"
    pip install "fastapi[standard]"
    uvicorn main:app --reload

Test
----
    # Health check (no tenant needed)
    curl http://localhost:8000/health

    # Greet acme-corp (lookup is case-insensitive)
    curl http://localhost:8000/hello -H "X-Tenant: ACME-Corp"

    # Missing header or unknown tenant → 404
    curl http://localhost:8000/hello
    curl http://localhost:8000/hello -H "X-Tenant: no-such-tenant"
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fastapi_multitenancy import (
    InMemoryTenantStore,
    ParserSpec,
    TenancyConfig,
    TenancyManager,
    TenancyMiddleware,
)
from fastapi_multitenancy.dependencies import TenantDep

# ── 1. Configuration ──────────────────────────────────────────────────────────
#
# One parser: the value of the X-Tenant header names the tenant.
#
config = TenancyConfig(
    parsers=[ParserSpec(kind="header", name="X-Tenant")],
    excluded_paths=["/health", "/docs", "/openapi.json"],
)

# ── 2. Store & Manager ────────────────────────────────────────────────────────
store   = InMemoryTenantStore()
manager = TenancyManager(config, store)


# ── 3. App + lifespan ─────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    async with manager.create_lifespan()(app):
        # register_tenant stores the canonical (normalised) name.
        await manager.register_tenant("Acme-Corp", "Acme Corporation", {"plan": "enterprise"})
        await manager.register_tenant("globex", "Globex Inc.", {"plan": "starter"})
        print("Seeded 2 tenants — ready to receive requests")
        yield

app = FastAPI(title="Hello Tenant — Basic Example", lifespan=lifespan)

# ── 4. Middleware ─────────────────────────────────────────────────────────────
app.add_middleware(TenancyMiddleware, manager=manager)


# ── 5. Routes ─────────────────────────────────────────────────────────────────
@app.get("/health")
async def health():
    """No tenant needed — used by load-balancers and CI checks."""
    return {"status": "ok"}


@app.get("/hello")
async def hello(tenant: TenantDep):
    """Return a greeting personalised to the current tenant."""
    return {
        "message": f"Hello, {tenant.name}!",
        "tenant": tenant.identifier,
        "plan": tenant.metadata.get("plan", "unknown"),
    }
