"""FastAPI dependency aliases for the current request's tenancy.

Annotated shorthand::

    from fastapi_multitenancy.dependencies import TenantDep, TenantOptionalDep

    @app.get("/orders")
    async def list_orders(tenant: TenantDep):
        ...

    @app.get("/status")
    async def status(tenant: TenantOptionalDep):
        return {"tenant": tenant.id if tenant else None}

Routes that need the diagnostics of the resolution can inject the whole
per-request state::

    @app.get("/debug/tenancy")
    async def debug(tenancy: RequestTenancyDep):
        await tenancy.get_tenant()
        return [event.describe() for event in tenancy.events]
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends

from fastapi_multitenancy.core.context import (
    TenantContext,
    get_current_tenant,
    get_current_tenant_optional,
)
from fastapi_multitenancy.core.types import Tenant
from fastapi_multitenancy.resolution.scope import RequestTenancy


async def get_request_tenancy() -> RequestTenancy[Any]:
    """FastAPI dependency — return the request's tenancy state without resolving it.

    Raises:
        TenantResolutionError: When the route bypassed the middleware.
    """
    return TenantContext.require_current()


#: Annotated type alias for the current tenant dependency.
TenantDep = Annotated[Tenant, Depends(get_current_tenant)]

#: Annotated type alias for the optional tenant dependency.
TenantOptionalDep = Annotated[Tenant | None, Depends(get_current_tenant_optional)]

#: Annotated type alias for the per-request tenancy state.
RequestTenancyDep = Annotated[RequestTenancy[Any], Depends(get_request_tenancy)]


__all__ = [
    "RequestTenancyDep",
    "TenantDep",
    "TenantOptionalDep",
    "get_request_tenancy",
]
