"""Tenant directories.

:class:`TenantStore` is the lookup contract the resolver depends on.
:class:`InMemoryTenantStore` suits tests and development;
:class:`SQLAlchemyTenantStore` persists tenants in any database with an
async SQLAlchemy driver.
"""

from fastapi_multitenancy.storage.database import SQLAlchemyTenantStore
from fastapi_multitenancy.storage.memory import InMemoryTenantStore
from fastapi_multitenancy.storage.tenant_store import TenantStore

__all__ = [
    "InMemoryTenantStore",
    "SQLAlchemyTenantStore",
    "TenantStore",
]
