"""Dictionary-backed tenant store.

Nothing is persisted: the directory disappears with the process.  Intended
for tests, examples and local development.

Two indices are kept in step, tenants by id and tenant ids by canonical
name, so every lookup is a dict access.  Mutations take ``_lock``; lookups
do not.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
import logging
from typing import TYPE_CHECKING

from fastapi_multitenancy.core.exceptions import TenantNotFoundError
from fastapi_multitenancy.core.types import Tenant
from fastapi_multitenancy.storage.tenant_store import TenantStore

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fastapi_multitenancy.core.types import TenantStatus

logger = logging.getLogger(__name__)


class InMemoryTenantStore(TenantStore[Tenant]):
    """Tenant store held in process memory.

    Args:
        tenants: Tenants to load up front.  Duplicates raise ``ValueError``
            exactly as :meth:`create` would.
    """

    def __init__(self, tenants: Iterable[Tenant] | None = None) -> None:
        self._by_id: dict[str, Tenant] = {}
        self._by_name: dict[str, str] = {}
        self._lock = asyncio.Lock()
        for tenant in tenants or ():
            self._index(tenant)

    def _index(self, tenant: Tenant) -> None:
        for taken, key, label in (
            (self._by_id, tenant.id, "id"),
            (self._by_name, tenant.identifier, "canonical name"),
        ):
            if key in taken:
                raise ValueError(f"A tenant with {label} {key!r} already exists.")
        self._by_id[tenant.id] = tenant
        self._by_name[tenant.identifier] = tenant.id

    def _existing(self, tenant_id: str) -> Tenant:
        try:
            return self._by_id[tenant_id]
        except KeyError:
            raise TenantNotFoundError(identifier=tenant_id) from None

    async def find_by_canonical_name(self, canonical_name: str) -> Tenant | None:
        tenant_id = self._by_name.get(canonical_name)
        return None if tenant_id is None else self._by_id[tenant_id]

    async def get_by_id(self, tenant_id: str) -> Tenant:
        return self._existing(tenant_id)

    async def get_by_identifier(self, identifier: str) -> Tenant:
        if identifier not in self._by_name:
            raise TenantNotFoundError(identifier=identifier)
        return self._by_id[self._by_name[identifier]]

    async def list(
        self,
        skip: int = 0,
        limit: int = 100,
        status: TenantStatus | None = None,
    ) -> list[Tenant]:
        matching = sorted(
            (t for t in self._by_id.values() if status is None or t.status == status),
            key=lambda t: t.created_at,
            reverse=True,
        )
        return matching[skip : skip + limit]

    async def create(self, tenant: Tenant) -> Tenant:
        async with self._lock:
            self._index(tenant)
        logger.debug("Stored tenant %s as %r", tenant.id, tenant.identifier)
        return tenant

    async def update(self, tenant: Tenant) -> Tenant:
        """Replace the stored tenant with the same id.

        A changed canonical name is re-indexed; taking a name that already
        belongs to another tenant raises ``ValueError``.
        """
        async with self._lock:
            previous = self._existing(tenant.id)
            renamed = previous.identifier != tenant.identifier
            if renamed and tenant.identifier in self._by_name:
                raise ValueError(
                    f"A tenant with canonical name {tenant.identifier!r} already exists."
                )
            if renamed:
                self._by_name.pop(previous.identifier)
                self._by_name[tenant.identifier] = tenant.id
            stored = tenant.model_copy(update={"updated_at": datetime.now(UTC)})
            self._by_id[tenant.id] = stored
        return stored

    async def delete(self, tenant_id: str) -> None:
        async with self._lock:
            removed = self._existing(tenant_id)
            del self._by_id[tenant_id], self._by_name[removed.identifier]
        logger.debug("Removed tenant %s", tenant_id)

    def clear(self) -> None:
        """Drop every tenant.  Handy between tests."""
        self._by_id.clear()
        self._by_name.clear()


__all__ = ["InMemoryTenantStore"]
