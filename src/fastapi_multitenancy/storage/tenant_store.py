"""The tenant directory interface.

``TenantStore`` defines the contract the resolver depends on, plus the CRUD
operations applications use to maintain the directory.  All concrete
implementations (in-memory, SQLAlchemy) implement this interface.

Lookup contract
---------------
The resolver calls exactly two methods:

* :meth:`TenantStore.find_by_canonical_name` — returns the tenant whose
  canonical name equals the normalised candidate, or ``None``.
* :meth:`TenantStore.get_tenant_id` — returns the id reported in
  diagnostics.

"Not found" is a normal answer and is returned as ``None``.  Any other
failure (connection lost, timeout, cancellation) must propagate unchanged:
masking it as ``None`` would make the request resolve to "no tenant" for
the rest of its lifetime.

Generic design
--------------
``TenantStore`` is generic over ``TenantT`` (bound to ``Tenant``) so an
application can store its own ``Tenant`` subclass::

    class AppTenant(Tenant):
        plan: str

    class AppTenantStore(TenantStore[AppTenant]):
        async def get_by_identifier(self, identifier: str) -> AppTenant: ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic

from fastapi_multitenancy.core.exceptions import TenantNotFoundError
from fastapi_multitenancy.core.types import TenantT

if TYPE_CHECKING:
    from fastapi_multitenancy.core.types import TenantStatus


class TenantStore(ABC, Generic[TenantT]):
    """Abstract base class for tenant directories.

    Implementations must be:

    - async throughout, since one instance serves every request concurrently;
    - raising ``TenantNotFoundError`` from ``get_*`` methods, while
      ``find_*`` methods return ``None``.

    Identifiers are stored exactly as given.  Store canonical names (the
    output of the configured normaliser) so that lookups match.
    """

    #####################################################################
    # Lookup contract
    #####################################################################

    async def find_by_canonical_name(self, canonical_name: str) -> TenantT | None:
        """Return the tenant whose identifier is *canonical_name*, or ``None``.

        The default implementation delegates to :meth:`get_by_identifier`
        and maps only :class:`TenantNotFoundError` to ``None``.

        Args:
            canonical_name: A normalised candidate.

        Returns:
            The matching tenant, or ``None``.
        """
        try:
            return await self.get_by_identifier(canonical_name)
        except TenantNotFoundError:
            return None

    async def get_tenant_id(self, tenant: TenantT) -> str:
        """Return the diagnostic id of *tenant*."""
        return tenant.id

    #####################################################################
    # Directory maintenance
    #####################################################################

    @abstractmethod
    async def get_by_id(self, tenant_id: str) -> TenantT:
        """Tenant with the given opaque id; ``TenantNotFoundError`` if absent."""

    @abstractmethod
    async def get_by_identifier(self, identifier: str) -> TenantT:
        """Tenant with the given canonical name; ``TenantNotFoundError`` if absent."""

    @abstractmethod
    async def create(self, tenant: TenantT) -> TenantT:
        """Add ``tenant`` to the directory.

        Raises ``ValueError`` if its id or canonical name is taken, and
        :class:`~fastapi_multitenancy.core.exceptions.TenancyError` for
        backend failures.
        """

    @abstractmethod
    async def update(self, tenant: TenantT) -> TenantT:
        """Overwrite the stored tenant sharing ``tenant.id``.

        Tenants are frozen, so pass a modified copy such as
        ``tenant.model_copy(update={"name": "Acme Ltd"})``.  Unknown ids raise
        ``TenantNotFoundError``.
        """

    @abstractmethod
    async def delete(self, tenant_id: str) -> None:
        """Drop a tenant; ``TenantNotFoundError`` if the id is unknown."""

    @abstractmethod
    async def list(
        self,
        skip: int = 0,
        limit: int = 100,
        status: TenantStatus | None = None,
    ) -> list[TenantT]:
        """Page through tenants, newest first, optionally only those in ``status``."""

    async def initialize(self) -> None:
        """Called once at startup.  Does nothing unless overridden."""

    async def close(self) -> None:
        """Called once at shutdown.  Does nothing unless overridden."""


__all__ = ["TenantStore"]
