"""``TenancyManager`` — wires configuration into a resolution pipeline.

The manager owns the pieces shared by every request:

1. The immutable parser chain (from ``config.parsers`` or passed explicitly).
2. The lookup normaliser.
3. The :class:`~fastapi_multitenancy.resolution.resolver.TenantResolver`.
4. The tenant store and its startup/shutdown lifecycle.

Per-request state is created with :meth:`TenancyManager.request_tenancy`,
which the middleware calls once per request.

Typical setup::

    from fastapi import FastAPI
    from fastapi_multitenancy import (
        InMemoryTenantStore,
        ParserSpec,
        TenancyConfig,
        TenancyManager,
        TenancyMiddleware,
    )

    config = TenancyConfig(
        parsers=[
            ParserSpec(kind="header", name="X-Tenant"),
            ParserSpec(kind="host", parent=".tenants.example.com"),
        ],
        excluded_paths=["/health"],
    )
    manager = TenancyManager(config, InMemoryTenantStore())

    app = FastAPI(lifespan=manager.create_lifespan())
    app.add_middleware(TenancyMiddleware, manager=manager)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
import secrets
from typing import TYPE_CHECKING, Any

from fastapi_multitenancy.core.exceptions import ConfigurationError
from fastapi_multitenancy.core.types import Tenant, TenantStatus
from fastapi_multitenancy.normalization import get_normalizer
from fastapi_multitenancy.parsers.builder import ParserChainBuilder
from fastapi_multitenancy.resolution.resolver import TenantResolver
from fastapi_multitenancy.resolution.scope import RequestTenancy
from fastapi_multitenancy.storage.database import SQLAlchemyTenantStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from fastapi_multitenancy.core.config import TenancyConfig
    from fastapi_multitenancy.normalization import LookupNormalizer
    from fastapi_multitenancy.parsers.base import BaseRequestParser
    from fastapi_multitenancy.request import RequestView
    from fastapi_multitenancy.resolution.events import EventSink
    from fastapi_multitenancy.storage.tenant_store import TenantStore

logger = logging.getLogger(__name__)


def generate_tenant_id(prefix: str = "tenant") -> str:
    """Return an opaque, URL-safe tenant id of the form ``"{prefix}-{random}"``."""
    return f"{prefix}-{secrets.token_urlsafe(12)}"


class TenancyManager:
    """Central orchestrator wiring parsers, normaliser, resolver and store.

    Args:
        config: Pipeline configuration.
        store: Tenant directory.  When omitted, a
            :class:`~fastapi_multitenancy.storage.database.SQLAlchemyTenantStore`
            is built from ``config.database_url``.
        parsers: Explicit parser chain.  Overrides ``config.parsers`` when
            given (use :class:`~fastapi_multitenancy.parsers.builder.ParserChainBuilder`
            for parsers that cannot be declared in configuration).
        normalizer: Explicit normaliser.  Overrides ``config.normalizer``.
        event_sink: Receives resolution diagnostics (default: DEBUG logging).

    Attributes:
        config: The ``TenancyConfig`` this manager was constructed with.
        store: The tenant store.
        normalizer: The active lookup normaliser.
        resolver: The shared resolver.

    Raises:
        ConfigurationError: When *config* is missing, when neither *store*
            nor ``config.database_url`` is given, or when a parser
            declared in configuration cannot be built.
    """

    def __init__(
        self,
        config: TenancyConfig,
        store: TenantStore[Tenant] | None = None,
        parsers: Iterable[BaseRequestParser] | None = None,
        normalizer: LookupNormalizer | None = None,
        event_sink: EventSink | None = None,
    ) -> None:
        if config is None:
            raise ConfigurationError(parameter="config", reason="A TenancyConfig is required.")
        if store is None:
            if config.database_url is None:
                raise ConfigurationError(
                    parameter="store",
                    reason="Pass a tenant store or set database_url.",
                )
            store = SQLAlchemyTenantStore(config.database_url)

        self.config = config
        self.store = store
        self.normalizer: LookupNormalizer = (
            normalizer if normalizer is not None else get_normalizer(config.normalizer)
        )
        chain = (
            tuple(parsers)
            if parsers is not None
            else ParserChainBuilder.from_specs(config.parsers).build()
        )
        self.resolver: TenantResolver[Tenant] = TenantResolver(
            chain,
            store,
            self.normalizer,
            event_sink=event_sink,
        )
        logger.info(
            "TenancyManager created parsers=[%s] normalizer=%s store=%s",
            ", ".join(p.name for p in chain),
            type(self.normalizer).__name__,
            type(store).__name__,
        )

    #############
    # Lifecycle #
    #############

    async def initialize(self) -> None:
        """Initialise the store.  Safe to call more than once."""
        await self.store.initialize()
        logger.info("TenancyManager initialised store=%s", type(self.store).__name__)

    async def close(self) -> None:
        """Release store resources."""
        await self.store.close()
        logger.info("TenancyManager shut down cleanly")

    def create_lifespan(self) -> Any:
        """Return an async context manager suitable for FastAPI's ``lifespan`` parameter.

        Example::

            app = FastAPI(lifespan=manager.create_lifespan())
        """

        @asynccontextmanager
        async def _lifespan(app: Any) -> AsyncIterator[None]:
            await self.initialize()
            try:
                yield
            finally:
                await self.close()

        return _lifespan

    ######################
    # Per-request wiring #
    ######################

    def request_tenancy(self, request: RequestView) -> RequestTenancy[Tenant]:
        """Return fresh, unresolved tenancy state for *request*."""
        return RequestTenancy(self.resolver, request)

    ################################
    # High-level tenant management #
    ################################

    async def register_tenant(
        self,
        canonical_name: str,
        name: str,
        metadata: dict[str, Any] | None = None,
        status: TenantStatus = TenantStatus.ACTIVE,
    ) -> Tenant:
        """Create a tenant whose identifier is *canonical_name* after normalisation.

        Normalising here with the same normaliser the resolver uses keeps
        stored identifiers and lookup keys in the same canonical form::

            await manager.register_tenant("Acme-Corp", "Acme Corporation")
            # stored identifier: "acme-corp"

        Raises:
            ValueError: When *canonical_name* is blank or already taken.
        """
        identifier = self.normalizer.normalize(canonical_name)
        if not identifier:
            msg = f"Invalid tenant canonical name {canonical_name!r}."
            raise ValueError(msg)

        tenant = Tenant(
            id=generate_tenant_id(),
            identifier=identifier,
            name=name,
            status=status,
            metadata=metadata or {},
        )
        created = await self.store.create(tenant)
        logger.info("Registered tenant id=%s identifier=%s", created.id, created.identifier)
        return created


__all__ = ["TenancyManager", "generate_tenant_id"]
