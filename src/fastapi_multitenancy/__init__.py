"""fastapi-multitenancy — per-request tenant resolution for FastAPI.

Every request is resolved to at most one tenant by an ordered chain of
parsers.  Each parser extracts a candidate (a header, a query parameter, the
host name, a host or path pattern); the candidate is normalised and looked
up in a tenant store.  The first parser whose candidate names a known tenant
wins.  Resolution runs at most once per request and is cached for every
consumer of that request.

Quick start
-----------
.. code-block:: python

    from fastapi import FastAPI
    from fastapi_multitenancy import (
        ParserSpec,
        TenancyConfig,
        TenancyManager,
        TenancyMiddleware,
    )
    from fastapi_multitenancy.dependencies import TenantDep

    config = TenancyConfig(
        parsers=[
            ParserSpec(kind="header", name="X-Tenant"),
            ParserSpec(kind="host", parent=".tenants.example.com"),
        ],
        database_url="sqlite+aiosqlite:///tenants.db",
    )
    manager = TenancyManager(config)  # SQLAlchemyTenantStore built from database_url

    app = FastAPI(lifespan=manager.create_lifespan())
    app.add_middleware(TenancyMiddleware, manager=manager)

    @app.get("/whoami")
    async def whoami(tenant: TenantDep):
        return {"tenant": tenant.identifier}

Public surface
--------------
The symbols exported below form the stable public API.  Anything not listed
here is an implementation detail and may change between minor versions.
"""

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from fastapi_multitenancy.core.config import ParserSpec, TenancyConfig
from fastapi_multitenancy.core.context import (
    TenantContext,
    get_current_tenant,
    get_current_tenant_optional,
)
from fastapi_multitenancy.core.exceptions import (
    ConfigurationError,
    TenancyError,
    TenantNotFoundError,
    TenantResolutionError,
)
from fastapi_multitenancy.core.types import (
    ParserKind,
    ResolutionState,
    Tenant,
    TenantStatus,
)
from fastapi_multitenancy.manager import TenancyManager
from fastapi_multitenancy.middleware.tenancy import TenancyMiddleware
from fastapi_multitenancy.normalization import (
    CaseFoldingNormalizer,
    LookupNormalizer,
    UpperInvariantNormalizer,
)
from fastapi_multitenancy.parsers import (
    BaseRequestParser,
    DomainParser,
    HeaderParser,
    HostParser,
    ParserChainBuilder,
    PathParser,
    QueryParser,
)
from fastapi_multitenancy.request import RequestView
from fastapi_multitenancy.resolution import (
    RequestTenancy,
    ResolutionEvent,
    ResolutionEventKind,
    TenantResolver,
)
from fastapi_multitenancy.storage import (
    InMemoryTenantStore,
    SQLAlchemyTenantStore,
    TenantStore,
)

try:
    __version__: str = _pkg_version("fastapi-multitenancy")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0.dev0"

__all__ = [
    # Version
    "__version__",
    # Configuration
    "ParserSpec",
    "TenancyConfig",
    # Manager
    "TenancyManager",
    # Domain types
    "ParserKind",
    "ResolutionState",
    "Tenant",
    "TenantStatus",
    # Request
    "RequestView",
    # Context
    "TenantContext",
    "get_current_tenant",
    "get_current_tenant_optional",
    # Exceptions
    "ConfigurationError",
    "TenancyError",
    "TenantNotFoundError",
    "TenantResolutionError",
    # Parsers
    "BaseRequestParser",
    "DomainParser",
    "HeaderParser",
    "HostParser",
    "ParserChainBuilder",
    "PathParser",
    "QueryParser",
    # Normalisation
    "CaseFoldingNormalizer",
    "LookupNormalizer",
    "UpperInvariantNormalizer",
    # Resolution
    "RequestTenancy",
    "ResolutionEvent",
    "ResolutionEventKind",
    "TenantResolver",
    # Storage
    "InMemoryTenantStore",
    "SQLAlchemyTenantStore",
    "TenantStore",
    # Middleware
    "TenancyMiddleware",
]
