"""Async-safe request tenancy context using :mod:`contextvars`.

The middleware binds one
:class:`~fastapi_multitenancy.resolution.scope.RequestTenancy` per request
to a :class:`~contextvars.ContextVar`.  Each asyncio task handling a request
sees its own binding, and tasks spawned by a handler inherit it, so every
consumer of the same request shares the same memoised resolution.

Public surface
--------------
:class:`TenantContext`
    Static namespace to bind, read and reset the current request tenancy.

:func:`get_current_tenant`
    FastAPI dependency returning the current tenant or raising
    :class:`~fastapi_multitenancy.core.exceptions.TenantNotFoundError`.

:func:`get_current_tenant_optional`
    FastAPI dependency returning the current tenant or ``None``.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Any

from fastapi_multitenancy.core.exceptions import TenantResolutionError

if TYPE_CHECKING:
    from fastapi_multitenancy.core.types import Tenant
    from fastapi_multitenancy.resolution.scope import RequestTenancy

_tenancy_ctx: ContextVar[RequestTenancy[Any] | None] = ContextVar(
    "request_tenancy", default=None
)


class TenantContext:
    """Namespace for the per-request tenancy binding.

    All methods are static; this class is never instantiated.

    Usage in middleware::

        token = TenantContext.bind(RequestTenancy(resolver, view))
        try:
            await app(scope, receive, send)
        finally:
            TenantContext.reset(token)

    Usage in handlers::

        tenant = await TenantContext.get_tenant()            # raises if none
        tenant = await TenantContext.get_tenant_optional()   # may be None
    """

    @staticmethod
    def bind(tenancy: RequestTenancy[Any]) -> Token[RequestTenancy[Any] | None]:
        """Make *tenancy* the current request's tenancy state.

        Returns:
            A :class:`~contextvars.Token` to pass to :meth:`reset`.
        """
        return _tenancy_ctx.set(tenancy)

    @staticmethod
    def reset(token: Token[RequestTenancy[Any] | None]) -> None:
        """Restore the binding captured in *token*."""
        _tenancy_ctx.reset(token)

    @staticmethod
    def clear() -> None:
        """Remove any binding from the current context."""
        _tenancy_ctx.set(None)

    @staticmethod
    def current() -> RequestTenancy[Any] | None:
        """Return the bound request tenancy, or ``None`` outside a request."""
        return _tenancy_ctx.get()

    @staticmethod
    def require_current() -> RequestTenancy[Any]:
        """Return the bound request tenancy.

        Raises:
            TenantResolutionError: When called outside a tenancy-aware
                request (the route bypassed the middleware).
        """
        tenancy = _tenancy_ctx.get()
        if tenancy is None:
            raise TenantResolutionError(
                reason=(
                    "No request tenancy is bound to the current execution context. "
                    "Ensure the request passed through TenancyMiddleware."
                ),
                strategy="context",
            )
        return tenancy

    @staticmethod
    async def get_tenant() -> Tenant:
        """Return the current tenant, resolving it on first use.

        Raises:
            TenantResolutionError: Outside a tenancy-aware request.
            TenantNotFoundError: When the request resolved to no tenant.
        """
        return await TenantContext.require_current().require_tenant()

    @staticmethod
    async def get_tenant_optional() -> Tenant | None:
        """Return the current tenant, or ``None``.

        ``None`` covers both a request that resolved no tenant and code
        running with no request tenancy bound, such as an excluded path.
        """
        tenancy = _tenancy_ctx.get()
        if tenancy is None:
            return None
        return await tenancy.get_tenant()

    class scope:
        """Context manager binding a request tenancy for a block.

        Useful for background jobs and tests::

            async with TenantContext.scope(tenancy):
                tenant = await TenantContext.get_tenant()
        """

        def __init__(self, tenancy: RequestTenancy[Any]) -> None:
            self._tenancy = tenancy
            self._token: Token[RequestTenancy[Any] | None] | None = None

        async def __aenter__(self) -> RequestTenancy[Any]:
            self._token = _tenancy_ctx.set(self._tenancy)
            return self._tenancy

        async def __aexit__(
            self,
            exc_type: type[BaseException] | None,
            exc_val: BaseException | None,
            exc_tb: Any,
        ) -> None:
            if self._token is not None:
                _tenancy_ctx.reset(self._token)

        def __enter__(self) -> RequestTenancy[Any]:
            self._token = _tenancy_ctx.set(self._tenancy)
            return self._tenancy

        def __exit__(
            self,
            exc_type: type[BaseException] | None,
            exc_val: BaseException | None,
            exc_tb: Any,
        ) -> None:
            if self._token is not None:
                _tenancy_ctx.reset(self._token)


# ---------------------------------------------------------------------------
# FastAPI dependency functions
# ---------------------------------------------------------------------------


async def get_current_tenant() -> Tenant:
    """FastAPI dependency — return the current tenant or raise.

    Inject via ``Depends`` in any route that requires a tenant::

        @app.get("/users")
        async def list_users(tenant: Tenant = Depends(get_current_tenant)):
            ...

    Raises:
        TenantNotFoundError: When the request resolved to no tenant.
        TenantResolutionError: When the route bypassed the middleware.
    """
    return await TenantContext.get_tenant()


async def get_current_tenant_optional() -> Tenant | None:
    """FastAPI dependency — return the current tenant or ``None``.

    Use in routes that serve both tenant-scoped and global requests::

        @app.get("/status")
        async def status(tenant: Tenant | None = Depends(get_current_tenant_optional)):
            ...
    """
    return await TenantContext.get_tenant_optional()


__all__ = [
    "TenantContext",
    "get_current_tenant",
    "get_current_tenant_optional",
]
