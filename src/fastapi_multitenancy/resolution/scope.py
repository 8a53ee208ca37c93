"""Per-request resolution state with at-most-once semantics.

One :class:`RequestTenancy` is created for every request and discarded when
the request ends.  It starts ``UNRESOLVED`` and moves to a terminal state
(``RESOLVED_TENANT`` or ``RESOLVED_NONE``) the first time any consumer asks
for the tenant.  Every later call returns the cached outcome without
touching the parsers or the store.

Concurrency
-----------
Handlers of the same request may ask for the tenant concurrently (for
example from dependencies that FastAPI runs in parallel, or tasks spawned by
a handler).  An :class:`asyncio.Lock` guards the ``UNRESOLVED → terminal``
transition so the parser chain runs at most once; waiters re-check the
state after acquiring the lock and return the cached outcome.

Failure and cancellation
------------------------
If the resolver raises — a store failure, or :class:`asyncio.CancelledError`
when the request is aborted mid-lookup — the state stays ``UNRESOLVED`` and
the exception propagates to the caller.  A later call re-runs the full chain.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Generic

from fastapi_multitenancy.core.exceptions import TenantNotFoundError
from fastapi_multitenancy.core.types import ResolutionState, TenantT

if TYPE_CHECKING:
    from fastapi_multitenancy.request import RequestView
    from fastapi_multitenancy.resolution.events import ResolutionEvent
    from fastapi_multitenancy.resolution.resolver import TenantResolver

logger = logging.getLogger(__name__)


class RequestTenancy(Generic[TenantT]):
    """Memoised tenant resolution for a single request.

    Args:
        resolver: The shared resolver of the pipeline.
        request: View of the request this state belongs to.

    Example::

        tenancy = RequestTenancy(resolver, RequestView.from_request(request))
        tenant = await tenancy.get_tenant()   # runs the chain
        tenant = await tenancy.get_tenant()   # cached, no I/O
    """

    def __init__(self, resolver: TenantResolver[TenantT], request: RequestView) -> None:
        self._resolver = resolver
        self._request = request
        self._state = ResolutionState.UNRESOLVED
        self._tenant: TenantT | None = None
        self._events: tuple[ResolutionEvent, ...] = ()
        self._lock = asyncio.Lock()

    @property
    def request(self) -> RequestView:
        return self._request

    @property
    def state(self) -> ResolutionState:
        return self._state

    @property
    def is_resolved(self) -> bool:
        """``True`` once the request has reached a terminal state."""
        return self._state.is_terminal

    @property
    def tenant(self) -> TenantT | None:
        """The resolved tenant; ``None`` while unresolved or when resolved to none."""
        return self._tenant

    @property
    def events(self) -> tuple[ResolutionEvent, ...]:
        """Diagnostic events of the resolution that reached the terminal state."""
        return self._events

    async def get_tenant(self) -> TenantT | None:
        """Return the request's tenant, resolving it on first use.

        Returns:
            The tenant, or ``None`` when no parser produced a known tenant.

        Raises:
            asyncio.CancelledError: When the request is cancelled during a
                lookup.  Nothing is cached.
            Exception: Any store failure, unchanged.  Nothing is cached.
        """
        if self._state.is_terminal:
            return self._tenant

        async with self._lock:
            if not self._state.is_terminal:
                result = await self._resolver.resolve(self._request)
                self._tenant = result.tenant
                self._events = result.events
                self._state = (
                    ResolutionState.RESOLVED_TENANT
                    if result.tenant is not None
                    else ResolutionState.RESOLVED_NONE
                )
                logger.debug(
                    "Request %s resolved: %s",
                    self._request.display_url,
                    self._state.value,
                )
        return self._tenant

    async def require_tenant(self) -> TenantT:
        """Return the request's tenant, raising when resolution found none.

        Raises:
            TenantNotFoundError: When the request resolved to no tenant.
        """
        tenant = await self.get_tenant()
        if tenant is None:
            raise TenantNotFoundError(
                details={"request": self._request.display_url},
            )
        return tenant

    def __repr__(self) -> str:
        return f"RequestTenancy(state={self._state.value}, request={self._request.display_url!r})"


__all__ = ["RequestTenancy"]
