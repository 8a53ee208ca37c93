"""Tenant resolution: the parser-chain resolver and per-request memoisation.

:class:`TenantResolver`
    Walks the parser chain once for a request and returns a
    :class:`ResolutionResult`.  Shared by all requests.

:class:`RequestTenancy`
    Per-request state holder; runs the resolver at most once and caches the
    outcome.

:class:`ResolutionEvent`
    Diagnostic record emitted at every decision point.
"""

from fastapi_multitenancy.resolution.events import (
    EventSink,
    ResolutionEvent,
    ResolutionEventKind,
    log_resolution_event,
)
from fastapi_multitenancy.resolution.resolver import ResolutionResult, TenantResolver
from fastapi_multitenancy.resolution.scope import RequestTenancy

__all__ = [
    "EventSink",
    "RequestTenancy",
    "ResolutionEvent",
    "ResolutionEventKind",
    "ResolutionResult",
    "TenantResolver",
    "log_resolution_event",
]
