"""The parser-chain resolver.

:class:`TenantResolver` turns a request into a tenant or ``None``::

    for parser in chain (in configured order):
        candidate = parser.parse(request)
        if candidate is None:            -> PARSER_NOT_MATCHED, next parser
        tenant = store.find(normalize(candidate))
        if tenant is not None:           -> TENANT_FOUND, stop
        else:                            -> TENANT_NOT_FOUND, next parser
    chain exhausted                      -> None

A failed lookup does not stop the chain.  The chain is a priority order of
trust: a request may carry both a header and a path segment, and only one of
them may name a real tenant.

The resolver holds no per-request state; it can be shared by every request.
Memoisation lives in :class:`~fastapi_multitenancy.resolution.scope.RequestTenancy`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Generic

from fastapi_multitenancy.core.exceptions import ConfigurationError
from fastapi_multitenancy.core.types import TenantT
from fastapi_multitenancy.parsers.base import BaseRequestParser
from fastapi_multitenancy.resolution.events import (
    ResolutionEvent,
    ResolutionEventKind,
    log_resolution_event,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fastapi_multitenancy.normalization import LookupNormalizer
    from fastapi_multitenancy.request import RequestView
    from fastapi_multitenancy.resolution.events import EventSink
    from fastapi_multitenancy.storage.tenant_store import TenantStore

logger = logging.getLogger(__name__)


class ResolutionResult(Generic[TenantT]):
    """Outcome of one pass over the parser chain.

    Attributes:
        tenant: The tenant found, or ``None`` when the chain was exhausted.
        events: Diagnostic events in the order they were emitted.
    """

    __slots__ = ("events", "tenant")

    def __init__(self, tenant: TenantT | None, events: tuple[ResolutionEvent, ...]) -> None:
        self.tenant = tenant
        self.events = events

    def __repr__(self) -> str:
        return f"ResolutionResult(tenant={self.tenant!r}, events={len(self.events)})"


class TenantResolver(Generic[TenantT]):
    """Resolve a request to a tenant by walking an ordered parser chain.

    Args:
        parsers: Ordered parsers; frozen into a tuple at construction.
        store: Directory used to look up normalised candidates.
        normalizer: Canonicalises every candidate before the lookup.
        event_sink: Receives every diagnostic event.  Defaults to
            :func:`~fastapi_multitenancy.resolution.events.log_resolution_event`.

    Raises:
        ConfigurationError: When *parsers*, *store* or *normalizer* is
            ``None``, or *parsers* contains something that is not a parser.
    """

    def __init__(
        self,
        parsers: Iterable[BaseRequestParser],
        store: TenantStore[TenantT],
        normalizer: LookupNormalizer,
        event_sink: EventSink | None = None,
    ) -> None:
        if parsers is None:
            raise ConfigurationError(parameter="parsers", reason="A parser chain is required.")
        if store is None:
            raise ConfigurationError(parameter="store", reason="A tenant store is required.")
        if normalizer is None:
            raise ConfigurationError(
                parameter="normalizer",
                reason="A lookup normalizer is required.",
            )
        chain = tuple(parsers)
        for parser in chain:
            if not isinstance(parser, BaseRequestParser):
                raise ConfigurationError(
                    parameter="parsers",
                    reason=f"Expected BaseRequestParser instances, got {type(parser).__name__}.",
                )
        self._parsers = chain
        self._store = store
        self._normalizer = normalizer
        self._event_sink: EventSink = event_sink or log_resolution_event
        logger.debug("TenantResolver initialised with %d parsers", len(chain))

    @property
    def parsers(self) -> tuple[BaseRequestParser, ...]:
        return self._parsers

    @property
    def store(self) -> TenantStore[TenantT]:
        return self._store

    @property
    def normalizer(self) -> LookupNormalizer:
        return self._normalizer

    def _emit(self, events: list[ResolutionEvent], event: ResolutionEvent) -> None:
        events.append(event)
        self._event_sink(event)

    async def resolve(self, request: RequestView) -> ResolutionResult[TenantT]:
        """Run the parser chain once against *request*.

        Store failures and cancellation propagate unchanged; the caller
        decides whether to retry.

        Args:
            request: Read-only view of the current request.

        Returns:
            A :class:`ResolutionResult` carrying the tenant (or ``None``) and
            the events emitted along the way.
        """
        events: list[ResolutionEvent] = []
        display = request.display_url

        for parser in self._parsers:
            raw = parser.parse(request)
            if raw is None:
                self._emit(
                    events,
                    ResolutionEvent(
                        kind=ResolutionEventKind.PARSER_NOT_MATCHED,
                        parser=parser.name,
                        request=display,
                    ),
                )
                continue

            canonical_name = self._normalizer.normalize(raw)
            tenant = await self._store.find_by_canonical_name(canonical_name)
            if tenant is None:
                self._emit(
                    events,
                    ResolutionEvent(
                        kind=ResolutionEventKind.TENANT_NOT_FOUND,
                        parser=parser.name,
                        request=display,
                        raw_value=raw,
                        canonical_name=canonical_name,
                    ),
                )
                continue

            tenant_id = await self._store.get_tenant_id(tenant)
            self._emit(
                events,
                ResolutionEvent(
                    kind=ResolutionEventKind.TENANT_FOUND,
                    parser=parser.name,
                    request=display,
                    raw_value=raw,
                    canonical_name=canonical_name,
                    tenant_id=tenant_id,
                ),
            )
            return ResolutionResult(tenant, tuple(events))

        return ResolutionResult(None, tuple(events))


__all__ = ["ResolutionResult", "TenantResolver"]
