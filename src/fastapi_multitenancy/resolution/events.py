"""Diagnostic events emitted while a request is resolved.

The resolver does not log inline.  It records one :class:`ResolutionEvent`
per decision and hands each one to an *event sink*, a plain callable.  The
default sink, :func:`log_resolution_event`, writes the event to this
module's logger at ``DEBUG``; tests pass a list's ``append`` instead and
assert on the values.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
import logging

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class ResolutionEventKind(StrEnum):
    """Decision points of the resolution algorithm."""

    PARSER_NOT_MATCHED = "parser_not_matched"
    TENANT_FOUND = "tenant_found"
    TENANT_NOT_FOUND = "tenant_not_found"


class ResolutionEvent(BaseModel):
    """One diagnostic record.

    Attributes:
        kind: Which decision was taken.
        parser: Name of the parser being evaluated.
        request: Display URL of the request.
        raw_value: Candidate as extracted by the parser (``None`` when the
            parser did not match).
        canonical_name: Normalised candidate used for the lookup.
        tenant_id: Diagnostic id of the tenant found.
    """

    model_config = ConfigDict(frozen=True)

    kind: ResolutionEventKind
    parser: str
    request: str
    raw_value: str | None = None
    canonical_name: str | None = None
    tenant_id: str | None = None

    def describe(self) -> str:
        """Return a one-line human-readable description."""
        if self.kind == ResolutionEventKind.TENANT_FOUND:
            return (
                f"Tenant {self.tenant_id} found by {self.parser} for value "
                f"{self.canonical_name} in request {self.request}."
            )
        if self.kind == ResolutionEventKind.TENANT_NOT_FOUND:
            return (
                f"Tenant not found by {self.parser} for value "
                f"{self.canonical_name} in request {self.request}."
            )
        return f"Tenant not matched by {self.parser} in request {self.request}."


EventSink = Callable[[ResolutionEvent], None]


def log_resolution_event(event: ResolutionEvent) -> None:
    """Default sink: log *event* at ``DEBUG`` with its fields as ``extra``."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(
        "%s",
        event.describe(),
        extra={"tenancy_event": event.model_dump(mode="json")},
    )


__all__ = [
    "EventSink",
    "ResolutionEvent",
    "ResolutionEventKind",
    "log_resolution_event",
]
