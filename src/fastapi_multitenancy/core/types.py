"""Domain vocabulary shared by every other module.

Enumerations are ``StrEnum`` where their values end up in JSON, logs or
database rows.  :class:`Tenant` is frozen: resolution hands the instance it
got from the store to the request untouched.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum, StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TenantStatus(StrEnum):
    """Lifecycle status of a tenant."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class ParserKind(StrEnum):
    """Request parser variants that can be declared in configuration.

    Strategies
    ----------
    DOMAIN
        The full request host name, verbatim (custom tenant domains).
    HEADER
        The value of a named HTTP header.
    QUERY
        The value of a named query-string parameter.
    HOST
        The first capture group of a regular expression applied to the host.
    PATH
        The first capture group of a regular expression applied to the path.
    """

    DOMAIN = "domain"
    HEADER = "header"
    QUERY = "query"
    HOST = "host"
    PATH = "path"


class ResolutionState(Enum):
    """Per-request resolution state.

    ``UNRESOLVED`` is the only non-terminal state.  Once a request moves to
    ``RESOLVED_TENANT`` or ``RESOLVED_NONE`` it never changes again.
    """

    UNRESOLVED = "unresolved"
    RESOLVED_TENANT = "resolved_tenant"
    RESOLVED_NONE = "resolved_none"

    @property
    def is_terminal(self) -> bool:
        return self is not ResolutionState.UNRESOLVED


# ---------------------------------------------------------------------------
# Tenant
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Tenant(BaseModel):
    """A tenant as held by a :class:`~fastapi_multitenancy.storage.TenantStore`.

    ``identifier`` is the canonical name, stored already normalised, that a
    normalised request candidate must equal.  Two tenants compare equal when
    their ``id`` matches, regardless of the other fields.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, max_length=255)
    identifier: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    status: TenantStatus = TenantStatus.ACTIVE
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def __eq__(self, other: object) -> bool:
        return self.id == other.id if isinstance(other, Tenant) else NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)


TenantT = TypeVar("TenantT", bound=Tenant)


__all__ = [
    "ParserKind",
    "ResolutionState",
    "Tenant",
    "TenantStatus",
    "TenantT",
]
