"""Configuration management for fastapi-multitenancy.

``TenancyConfig`` is a ``pydantic_settings.BaseSettings`` model that reads its
values from environment variables (prefix ``TENANCY_``), an optional ``.env``
file, or explicit keyword arguments.

The parser chain is declared as an ordered list of :class:`ParserSpec`
entries.  In the environment it is written as JSON::

    TENANCY_PARSERS='[
        {"kind": "header", "name": "X-Tenant"},
        {"kind": "host", "parent": ".tenants.example.com"},
        {"kind": "path", "parent": "/tenants/"},
        {"kind": "query", "name": "tenant"},
        {"kind": "domain"}
    ]'
    TENANCY_NORMALIZER=casefold
    TENANCY_EXCLUDED_PATHS='["/health", "/docs"]'

Every spec is checked at construction time, so a misconfigured pipeline
raises ``ValidationError`` during startup rather than at the first request.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fastapi_multitenancy.core.types import ParserKind


class ParserSpec(BaseModel):
    """Declarative description of one parser in the chain.

    Attributes:
        kind: The parser variant.
        name: Header or query parameter name (``header`` / ``query``).
        pattern: Regular expression (``host`` / ``path``).
        parent: Parent host suffix or path prefix, the convenience
            alternative to *pattern* (``host`` / ``path``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ParserKind
    name: str | None = None
    pattern: str | None = None
    parent: str | None = None

    @model_validator(mode="after")
    def _validate_arguments(self) -> ParserSpec:
        """Require exactly the arguments the parser kind needs."""
        if self.kind in (ParserKind.HEADER, ParserKind.QUERY):
            if not self.name:
                msg = f"{self.kind.value} parser requires 'name'."
                raise ValueError(msg)
            if self.pattern or self.parent:
                msg = f"{self.kind.value} parser accepts only 'name'."
                raise ValueError(msg)
        elif self.kind in (ParserKind.HOST, ParserKind.PATH):
            if bool(self.pattern) == bool(self.parent):
                msg = f"{self.kind.value} parser requires exactly one of 'pattern' or 'parent'."
                raise ValueError(msg)
            if self.name:
                msg = f"{self.kind.value} parser does not accept 'name'."
                raise ValueError(msg)
            if self.pattern:
                try:
                    re.compile(self.pattern)
                except re.error as exc:
                    msg = f"Invalid {self.kind.value} pattern {self.pattern!r}: {exc}"
                    raise ValueError(msg) from exc
        elif self.name or self.pattern or self.parent:
            msg = "domain parser takes no arguments."
            raise ValueError(msg)
        return self


class TenancyConfig(BaseSettings):
    """Central configuration for the resolution pipeline.

    Example — programmatic::

        config = TenancyConfig(
            parsers=[
                ParserSpec(kind="header", name="X-Tenant"),
                ParserSpec(kind="path", parent="/tenants/"),
            ],
        )

    Example — environment variables::

        # .env
        TENANCY_PARSERS=[{"kind": "header", "name": "X-Tenant"}]
        TENANCY_REJECT_UNRESOLVED=true

        config = TenancyConfig()  # reads from environment / .env
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __str__(self) -> str:
        """Return a masked string representation safe for logging."""
        text = super().__repr__()
        return re.sub(r"://([^:]+):([^@]+)@", r"://\1:***@", text)

    ###############
    # Parser chain #
    ###############

    parsers: list[ParserSpec] = Field(
        default_factory=list,
        description="Ordered parser chain; earlier parsers take priority.",
    )

    normalizer: Literal["casefold", "upper"] = Field(
        default="casefold",
        description="Lookup normaliser applied to every candidate before the store lookup.",
    )

    ##############
    # Middleware #
    ##############

    excluded_paths: list[str] = Field(
        default_factory=list,
        description="Path prefixes that bypass tenancy (health checks, docs).",
    )

    resolve_eagerly: bool = Field(
        default=True,
        description=(
            "Resolve the tenant in the middleware before calling the app. "
            "When False, resolution runs on first access."
        ),
    )

    reject_unresolved: bool = Field(
        default=False,
        description="Answer 404 when eager resolution finds no tenant.",
    )

    #########
    # Store #
    #########

    database_url: str | None = Field(
        default=None,
        description=(
            "Async SQLAlchemy URL.  TenancyManager builds a SQLAlchemyTenantStore "
            "from it when no store is passed (e.g. 'sqlite+aiosqlite:///tenants.db')."
        ),
    )

    @model_validator(mode="after")
    def _validate_cross_field_consistency(self) -> TenancyConfig:
        """Reject option combinations that can never take effect."""
        if self.reject_unresolved and not self.resolve_eagerly:
            msg = "reject_unresolved=True requires resolve_eagerly=True."
            raise ValueError(msg)
        return self


__all__ = ["ParserSpec", "TenancyConfig"]
