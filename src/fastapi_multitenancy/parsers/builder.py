"""Fluent registration API that assembles an immutable parser chain.

Order of registration is the order of evaluation, and therefore the order
of trust: when a request satisfies several parsers, the earliest one whose
candidate names a known tenant wins.

Example::

    parsers = (
        ParserChainBuilder()
        .add_header_parser("X-Tenant")
        .add_host_parser_for_parent(".tenants.example.com")
        .add_path_parser_for_parent("/tenants/")
        .add_query_parser("tenant")
        .add_domain_parser()
        .build()
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi_multitenancy.core.exceptions import ConfigurationError
from fastapi_multitenancy.core.types import ParserKind
from fastapi_multitenancy.parsers.base import BaseRequestParser
from fastapi_multitenancy.parsers.domain import DomainParser
from fastapi_multitenancy.parsers.header import HeaderParser
from fastapi_multitenancy.parsers.host import HostParser
from fastapi_multitenancy.parsers.path import PathParser
from fastapi_multitenancy.parsers.query import QueryParser

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fastapi_multitenancy.core.config import ParserSpec

logger = logging.getLogger(__name__)


class ParserChainBuilder:
    """Collects parsers in registration order and freezes them with :meth:`build`."""

    def __init__(self) -> None:
        self._parsers: list[BaseRequestParser] = []

    def __len__(self) -> int:
        return len(self._parsers)

    def add(self, parser: BaseRequestParser) -> ParserChainBuilder:
        """Append a custom *parser* to the chain."""
        if not isinstance(parser, BaseRequestParser):
            raise ConfigurationError(
                parameter="parser",
                reason=f"Expected a BaseRequestParser, got {type(parser).__name__}.",
            )
        self._parsers.append(parser)
        return self

    def add_domain_parser(self) -> ParserChainBuilder:
        """Match tenants by a custom domain name they have mapped."""
        return self.add(DomainParser())

    def add_header_parser(self, header_name: str) -> ParserChainBuilder:
        """Match tenants by an HTTP header, e.g. ``"X-Tenant"`` for ``X-Tenant: tenant1``."""
        return self.add(HeaderParser(header_name))

    def add_query_parser(self, query_name: str) -> ParserChainBuilder:
        """Match tenants by a query parameter, e.g. ``"tenant"`` for ``?tenant=tenant1``."""
        return self.add(QueryParser(query_name))

    def add_host_parser(self, host_pattern: str) -> ParserChainBuilder:
        """Match tenants by a regular expression on the host name."""
        return self.add(HostParser(host_pattern))

    def add_host_parser_for_parent(self, parent_host_suffix: str) -> ParserChainBuilder:
        """Match tenants by the sub-domain label in front of *parent_host_suffix*."""
        return self.add(HostParser.for_parent(parent_host_suffix))

    def add_path_parser(self, path_pattern: str) -> ParserChainBuilder:
        """Match tenants by a regular expression on the request path."""
        return self.add(PathParser(path_pattern))

    def add_path_parser_for_parent(self, parent_path_prefix: str) -> ParserChainBuilder:
        """Match tenants by the path segment that follows *parent_path_prefix*."""
        return self.add(PathParser.for_parent(parent_path_prefix))

    def add_spec(self, spec: ParserSpec) -> ParserChainBuilder:
        """Append the parser described by a configuration *spec*."""
        if spec.kind == ParserKind.DOMAIN:
            return self.add_domain_parser()
        if spec.kind == ParserKind.HEADER:
            return self.add_header_parser(spec.name or "")
        if spec.kind == ParserKind.QUERY:
            return self.add_query_parser(spec.name or "")
        if spec.kind == ParserKind.HOST:
            if spec.parent:
                return self.add_host_parser_for_parent(spec.parent)
            return self.add_host_parser(spec.pattern or "")
        if spec.kind == ParserKind.PATH:
            if spec.parent:
                return self.add_path_parser_for_parent(spec.parent)
            return self.add_path_parser(spec.pattern or "")
        raise ConfigurationError(
            parameter="parsers",
            reason=f"Unrecognised parser kind: {spec.kind!r}.",
        )

    @classmethod
    def from_specs(cls, specs: Iterable[ParserSpec]) -> ParserChainBuilder:
        """Return a builder pre-loaded with one parser per spec, in order."""
        builder = cls()
        for spec in specs:
            builder.add_spec(spec)
        return builder

    def build(self) -> tuple[BaseRequestParser, ...]:
        """Return the registered parsers as an immutable chain."""
        chain = tuple(self._parsers)
        logger.debug("Parser chain built: %s", ", ".join(map(repr, chain)) or "<empty>")
        return chain


__all__ = ["ParserChainBuilder"]
