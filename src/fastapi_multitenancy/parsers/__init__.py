"""Request parsers.

Each parser extracts a raw tenant candidate from a request, or returns
``None`` when it does not apply.  All parsers implement
:class:`~fastapi_multitenancy.parsers.base.BaseRequestParser`.

Built-in parsers
----------------
:class:`DomainParser`
    The full host name (custom tenant domains).

:class:`HeaderParser`
    A named HTTP header (e.g. ``X-Tenant``).

:class:`QueryParser`
    A named query parameter (e.g. ``?tenant=``).

:class:`HostParser`
    First capture group of a pattern applied to the host name
    (e.g. ``acme.tenants.example.com`` → ``"acme"``).

:class:`PathParser`
    First capture group of a pattern applied to the path
    (e.g. ``/tenants/acme/orders`` → ``"acme"``).

:class:`ParserChainBuilder`
    Assemble an ordered, immutable chain of parsers.
"""

from fastapi_multitenancy.parsers.base import BaseRequestParser, PatternParser
from fastapi_multitenancy.parsers.builder import ParserChainBuilder
from fastapi_multitenancy.parsers.domain import DomainParser
from fastapi_multitenancy.parsers.header import HeaderParser
from fastapi_multitenancy.parsers.host import HostParser
from fastapi_multitenancy.parsers.path import PathParser
from fastapi_multitenancy.parsers.patterns import (
    host_pattern_for_parent,
    path_pattern_for_parent,
)
from fastapi_multitenancy.parsers.query import QueryParser

__all__ = [
    "BaseRequestParser",
    "DomainParser",
    "HeaderParser",
    "HostParser",
    "ParserChainBuilder",
    "PathParser",
    "PatternParser",
    "QueryParser",
    "host_pattern_for_parent",
    "path_pattern_for_parent",
]
