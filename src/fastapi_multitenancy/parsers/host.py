r"""Host-pattern parser.

Applies a regular expression to the full host name.  The first capture group
of a match is the candidate::

    HostParser(r"^([a-z0-9][a-z0-9-]*[a-z0-9])(?:\.[a-z][a-z])?\.tenants\.example\.com$")

matches ``acme.eu.tenants.example.com`` (optional two-letter region) and
yields ``"acme"``.  For the common "one label under a parent domain" case use
:meth:`HostParser.for_parent`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi_multitenancy.parsers.base import PatternParser
from fastapi_multitenancy.parsers.patterns import host_pattern_for_parent

if TYPE_CHECKING:
    from fastapi_multitenancy.request import RequestView


class HostParser(PatternParser):
    """Return the first capture group of *host_pattern* applied to the host name.

    Args:
        host_pattern: Regular expression, matched case-insensitively.

    Raises:
        ConfigurationError: When the pattern is empty or invalid.
    """

    parameter = "host_pattern"

    def __init__(self, host_pattern: str) -> None:
        super().__init__(host_pattern)

    @classmethod
    def for_parent(cls, parent_host_suffix: str) -> HostParser:
        """Build a parser for tenants that are a sub-domain of *parent_host_suffix*.

        ``HostParser.for_parent(".tenants.example.com")`` matches
        ``tenant1.tenants.example.com`` and yields ``"tenant1"``.
        """
        return cls(host_pattern_for_parent(parent_host_suffix))

    def subject(self, request: RequestView) -> str:
        return request.host


__all__ = ["HostParser"]
