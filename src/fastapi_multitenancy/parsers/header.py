"""Header parser.

Reads the tenant candidate from a named HTTP header::

    GET /api/users HTTP/1.1
    Host: api.example.com
    X-Tenant: acme-corp

Header names are matched case-insensitively (RFC 7230 §3.2).  When the
header is repeated, the first value is used.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi_multitenancy.core.exceptions import ConfigurationError
from fastapi_multitenancy.parsers.base import BaseRequestParser

if TYPE_CHECKING:
    from fastapi_multitenancy.request import RequestView


class HeaderParser(BaseRequestParser):
    """Return the value of a configured header, or ``None`` if absent.

    Args:
        header_name: Name of the header to read (e.g. ``"X-Tenant"``).

    Raises:
        ConfigurationError: When *header_name* is empty.
    """

    def __init__(self, header_name: str) -> None:
        if not header_name:
            raise ConfigurationError(
                parameter="header_name",
                reason="A header name is required.",
            )
        self._header_name = header_name

    @property
    def header_name(self) -> str:
        return self._header_name

    def parse(self, request: RequestView) -> str | None:
        return request.header(self._header_name)

    def __repr__(self) -> str:
        return f"{self.name}({self._header_name!r})"


__all__ = ["HeaderParser"]
