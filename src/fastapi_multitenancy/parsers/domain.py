"""Custom-domain parser.

A tenant may map its own domain (``portal.acme.com``) to the service.  The
full host name is the candidate; the store decides whether it belongs to a
tenant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi_multitenancy.parsers.base import BaseRequestParser

if TYPE_CHECKING:
    from fastapi_multitenancy.request import RequestView


class DomainParser(BaseRequestParser):
    """Return the request's full host name, verbatim."""

    def parse(self, request: RequestView) -> str | None:
        return request.host or None


__all__ = ["DomainParser"]
