"""Query-string parser, e.g. ``?tenant=acme-corp``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi_multitenancy.core.exceptions import ConfigurationError
from fastapi_multitenancy.parsers.base import BaseRequestParser

if TYPE_CHECKING:
    from fastapi_multitenancy.request import RequestView


class QueryParser(BaseRequestParser):
    """Return the first value of a configured query parameter, or ``None``.

    Args:
        query_name: Query parameter name (case-sensitive).

    Raises:
        ConfigurationError: When *query_name* is empty.
    """

    def __init__(self, query_name: str) -> None:
        if not query_name:
            raise ConfigurationError(
                parameter="query_name",
                reason="A query parameter name is required.",
            )
        self._query_name = query_name

    @property
    def query_name(self) -> str:
        return self._query_name

    def parse(self, request: RequestView) -> str | None:
        return request.query(self._query_name)

    def __repr__(self) -> str:
        return f"{self.name}({self._query_name!r})"


__all__ = ["QueryParser"]
