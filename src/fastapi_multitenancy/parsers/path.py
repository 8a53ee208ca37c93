"""Path-pattern parser.

Applies a regular expression to the request path; the first capture group
of a match is the candidate.  :meth:`PathParser.for_parent` builds the
pattern for the common ``/tenants/{tenant}/...`` layout.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi_multitenancy.parsers.base import PatternParser
from fastapi_multitenancy.parsers.patterns import path_pattern_for_parent

if TYPE_CHECKING:
    from fastapi_multitenancy.request import RequestView


class PathParser(PatternParser):
    """Return the first capture group of *path_pattern* applied to the path.

    Example::

        PathParser(r"^/tenants/([a-z0-9]+)(?:/?)$")

    matches ``/tenants/tenant1`` and ``/tenants/tenant1/``.

    Args:
        path_pattern: Regular expression, matched case-insensitively.

    Raises:
        ConfigurationError: When the pattern is empty or invalid.
    """

    parameter = "path_pattern"

    def __init__(self, path_pattern: str) -> None:
        super().__init__(path_pattern)

    @classmethod
    def for_parent(cls, parent_path_prefix: str) -> PathParser:
        """Build a parser for the path segment that follows *parent_path_prefix*.

        ``PathParser.for_parent("/tenants/")`` matches
        ``/tenants/acme/dashboard`` and yields ``"acme"``.
        """
        return cls(path_pattern_for_parent(parent_path_prefix))

    def subject(self, request: RequestView) -> str:
        return request.path


__all__ = ["PathParser"]
