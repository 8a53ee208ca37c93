"""Compile parent host suffixes and path prefixes into anchored patterns.

The ``*_for_parent`` helpers are the convenience form of the host and path
parsers: rather than writing a regular expression, callers give the fixed
part of the host or path and the helper builds an anchored pattern with a
single capturing group around the tenant segment.

The supplied text is escaped *before* the wildcard token is substituted, so
``.`` in a domain suffix matches only a literal dot while ``*`` still matches
one label::

    >>> host_pattern_for_parent(".tenants.example.com")
    '^([a-z0-9-]+)\\\\.tenants\\\\.example\\\\.com$'
    >>> host_pattern_for_parent(".*.example.com")
    '^([a-z0-9-]+)\\\\.[a-z0-9-]+\\\\.example\\\\.com$'
"""

from __future__ import annotations

import re

from fastapi_multitenancy.core.exceptions import ConfigurationError

#: Token callers may use in a suffix/prefix to stand for one variable label.
WILDCARD = "*"

#: Character class substituted for :data:`WILDCARD`.
WILDCARD_CLASS = "[a-z0-9-]+"

#: Capturing group for the tenant label of a host name.
HOST_SEGMENT = "([a-z0-9-]+)"

#: Capturing group for the tenant segment of a path (RFC 3986 pchar set).
PATH_SEGMENT = "([a-z0-9._~!$&'()*+,;=:@%-]+)"

#: What may follow the tenant path segment: end of path or a delimiter.
PATH_TAIL = "(?:$|[#/?].*$)"


def _escape_with_wildcards(text: str) -> str:
    """Escape *text* for use in a regex, then expand wildcard tokens."""
    return re.escape(text).replace(re.escape(WILDCARD), WILDCARD_CLASS)


def host_pattern_for_parent(parent_host_suffix: str) -> str:
    """Return a host pattern whose only capture is the label before *parent_host_suffix*.

    Args:
        parent_host_suffix: Fixed host suffix, usually starting with ``.``
            (e.g. ``".tenants.example.com"``).  ``*`` stands for one label.

    Returns:
        An anchored regular expression string.

    Raises:
        ConfigurationError: When *parent_host_suffix* is empty.
    """
    if not parent_host_suffix:
        raise ConfigurationError(
            parameter="parent_host_suffix",
            reason="A parent host suffix is required.",
        )
    return f"^{HOST_SEGMENT}{_escape_with_wildcards(parent_host_suffix)}$"


def path_pattern_for_parent(parent_path_prefix: str) -> str:
    """Return a path pattern whose only capture is the segment after *parent_path_prefix*.

    Args:
        parent_path_prefix: Fixed path prefix, usually ending with ``/``
            (e.g. ``"/tenants/"``).  ``*`` stands for one segment.

    Returns:
        An anchored regular expression string.

    Raises:
        ConfigurationError: When *parent_path_prefix* is empty.
    """
    if not parent_path_prefix:
        raise ConfigurationError(
            parameter="parent_path_prefix",
            reason="A parent path prefix is required.",
        )
    return f"^{_escape_with_wildcards(parent_path_prefix)}{PATH_SEGMENT}{PATH_TAIL}"


def compile_pattern(pattern: str, parameter: str) -> re.Pattern[str]:
    """Compile *pattern* case-insensitively, reporting failures as configuration errors.

    Host names are case-insensitive, and request paths are matched the same
    way so that differently-cased URLs reach the normaliser rather than
    silently falling through.

    Args:
        pattern: Regular expression source.
        parameter: Name reported in the :class:`ConfigurationError`.

    Raises:
        ConfigurationError: When *pattern* is empty or does not compile.
    """
    if not pattern:
        raise ConfigurationError(parameter=parameter, reason="A pattern is required.")
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise ConfigurationError(
            parameter=parameter,
            reason=f"Pattern {pattern!r} is not a valid regular expression: {exc}",
        ) from exc


__all__ = [
    "WILDCARD",
    "WILDCARD_CLASS",
    "compile_pattern",
    "host_pattern_for_parent",
    "path_pattern_for_parent",
]
