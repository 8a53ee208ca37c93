"""Abstract base class for request parsers.

A parser extracts a *raw candidate* — an un-normalised string that may name
a tenant — from a :class:`~fastapi_multitenancy.request.RequestView`.  It
does no I/O and no normalisation; the resolver normalises the candidate and
looks it up.

Parsers are shared by every request served by a pipeline, so they must not
keep per-request state.  ``None`` means "this parser does not apply to the
request" and is never an error.

Extension pattern::

    from fastapi_multitenancy.parsers.base import BaseRequestParser

    class CookieParser(BaseRequestParser):
        def __init__(self, cookie_name: str) -> None:
            self._cookie_name = cookie_name

        def parse(self, request: RequestView) -> str | None:
            cookies = SimpleCookie(request.header("cookie") or "")
            morsel = cookies.get(self._cookie_name)
            return morsel.value if morsel else None
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import re
from typing import TYPE_CHECKING

from fastapi_multitenancy.parsers.patterns import compile_pattern

if TYPE_CHECKING:
    from fastapi_multitenancy.request import RequestView


class BaseRequestParser(ABC):
    """Extracts a raw tenant candidate from a request."""

    @property
    def name(self) -> str:
        """Name reported in resolution diagnostics."""
        return type(self).__name__

    @abstractmethod
    def parse(self, request: RequestView) -> str | None:
        """Return the raw candidate found in *request*, or ``None``.

        Args:
            request: Read-only view of the current request.

        Returns:
            The un-normalised candidate, or ``None`` when the parser does
            not apply to *request*.
        """

    def __repr__(self) -> str:
        return f"{self.name}()"


class PatternParser(BaseRequestParser):
    """Base for parsers that apply a regular expression to one request field.

    The candidate is the first capture group of a successful match.  Use
    non-capturing groups ``(?:...)`` for any other grouping in the pattern.

    Args:
        pattern: Regular expression source, matched case-insensitively.
    """

    #: Constructor argument name reported in configuration errors.
    parameter = "pattern"

    def __init__(self, pattern: str) -> None:
        self._regex: re.Pattern[str] = compile_pattern(pattern, self.parameter)

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    @abstractmethod
    def subject(self, request: RequestView) -> str:
        """Return the request field the pattern is applied to."""

    def parse(self, request: RequestView) -> str | None:
        match = self._regex.search(self.subject(request))
        if match is None or not match.groups():
            return None
        return match.group(1)

    def __repr__(self) -> str:
        return f"{self.name}({self.pattern!r})"


__all__ = ["BaseRequestParser", "PatternParser"]
