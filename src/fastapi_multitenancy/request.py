"""Read-only projection of an inbound request.

Parsers never see the Starlette ``Request`` or the raw ASGI scope; they
receive a :class:`RequestView` that exposes exactly the parts of a request a
tenant can be identified from.  Keeping the projection immutable guarantees
that parsers cannot mutate request state and that one view can be shared by
concurrent consumers of the same request.

Cancellation is not part of the view.  The request's asyncio task carries
it: cancelling the task while the resolver awaits a store lookup raises
:class:`asyncio.CancelledError` through the lookup to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from starlette.datastructures import URL, Headers, QueryParams

if TYPE_CHECKING:
    from collections.abc import Mapping

    from starlette.requests import HTTPConnection
    from starlette.types import Scope


def _strip_port(host: str) -> str:
    """Return *host* without a trailing ``:port`` (IPv6 literals kept intact)."""
    if host.startswith("["):
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    return host.split(":", maxsplit=1)[0]


class RequestView(BaseModel):
    """Immutable view of the request fields parsers may read.

    Attributes:
        host: Host name without port, as supplied by the client.
        path: URL path (percent-decoded, as ASGI servers supply it).
        headers: Case-insensitive header mapping.
        query_params: Query-string multi-mapping; lookups return the first value.
        display_url: Full URL used only in diagnostics.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    host: str = Field(default="", description="Host name without port.")
    path: str = Field(default="/", description="Request path.")
    headers: Headers = Field(default_factory=Headers, description="Request headers.")
    query_params: QueryParams = Field(
        default_factory=QueryParams,
        description="Query-string parameters.",
    )
    display_url: str = Field(default="", description="Full URL for diagnostics.")

    @classmethod
    def build(
        cls,
        *,
        host: str = "",
        path: str = "/",
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, str] | str | None = None,
        display_url: str | None = None,
    ) -> RequestView:
        """Build a view from plain values (tests, non-ASGI transports).

        Args:
            host: Host name; a ``:port`` suffix is stripped.
            path: Request path.
            headers: Header mapping; names are matched case-insensitively.
            query: Query mapping or raw query string.
            display_url: Diagnostic URL.  Derived from *host* and *path* when
                omitted.

        Returns:
            A new :class:`RequestView`.
        """
        hostname = _strip_port(host)
        params = QueryParams(query) if query is not None else QueryParams()
        if display_url is None:
            display_url = f"http://{host or 'localhost'}{path}"
            if str(params):
                display_url += f"?{params}"
        return cls(
            host=hostname,
            path=path,
            headers=Headers(headers=dict(headers or {})),
            query_params=params,
            display_url=display_url,
        )

    @classmethod
    def from_scope(cls, scope: Scope) -> RequestView:
        """Build a view from an ASGI ``http`` or ``websocket`` scope.

        The host is taken from the ``Host`` header and falls back to the
        ``server`` entry of the scope when the header is absent.
        """
        headers = Headers(scope=scope)
        host = headers.get("host", "")
        if not host and scope.get("server"):
            host = str(scope["server"][0])
        return cls(
            host=_strip_port(host),
            path=scope.get("path", "/") or "/",
            headers=headers,
            query_params=QueryParams(scope.get("query_string", b"")),
            display_url=str(URL(scope=scope)),
        )

    @classmethod
    def from_request(cls, request: HTTPConnection) -> RequestView:
        """Build a view from a Starlette ``Request`` or ``WebSocket``."""
        return cls.from_scope(request.scope)

    def header(self, name: str) -> str | None:
        """Return the first value of header *name*, or ``None`` if absent."""
        return self.headers.get(name)

    def query(self, name: str) -> str | None:
        """Return the first value of query parameter *name*, or ``None`` if absent."""
        return self.query_params.get(name)

    def __str__(self) -> str:
        return self.display_url


__all__ = ["RequestView"]
