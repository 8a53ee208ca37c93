"""Raw ASGI tenancy middleware.

Written against the ASGI callable interface rather than
``BaseHTTPMiddleware``: the request tenancy is bound in a ``ContextVar``, and
``BaseHTTPMiddleware`` runs the app in a separate task where that binding
would not be visible.

ASGI lifecycle
--------------
::

    Client                        Middleware                     App
      │                               │                          │
      │── HTTP request ──────────────►│                          │
      │                           RequestView.from_scope()       │
      │                           RequestTenancy (unresolved)    │
      │                           TenantContext.bind()           │
      │                           [resolve eagerly]              │
      │                               ├── await app() ──────────►│
      │                               │◄── response ─────────────│
      │◄── response ──────────────────│                          │
      │                           TenantContext.reset()          │

The request tenancy is also stored on ``scope["state"]`` as ``tenancy``, so
handlers can reach it through ``request.state.tenancy``.

Eager and lazy resolution
-------------------------
With ``resolve_eagerly`` (the default) the tenant is resolved before the app
runs.  Otherwise resolution runs the first time a handler or dependency asks
for the tenant; handlers that never ask cost no store lookups.

Error handling
--------------
- Resolution found no tenant and ``reject_unresolved`` → ``404 Not Found``
- ``TenantNotFoundError`` raised by the app before it responded → ``404``
- other ``TenancyError`` → ``500``

Store failures that are not ``TenancyError`` and cancellation propagate to
the server unchanged.  HTTP error responses are JSON ``{"detail": "..."}``.
WebSocket connections are refused with a close frame instead: code 1008
(policy violation) in place of 404 and 1011 in place of 500.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi_multitenancy.core.context import TenantContext
from fastapi_multitenancy.core.exceptions import TenancyError, TenantNotFoundError
from fastapi_multitenancy.request import RequestView

if TYPE_CHECKING:
    from collections.abc import Iterable

    from starlette.types import ASGIApp, Receive, Scope, Send

    from fastapi_multitenancy.manager import TenancyManager

logger = logging.getLogger(__name__)


async def _json_response(send: Send, status_code: int, detail: str) -> None:
    payload = json.dumps({"detail": detail}).encode()
    await send(
        {
            "type": "http.response.start",
            "status": status_code,
            "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", b"%d" % len(payload)),
            ],
        }
    )
    await send({"type": "http.response.body", "body": payload})


_WS_CLOSE_CODES = {404: 1008, 500: 1011}
_STARTED = frozenset({"http.response.start", "websocket.accept", "websocket.close"})


async def _reject(scope: Scope, send: Send, status_code: int, detail: str) -> None:
    if scope["type"] == "websocket":
        await send(
            {"type": "websocket.close", "code": _WS_CLOSE_CODES[status_code], "reason": detail}
        )
    else:
        await _json_response(send, status_code, detail)


class TenancyMiddleware:
    """Raw ASGI middleware that attaches tenancy state to every request.

    Args:
        app: The downstream ASGI application.
        manager: The configured :class:`~fastapi_multitenancy.manager.TenancyManager`.
        excluded_paths: Extra path prefixes that bypass tenancy, added to
            ``manager.config.excluded_paths``.

    Example::

        app.add_middleware(TenancyMiddleware, manager=manager, excluded_paths=["/metrics"])
    """

    def __init__(
        self,
        app: ASGIApp,
        manager: TenancyManager,
        excluded_paths: Iterable[str] | None = None,
    ) -> None:
        self._app = app
        self._manager = manager
        self._excluded: tuple[str, ...] = (
            *manager.config.excluded_paths,
            *(excluded_paths or ()),
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        # lifespan and other scope types carry no request to resolve.
        bypass = scope["type"] not in ("http", "websocket") or scope.get(
            "path", "/"
        ).startswith(self._excluded)
        if bypass:
            await self._app(scope, receive, send)
        else:
            await self._handle(scope, receive, send)

    async def _handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Bind tenancy state, optionally resolve, delegate to the app, restore context."""
        config = self._manager.config
        tenancy = self._manager.request_tenancy(RequestView.from_scope(scope))

        response_started = False

        async def send_tracked(message: dict[str, Any]) -> None:
            nonlocal response_started
            response_started = response_started or message["type"] in _STARTED
            await send(message)

        token = TenantContext.bind(tenancy)
        try:
            if config.resolve_eagerly:
                try:
                    tenant = await tenancy.get_tenant()
                except TenancyError:
                    logger.exception("Tenancy error while resolving %s", tenancy.request)
                    await _reject(scope, send, 500, "Internal tenancy error")
                    return
                if tenant is None and config.reject_unresolved:
                    logger.info("Rejected request %s: no tenant resolved", tenancy.request)
                    await _reject(scope, send, 404, "Tenant not found")
                    return

            state = scope.setdefault("state", {})
            if isinstance(state, dict):
                state["tenancy"] = tenancy
            else:
                state.tenancy = tenancy

            await self._app(scope, receive, send_tracked)  # type: ignore[arg-type]
        except TenantNotFoundError:
            if response_started:
                logger.exception(
                    "TenantNotFoundError raised after the response started for %s",
                    tenancy.request,
                )
            else:
                logger.debug("Route required a tenant but %s resolved none", tenancy.request)
                await _reject(scope, send, 404, "Tenant not found")
        except TenancyError:
            logger.exception("Unhandled tenancy error for %s", tenancy.request)
            if not response_started:
                await _reject(scope, send, 500, "Internal tenancy error")
        finally:
            TenantContext.reset(token)


__all__ = ["TenancyMiddleware"]
