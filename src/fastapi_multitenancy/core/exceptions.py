"""Errors raised by fastapi-multitenancy.

Everything derives from :class:`TenancyError`::

    TenancyError
    ├── ConfigurationError      bad wiring, detected at startup
    ├── TenantNotFoundError     a store lookup or a required tenant came up empty
    └── TenantResolutionError   no request tenancy to resolve from

Resolution itself never raises for "no candidate" or "unknown tenant";
those are ordinary outcomes recorded as events.  Exceptions coming out of a
store during a lookup are not wrapped.
"""

from __future__ import annotations

from typing import Any


class TenancyError(Exception):
    """Root of the package's exception tree.

    ``details`` carries structured context for logs.  Keep secrets out of it.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details) if details else {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} | details={self.details}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r})"


class ConfigurationError(TenancyError):
    """A collaborator or setting handed to the pipeline is unusable.

    Raised while the application is being assembled, e.g. a missing store,
    a blank header name or a pattern that fails to compile.
    """

    def __init__(
        self, parameter: str, reason: str, details: dict[str, Any] | None = None
    ) -> None:
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Invalid configuration for {parameter!r}: {reason}", details)


class TenantNotFoundError(TenancyError):
    """No tenant exists for ``identifier``, or a route required one and got none."""

    def __init__(
        self, identifier: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        self.identifier = identifier
        text = "Tenant not found"
        if identifier:
            text = f"{text}: {identifier!r}"
        super().__init__(text, details)


class TenantResolutionError(TenancyError):
    """There is nothing to resolve from.

    Typically a dependency asked for the request tenancy outside the
    middleware.  ``strategy`` names the component that noticed.
    """

    def __init__(
        self,
        reason: str,
        strategy: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.reason = reason
        self.strategy = strategy
        suffix = f" (strategy: {strategy})" if strategy else ""
        super().__init__(f"Tenant resolution failed: {reason}{suffix}", details)


__all__ = [
    "ConfigurationError",
    "TenancyError",
    "TenantNotFoundError",
    "TenantResolutionError",
]
