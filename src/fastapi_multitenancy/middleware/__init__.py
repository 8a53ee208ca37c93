"""ASGI middleware that binds request tenancy state."""

from fastapi_multitenancy.middleware.tenancy import TenancyMiddleware

__all__ = ["TenancyMiddleware"]
