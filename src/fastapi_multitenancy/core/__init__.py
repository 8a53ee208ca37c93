"""Core tenancy abstractions — types, config, context, and exceptions."""

from fastapi_multitenancy.core.config import ParserSpec, TenancyConfig
from fastapi_multitenancy.core.context import (
    TenantContext,
    get_current_tenant,
    get_current_tenant_optional,
)
from fastapi_multitenancy.core.exceptions import (
    ConfigurationError,
    TenancyError,
    TenantNotFoundError,
    TenantResolutionError,
)
from fastapi_multitenancy.core.types import (
    ParserKind,
    ResolutionState,
    Tenant,
    TenantStatus,
)

__all__ = [
    # Config
    "ParserSpec",
    "TenancyConfig",
    # Context
    "TenantContext",
    "get_current_tenant",
    "get_current_tenant_optional",
    # Exceptions
    "ConfigurationError",
    "TenancyError",
    "TenantNotFoundError",
    "TenantResolutionError",
    # Types
    "ParserKind",
    "ResolutionState",
    "Tenant",
    "TenantStatus",
]
