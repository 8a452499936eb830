"""
Entity controllers for Podio.

Each entity type (space, app, app field, organization) is a controller
bound to the provider's shared API client and resolved by type name through
the provider registry.
"""

from resources.base import DataSourceController, EntityController
from resources.registry import (
    PROVIDER_SCHEMA,
    ProviderRegistry,
    get_registry,
    register_builtin_controllers,
)

__all__ = [
    "DataSourceController",
    "EntityController",
    "PROVIDER_SCHEMA",
    "ProviderRegistry",
    "get_registry",
    "register_builtin_controllers",
]
