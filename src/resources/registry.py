"""
Provider Registry - Registration and resolution of entity controllers.

The registry owns the single authenticated PodioClient shared by every
controller it hands out. The client is built once by configure() and only
stored after authentication succeeded.
"""

import logging
from importlib.metadata import entry_points
from typing import Any, Dict, List, Optional, Type, Union

from client import PodioAPIError, PodioClient
from config import DEFAULT_TRUST_LEVEL, ProviderConfig
from errors import MisconfiguredProvider, UnknownEntityType
from resources.base import DataSourceController, EntityController
from schema import Attribute, AttributeType, EntitySchema, Requirement
from validation import validate_desired_state, validate_json_schema

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "podio_controller.resources"

Controller = Union[EntityController, DataSourceController]
ControllerClass = Union[Type[EntityController], Type[DataSourceController]]

PROVIDER_SCHEMA = EntitySchema(
    type_name="podio",
    description="Provider configuration for the Podio API.",
    kind="provider",
    attributes=[
        Attribute(
            "client_id",
            AttributeType.STRING,
            Requirement.REQUIRED,
            description="Client ID for Podio",
            sensitive=True,
        ),
        Attribute(
            "client_secret",
            AttributeType.STRING,
            Requirement.REQUIRED,
            description="Client Secret for Podio",
            sensitive=True,
        ),
        Attribute(
            "username",
            AttributeType.STRING,
            Requirement.REQUIRED,
            description="Username for Podio",
            sensitive=True,
        ),
        Attribute(
            "password",
            AttributeType.STRING,
            Requirement.REQUIRED,
            description="Password for Podio",
            sensitive=True,
        ),
        Attribute(
            "trust_level",
            AttributeType.INT64,
            Requirement.OPTIONAL,
            description=(
                "Trust level for the Podio API key. Turns on guard-rails when your "
                "key can't be used for certain operations. `2` is the default, "
                "allowing all public API methods."
            ),
            default=DEFAULT_TRUST_LEVEL,
        ),
    ],
)


class ProviderRegistry:
    """
    Central registry for entity controllers.

    Handles registration of controller classes, one-time configuration of
    the shared API client, and resolution of controllers by type name.
    """

    def __init__(self, version: str = "dev"):
        self.version = version

        # Registered controller classes (not instantiated)
        self._controllers: Dict[str, ControllerClass] = {}

        # Controller instances bound to the shared client
        self._instances: Dict[str, Controller] = {}

        self._client: Optional[PodioClient] = None
        self._trust_level: int = DEFAULT_TRUST_LEVEL

    # Registration methods

    def register_controller(self, controller_class: ControllerClass) -> None:
        """
        Register a controller class under its schema's type name.

        Args:
            controller_class: An EntityController or DataSourceController subclass

        Raises:
            ValueError: If the declared schema does not render to a valid
                JSON Schema
        """
        name = controller_class.schema.type_name

        is_valid, error = validate_json_schema(controller_class.schema.to_json_schema())
        if not is_valid:
            raise ValueError(f"Controller {name} declares an invalid schema: {error}")

        if name in self._controllers:
            logger.warning(f"Overwriting existing controller: {name}")

        self._controllers[name] = controller_class
        self._instances.pop(name, None)
        logger.info(
            f"Registered {controller_class.schema.kind.replace('_', ' ')}: {name}"
        )

    # Configuration

    @property
    def configured(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> PodioClient:
        if self._client is None:
            raise MisconfiguredProvider("provider has not been configured")
        return self._client

    async def configure(self, config: ProviderConfig) -> PodioClient:
        """
        Build and authenticate the shared API client.

        Args:
            config: Provider configuration

        Returns:
            The authenticated client

        Raises:
            MisconfiguredProvider: If configuration values are missing, the
                provider was already configured, or authentication fails
        """
        if self._client is not None:
            raise MisconfiguredProvider("provider is already configured")

        violations = validate_desired_state(config.as_dict(), PROVIDER_SCHEMA)
        if violations:
            raise MisconfiguredProvider(
                "While configuring the provider, some configuration values were "
                "missing or invalid: " + "; ".join(str(v) for v in violations)
            )

        client = PodioClient(
            api_key=config.client_id,
            api_secret=config.client_secret,
            api_url=config.api_url,
            user_agent=f"podio-controller/{self.version}",
            timeout=config.timeout,
        )

        try:
            await client.authenticate_with_credentials(config.username, config.password)
        except PodioAPIError as e:
            raise MisconfiguredProvider(
                f"Failed to authenticate with Podio: {e}"
            ) from e

        self.attach_client(client, config.trust_level)
        return client

    def attach_client(
        self, client: PodioClient, trust_level: int = DEFAULT_TRUST_LEVEL
    ) -> None:
        """
        Install an already authenticated client.

        Raises:
            MisconfiguredProvider: If a client is already installed or the
                given client is not authenticated
        """
        if self._client is not None:
            raise MisconfiguredProvider("provider is already configured")
        if not client.authenticated:
            raise MisconfiguredProvider("client is not authenticated")

        self._client = client
        self._trust_level = trust_level
        logger.info(f"Provider configured (trust level {trust_level})")

    # Resolution

    def resolve(self, name: str) -> Any:
        """
        Get the controller for an entity type.

        Args:
            name: The entity type name, e.g. 'podio_space'

        Returns:
            A controller bound to the shared client

        Raises:
            UnknownEntityType: If no controller is registered under the name
            MisconfiguredProvider: If the provider has not been configured
        """
        if name not in self._controllers:
            raise UnknownEntityType(name, self.list_types())

        client = self.client

        if name not in self._instances:
            self._instances[name] = self._controllers[name](client, self._trust_level)
            logger.debug(f"Instantiated controller: {name}")

        return self._instances[name]

    # Discovery methods

    def list_types(self) -> List[str]:
        """List all registered entity type names."""
        return list(self._controllers.keys())

    def list_resources(self) -> List[str]:
        """List registered entity types that support the full lifecycle."""
        return [
            name
            for name, cls in self._controllers.items()
            if issubclass(cls, EntityController)
        ]

    def list_data_sources(self) -> List[str]:
        """List registered read-only data sources."""
        return [
            name
            for name, cls in self._controllers.items()
            if issubclass(cls, DataSourceController)
        ]

    def has_type(self, name: str) -> bool:
        """Check if a controller is registered for the type name."""
        return name in self._controllers

    def get_schema(self, name: str) -> EntitySchema:
        """
        Get the declared schema of an entity type.

        Works before the provider is configured.

        Raises:
            UnknownEntityType: If no controller is registered under the name
        """
        if name not in self._controllers:
            raise UnknownEntityType(name, self.list_types())
        return self._controllers[name].schema


# Global registry instance
_registry: Optional[ProviderRegistry] = None


def get_registry() -> ProviderRegistry:
    """Get the global provider registry singleton."""
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry


def reset_registry() -> None:
    """Reset the global registry (mainly for testing)."""
    global _registry
    _registry = None


def register_builtin_controllers(registry: Optional[ProviderRegistry] = None) -> None:
    """
    Register the built-in controllers and discover extra ones via entry points.

    Args:
        registry: Registry to populate, the global one by default
    """
    from resources.app import AppController
    from resources.app_field import AppFieldController
    from resources.organization import OrganizationDataSource
    from resources.space import SpaceController

    registry = registry or get_registry()

    for controller_class in (
        SpaceController,
        AppController,
        AppFieldController,
        OrganizationDataSource,
    ):
        registry.register_controller(controller_class)

    # Discover and register third-party controllers via entry points
    discovered = entry_points(group=ENTRY_POINT_GROUP)
    for ep in discovered:
        try:
            registry.register_controller(ep.load())
        except Exception as e:
            logger.warning(f"Could not load controller {ep.name}: {e}")
