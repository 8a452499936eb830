"""
Entity Controller Base - Generic reconciliation routine for entity types.

Each entity type supplies its schema, four remote operations and a mapping
from the remote entity to Tracked State. Create, Read, Update, Delete and
Import are implemented once here, so every type validates, merges state
and tolerates failures the same way.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Tuple

from client import PodioAPIError, PodioClient
from config import DEFAULT_TRUST_LEVEL
from errors import NotFound, RemoteError, RequiresReplacement, ValidationError, Violation
from schema import AttributeType, EntitySchema, present_values

logger = logging.getLogger(__name__)

TOLERATE_DELETE_ERRORS = "ignore_delete_errors"


def parse_id(name: str, value: Any) -> int:
    invalid = ValidationError([Violation(name, f"expected a numeric ID, got {value!r}")])
    # bool is an int subclass and int() truncates floats
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise invalid
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise invalid


class EntityController(ABC):
    """
    Abstract base class for entity controllers.

    Subclasses set ``schema`` and implement the remote_* operations and
    to_state(). All operations are independent of each other: everything
    they need comes from the Desired State or Tracked State passed in.
    Input records are never mutated.
    """

    schema: EntitySchema
    # Lowest API key trust level at which the remote delete is accepted
    delete_trust_level: Optional[int] = None

    def __init__(self, client: PodioClient, trust_level: int = DEFAULT_TRUST_LEVEL):
        self.client = client
        self.trust_level = trust_level

    @property
    def type_name(self) -> str:
        return self.schema.type_name

    @property
    def identity_attributes(self) -> Tuple[str, ...]:
        """Attributes that together locate the Remote Entity."""
        return (self.schema.identifier,)

    # Per-type remote operations

    @abstractmethod
    async def remote_create(self, params: Dict[str, Any]) -> Any:
        """Create the Remote Entity from the selected create parameters."""
        pass

    @abstractmethod
    async def remote_get(self, identity: Dict[str, Any]) -> Any:
        """Fetch the Remote Entity."""
        pass

    @abstractmethod
    async def remote_update(
        self, identity: Dict[str, Any], params: Dict[str, Any]
    ) -> Any:
        """Update the Remote Entity with the full mutable attribute set."""
        pass

    @abstractmethod
    async def remote_delete(self, identity: Dict[str, Any]) -> None:
        """Delete the Remote Entity."""
        pass

    @abstractmethod
    def to_state(self, entity: Any) -> Dict[str, Any]:
        """Map every tracked field of a Remote Entity to attribute values."""
        pass

    # Identity helpers

    def identity(self, tracked: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Extract the identifying attributes from a Tracked State record.

        Raises:
            ValidationError: If an identifying attribute is missing
        """
        violations = []
        identity = {}
        for name in self.identity_attributes:
            value = tracked.get(name)
            if value is None:
                violations.append(Violation(name, "identifier is not set"))
                continue
            attr = self.schema.attribute(name)
            identity[name] = (
                parse_id(name, value) if attr.type is AttributeType.INT64 else value
            )
        if violations:
            raise ValidationError(violations)
        return identity

    def parse_import_id(self, external_id: str) -> Dict[str, Any]:
        """Turn an externally supplied ID into the seed of a Read."""
        name = self.schema.identifier
        return {name: parse_id(name, str(external_id).strip())}

    def _merge(
        self, entity: Any, local_source: Optional[Mapping[str, Any]]
    ) -> Dict[str, Any]:
        state = self.schema.empty_state()
        state.update(self.to_state(entity))
        state.update(self.schema.local_values(local_source))
        return state

    def _remote_error(self, action: str, error: PodioAPIError) -> RemoteError:
        return RemoteError(
            f"Unable to {action} {self.type_name}, got error: {error}",
            status=error.status,
        )

    # Lifecycle operations

    async def create(self, desired: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create the Remote Entity described by a Desired State record.

        Returns:
            The new Tracked State, holding the server's canonical values

        Raises:
            ValidationError: If the record violates the schema
            RemoteError: If the remote call fails
        """
        self.schema.validate(desired)
        params = self.schema.create_params(desired)

        try:
            entity = await self.remote_create(params)
        except PodioAPIError as e:
            raise self._remote_error("create", e) from e

        state = self._merge(entity, desired)
        logger.info(f"Created {self.type_name} {self.identity(state)}")
        return state

    async def read(self, tracked: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Refresh a Tracked State record from the Remote Entity.

        Raises:
            NotFound: If the Remote Entity no longer exists
            RemoteError: If the remote call fails otherwise
        """
        identity = self.identity(tracked)

        try:
            entity = await self.remote_get(identity)
        except PodioAPIError as e:
            if e.is_not_found:
                raise NotFound(f"{self.type_name} {identity} no longer exists") from e
            raise self._remote_error("read", e) from e

        logger.debug(f"Read {self.type_name} {identity}")
        return self._merge(entity, tracked)

    async def update(
        self, desired: Mapping[str, Any], tracked: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """
        Update the Remote Entity in place.

        Raises:
            ValidationError: If the record violates the schema
            RequiresReplacement: If an immutable attribute changed
            RemoteError: If the remote call fails
        """
        self.schema.validate(desired, tracked)

        changed = self.schema.changed_replacement_attributes(desired, tracked)
        if changed:
            raise RequiresReplacement(changed)

        identity = self.identity(tracked)
        params = self.schema.update_params(desired, tracked)

        try:
            entity = await self.remote_update(identity, params)
        except PodioAPIError as e:
            raise self._remote_error("update", e) from e

        state = self._merge(entity, desired)
        logger.info(f"Updated {self.type_name} {identity}")
        return state

    async def delete(self, tracked: Mapping[str, Any]) -> None:
        """
        Delete the Remote Entity.

        When ``ignore_delete_errors`` is set in the Tracked State a failed
        delete is logged and reported as success.

        Raises:
            RemoteError: If the remote call fails and failures are not tolerated
        """
        identity = self.identity(tracked)
        tolerate = bool(present_values(tracked).get(TOLERATE_DELETE_ERRORS, False))

        if (
            self.delete_trust_level is not None
            and self.trust_level < self.delete_trust_level
        ):
            logger.warning(
                f"Deleting {self.type_name} {identity} needs trust level "
                f"{self.delete_trust_level}, API key has {self.trust_level}; "
                f"the delete is likely to be rejected"
            )

        try:
            await self.remote_delete(identity)
        except PodioAPIError as e:
            if e.is_not_found:
                logger.info(f"{self.type_name} {identity} was already deleted")
                return
            if tolerate:
                logger.warning(
                    f"Ignoring error when deleting {self.type_name} {identity}: {e}"
                )
                return
            raise self._remote_error("delete", e) from e

        logger.info(f"Deleted {self.type_name} {identity}")

    async def import_state(self, external_id: str) -> Dict[str, Any]:
        """
        Build Tracked State for an existing Remote Entity.

        Raises:
            ValidationError: If the ID is malformed
            NotFound: If the ID does not resolve
        """
        seed = self.parse_import_id(external_id)
        state = await self.read(seed)
        logger.info(f"Imported {self.type_name} {seed}")
        return state


class DataSourceController(ABC):
    """
    Abstract base class for read-only data sources.

    A data source resolves a lookup declaration into observed values and
    never changes the remote side.
    """

    schema: EntitySchema

    def __init__(self, client: PodioClient, trust_level: int = DEFAULT_TRUST_LEVEL):
        self.client = client
        self.trust_level = trust_level

    @property
    def type_name(self) -> str:
        return self.schema.type_name

    @abstractmethod
    async def lookup(self, config: Dict[str, Any]) -> Any:
        """Fetch the remote object selected by a validated declaration."""
        pass

    @abstractmethod
    def to_state(self, entity: Any) -> Dict[str, Any]:
        """Map the remote object to attribute values."""
        pass

    async def read(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Resolve a lookup declaration.

        Raises:
            ValidationError: If the declaration violates the schema
            NotFound: If nothing matches
            RemoteError: If the remote call fails otherwise
        """
        self.schema.validate(config)
        present = present_values(config)

        try:
            entity = await self.lookup(present)
        except PodioAPIError as e:
            if e.is_not_found:
                raise NotFound(f"{self.type_name} {present} was not found") from e
            raise RemoteError(
                f"Unable to fetch {self.type_name}, got error: {e}", status=e.status
            ) from e

        state = self.schema.empty_state()
        state.update(self.to_state(entity))
        logger.debug(f"Read {self.type_name} {present}")
        return state
