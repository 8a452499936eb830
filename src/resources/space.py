"""
Space resource - A space/workspace within a Podio organization.
"""

from typing import Any, Dict

from models import Space
from resources.base import EntityController
from schema import Attribute, AttributeType, EntitySchema, Requirement
from validators import StringInSliceValidator

SPACE_SCHEMA = EntitySchema(
    type_name="podio_space",
    description=(
        "Manage a Space/Workspace within Podio. Deleting may be expected to fail "
        "due to API trust limits; set `ignore_delete_errors` to ignore errors."
    ),
    identifier="space_id",
    attributes=[
        Attribute(
            "space_id",
            AttributeType.INT64,
            Requirement.COMPUTED,
            description="ID of the space",
        ),
        Attribute(
            "org_id",
            AttributeType.INT64,
            Requirement.REQUIRED,
            description=(
                "The ID of the Organization the Space belongs to. "
                "Changing this forces a new resource to be created."
            ),
            requires_replace=True,
        ),
        Attribute(
            "name",
            AttributeType.STRING,
            Requirement.REQUIRED,
            description="Name of the space. Changing this does not update the space URL.",
        ),
        Attribute(
            "url",
            AttributeType.STRING,
            Requirement.COMPUTED,
            description="URL of the space",
        ),
        Attribute(
            "url_label",
            AttributeType.STRING,
            Requirement.COMPUTED,
            description="URL label/slug of the space",
        ),
        Attribute(
            "privacy",
            AttributeType.STRING,
            Requirement.OPTIONAL_COMPUTED,
            description="Privacy of the space. Defaults to `closed`.",
            validators=(StringInSliceValidator(["open", "closed"]),),
        ),
        Attribute(
            "auto_join",
            AttributeType.BOOL,
            Requirement.OPTIONAL_COMPUTED,
            description="If true, new employees automatically join this space. Defaults to `false`",
        ),
        Attribute(
            "post_on_new_app",
            AttributeType.BOOL,
            Requirement.OPTIONAL_COMPUTED,
            description="If true, new apps are posted as a status update to this space. Defaults to `false`",
        ),
        Attribute(
            "post_on_new_member",
            AttributeType.BOOL,
            Requirement.OPTIONAL_COMPUTED,
            description="If true, new members are posted as a status update to this space. Defaults to `false`",
        ),
        Attribute(
            "ignore_delete_errors",
            AttributeType.BOOL,
            Requirement.OPTIONAL,
            description="If true, errors are ignored when deleting a space. Defaults to `false`",
            local=True,
            default=False,
        ),
    ],
)


class SpaceController(EntityController):
    """Controller for podio_space."""

    schema = SPACE_SCHEMA
    delete_trust_level = 2

    async def remote_create(self, params: Dict[str, Any]) -> Space:
        body = dict(params)
        org_id = body.pop("org_id")
        return await self.client.create_space(org_id, body)

    async def remote_get(self, identity: Dict[str, Any]) -> Space:
        return await self.client.get_space(identity["space_id"])

    async def remote_update(
        self, identity: Dict[str, Any], params: Dict[str, Any]
    ) -> Space:
        return await self.client.update_space(identity["space_id"], params)

    async def remote_delete(self, identity: Dict[str, Any]) -> None:
        await self.client.delete_space(identity["space_id"])

    def to_state(self, entity: Space) -> Dict[str, Any]:
        return {
            "space_id": entity.space_id,
            "org_id": entity.org_id,
            "name": entity.name,
            "url": entity.url,
            "url_label": entity.url_label,
            "privacy": entity.privacy,
            "auto_join": entity.auto_join,
            "post_on_new_app": entity.post_on_new_app,
            "post_on_new_member": entity.post_on_new_member,
        }
