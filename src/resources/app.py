"""
App resource - An app within a space in Podio.
"""

from typing import Any, Dict

from models import Application
from resources.base import EntityController
from schema import Attribute, AttributeType, EntitySchema, Requirement
from validators import StringInSliceValidator, StringMatchesRegexpValidator

APP_TYPES = ["standard", "meeting", "contact"]

# Boolean app settings, all defaulted by the server when left out
APP_FLAGS = {
    "allow_edit": "Whether the app should be editable",
    "allow_attachments": "True if attachment of files to an item is allowed",
    "allow_comments": "True if comments are allowed",
    "silent_creates": "True if item creates should not be posted to the stream",
    "silent_edits": "True if item edits should not be posted to the stream",
}

APP_SCHEMA = EntitySchema(
    type_name="podio_app",
    description="An app within a space in Podio",
    identifier="app_id",
    attributes=[
        Attribute(
            "space_id",
            AttributeType.INT64,
            Requirement.REQUIRED,
            description="ID of the space. Changing this forces a new resource to be created.",
            requires_replace=True,
        ),
        Attribute(
            "app_id",
            AttributeType.INT64,
            Requirement.COMPUTED,
            description="ID of the app",
        ),
        Attribute(
            "name",
            AttributeType.STRING,
            Requirement.REQUIRED,
            description="Name of the app",
        ),
        Attribute(
            "type",
            AttributeType.STRING,
            Requirement.OPTIONAL_COMPUTED,
            description="Type of the app.",
            validators=(StringInSliceValidator(APP_TYPES),),
        ),
        Attribute(
            "item_name",
            AttributeType.STRING,
            Requirement.REQUIRED,
            description="Name of the item type to use for the app",
        ),
        Attribute(
            "description",
            AttributeType.STRING,
            Requirement.OPTIONAL_COMPUTED,
            description="Description of the app",
        ),
        Attribute(
            "usage",
            AttributeType.STRING,
            Requirement.OPTIONAL_COMPUTED,
            description="How the app should be used.",
        ),
        Attribute(
            "icon",
            AttributeType.STRING,
            Requirement.OPTIONAL,
            description="Icon of the app, in the format `12.png`.",
            validators=(StringMatchesRegexpValidator(r"^\d+\.png$"),),
        ),
        *[
            Attribute(
                name,
                AttributeType.BOOL,
                Requirement.OPTIONAL_COMPUTED,
                description=description,
            )
            for name, description in APP_FLAGS.items()
        ],
        Attribute(
            "ignore_delete_errors",
            AttributeType.BOOL,
            Requirement.OPTIONAL,
            description="If true, errors are ignored when deleting the app. Defaults to `false`",
            local=True,
            default=False,
        ),
    ],
)


class AppController(EntityController):
    """Controller for podio_app."""

    schema = APP_SCHEMA
    delete_trust_level = 2

    async def remote_create(self, params: Dict[str, Any]) -> Application:
        config = dict(params)
        space_id = config.pop("space_id")
        return await self.client.create_application(space_id, config)

    async def remote_get(self, identity: Dict[str, Any]) -> Application:
        return await self.client.get_application(identity["app_id"])

    async def remote_update(
        self, identity: Dict[str, Any], params: Dict[str, Any]
    ) -> Application:
        return await self.client.update_application(identity["app_id"], params)

    async def remote_delete(self, identity: Dict[str, Any]) -> None:
        await self.client.delete_application(identity["app_id"])

    def to_state(self, entity: Application) -> Dict[str, Any]:
        config = entity.config
        state = {
            "app_id": entity.app_id,
            "space_id": entity.space_id,
            "name": config.name,
            "type": config.type,
            "item_name": config.item_name,
            "description": config.description,
            "usage": config.usage,
            "icon": config.icon,
        }
        for name in APP_FLAGS:
            state[name] = getattr(config, name)
        return state
