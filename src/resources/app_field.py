"""
App field resource - A field within a Podio app.

Fields are addressed by the pair (app_id, field_id); the import ID is
written as ``<app_id>/<field_id>``.
"""

from typing import Any, Dict, Tuple

from errors import ValidationError, Violation
from models import AppField
from resources.base import EntityController, parse_id
from schema import Attribute, AttributeType, EntitySchema, Requirement
from validators import StringInSliceValidator

FIELD_TYPES = [
    "text",
    "number",
    "image",
    "date",
    "app",
    "money",
    "progress",
    "location",
    "duration",
    "contact",
    "calculation",
    "embed",
    "category",
    "email",
    "phone",
    "tel",
]

APP_FIELD_SCHEMA = EntitySchema(
    type_name="podio_app_field",
    description="A field within an app",
    identifier="field_id",
    attributes=[
        Attribute(
            "field_id",
            AttributeType.INT64,
            Requirement.COMPUTED,
            description="ID of the field",
        ),
        Attribute(
            "app_id",
            AttributeType.INT64,
            Requirement.REQUIRED,
            description="ID of the app the field belongs to. Changing this forces a new resource to be created.",
            requires_replace=True,
        ),
        Attribute(
            "type",
            AttributeType.STRING,
            Requirement.REQUIRED,
            description="Type of the field. Changing this forces a new resource to be created.",
            validators=(StringInSliceValidator(FIELD_TYPES),),
            requires_replace=True,
        ),
        Attribute(
            "label",
            AttributeType.STRING,
            Requirement.REQUIRED,
            description="Label of the field",
        ),
        Attribute(
            "description",
            AttributeType.STRING,
            Requirement.OPTIONAL_COMPUTED,
            description="Description of the field",
        ),
        Attribute(
            "required",
            AttributeType.BOOL,
            Requirement.OPTIONAL_COMPUTED,
            description="True if a value is required when creating items",
        ),
        Attribute(
            "hidden",
            AttributeType.BOOL,
            Requirement.OPTIONAL_COMPUTED,
            description="True if the field is hidden when empty",
        ),
        Attribute(
            "delta",
            AttributeType.INT64,
            Requirement.OPTIONAL_COMPUTED,
            description="Position of the field in the app layout",
        ),
        Attribute(
            "external_id",
            AttributeType.STRING,
            Requirement.COMPUTED,
            description="External ID of the field, derived from the label",
        ),
    ],
)

FIELD_CONFIG_KEYS = ("label", "description", "required", "hidden", "delta")


class AppFieldController(EntityController):
    """Controller for podio_app_field."""

    schema = APP_FIELD_SCHEMA

    @property
    def identity_attributes(self) -> Tuple[str, ...]:
        return ("app_id", "field_id")

    def parse_import_id(self, external_id: str) -> Dict[str, Any]:
        parts = str(external_id).strip().split("/")
        if len(parts) != 2:
            raise ValidationError(
                [
                    Violation(
                        "field_id",
                        f"import ID must look like <app_id>/<field_id>, got {external_id!r}",
                    )
                ]
            )
        return {
            "app_id": parse_id("app_id", parts[0]),
            "field_id": parse_id("field_id", parts[1]),
        }

    async def remote_create(self, params: Dict[str, Any]) -> AppField:
        config = {k: params[k] for k in FIELD_CONFIG_KEYS if k in params}
        return await self.client.create_app_field(
            params["app_id"], params["type"], config
        )

    async def remote_get(self, identity: Dict[str, Any]) -> AppField:
        return await self.client.get_app_field(identity["app_id"], identity["field_id"])

    async def remote_update(
        self, identity: Dict[str, Any], params: Dict[str, Any]
    ) -> AppField:
        return await self.client.update_app_field(
            identity["app_id"], identity["field_id"], params
        )

    async def remote_delete(self, identity: Dict[str, Any]) -> None:
        await self.client.delete_app_field(identity["app_id"], identity["field_id"])

    def to_state(self, entity: AppField) -> Dict[str, Any]:
        config = entity.config
        return {
            "field_id": entity.field_id,
            "app_id": entity.app_id,
            "type": entity.type,
            "label": config.label,
            "description": config.description,
            "required": config.required,
            "hidden": config.hidden,
            "delta": config.delta,
            "external_id": entity.external_id,
        }
