"""
Organization data source - Look up a Podio organization.

Exactly one of ``url_label`` or ``org_id`` selects the lookup path.
"""

from typing import Any, Dict

from models import Organization
from resources.base import DataSourceController
from schema import Attribute, AttributeType, EntitySchema, Requirement

ORGANIZATION_SCHEMA = EntitySchema(
    type_name="podio_organization",
    description="A Podio organization",
    kind="data_source",
    identifier="org_id",
    exactly_one_of=[("url_label", "org_id")],
    attributes=[
        Attribute(
            "url_label",
            AttributeType.STRING,
            Requirement.OPTIONAL_COMPUTED,
            description=(
                "The URL label/slug for the organization, e.g. the `citrix` part of "
                "`https://podio.com/citrix`. Mutually exclusive with `org_id`."
            ),
        ),
        Attribute(
            "org_id",
            AttributeType.INT64,
            Requirement.OPTIONAL_COMPUTED,
            description="The numeric ID of the organization. Mutually exclusive with `url_label`.",
        ),
        Attribute(
            "url",
            AttributeType.STRING,
            Requirement.COMPUTED,
            description="URL of the Podio organization",
        ),
        Attribute(
            "name",
            AttributeType.STRING,
            Requirement.COMPUTED,
            description="Name of the Podio organization",
        ),
    ],
)


class OrganizationDataSource(DataSourceController):
    """Data source for podio_organization."""

    schema = ORGANIZATION_SCHEMA

    async def lookup(self, config: Dict[str, Any]) -> Organization:
        if "url_label" in config:
            return await self.client.get_organization_by_slug(config["url_label"])
        return await self.client.get_organization(config["org_id"])

    def to_state(self, entity: Organization) -> Dict[str, Any]:
        return {
            "url_label": entity.url_label,
            "org_id": entity.org_id,
            "url": entity.url,
            "name": entity.name,
        }
