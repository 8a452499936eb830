"""
Schema Validation - Desired State validation utilities.

Checks Desired State records against an entity schema: unknown attributes,
requirement classes, JSON Schema type constraints and field validators.
Every violation is collected; nothing stops at the first problem.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from jsonschema import Draft7Validator

from errors import Violation

if TYPE_CHECKING:
    from schema import EntitySchema

logger = logging.getLogger(__name__)


def validate_json_schema(schema: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate that a rendered schema is a valid Draft 7 JSON Schema.

    Args:
        schema: The schema to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        Draft7Validator.check_schema(schema)
        return True, None
    except Exception as e:
        return False, f"Invalid schema: {str(e)}"


def _type_schema(entity_schema: "EntitySchema") -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            attr.name: attr.type.json_constraints()
            for attr in entity_schema.attributes
        },
    }


def validate_desired_state(
    desired: Mapping[str, Any],
    entity_schema: "EntitySchema",
    tracked: Optional[Mapping[str, Any]] = None,
) -> List[Violation]:
    """
    Validate a Desired State record against an entity schema.

    Null values count as absent. Computed attributes may only appear when
    they equal the previously observed value in ``tracked``.

    Args:
        desired: Attribute name to value mapping declared by the user
        entity_schema: The schema of the entity type
        tracked: The Tracked State record, when one exists

    Returns:
        List of violations, empty if the record is valid
    """
    violations: List[Violation] = []
    present = {k: v for k, v in desired.items() if v is not None}

    for name in desired:
        if not entity_schema.has_attribute(name):
            violations.append(Violation(name, "unsupported attribute"))

    type_errors: Dict[str, str] = {}
    validator = Draft7Validator(_type_schema(entity_schema))
    for error in validator.iter_errors(present):
        if error.absolute_path:
            type_errors.setdefault(str(error.absolute_path[0]), error.message)

    for attr in entity_schema.attributes:
        value = present.get(attr.name)

        if value is None:
            if attr.is_required:
                violations.append(Violation(attr.name, "attribute is required"))
            continue

        if attr.is_computed:
            observed = tracked.get(attr.name) if tracked is not None else None
            if observed is None or observed != value:
                violations.append(
                    Violation(attr.name, "value is computed and cannot be set")
                )
            continue

        if attr.name in type_errors:
            violations.append(Violation(attr.name, type_errors[attr.name]))
            continue

        for field_validator in attr.validators:
            message = field_validator.validate(value)
            if message:
                violations.append(Violation(attr.name, message))

    for group in entity_schema.exactly_one_of:
        set_names = [name for name in group if present.get(name) is not None]
        quoted = " or ".join(f"`{name}`" for name in group)
        if len(set_names) > 1:
            violations.append(
                Violation(set_names[0], f"only set one of {quoted}, not both")
            )
        elif not set_names:
            violations.append(Violation(group[0], f"one of {quoted} must be set"))

    if violations:
        logger.debug(
            f"{entity_schema.type_name}: {len(violations)} validation violation(s)"
        )
    return violations
