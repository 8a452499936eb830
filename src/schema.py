"""
Entity Schema - Per-entity-type attribute declarations.

An EntitySchema is the ordered attribute list of one entity type. It drives
input validation, decides which attributes travel to the remote API, and
renders the declared surface (JSON Schema and markdown docs) for hosts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from errors import ValidationError
from validation import validate_desired_state
from validators import FieldValidator


class AttributeType(Enum):
    """Semantic type of an attribute value."""

    STRING = "string"
    INT64 = "int64"
    BOOL = "bool"

    @property
    def json_type(self) -> str:
        return _JSON_TYPES[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    def json_constraints(self) -> Dict[str, Any]:
        """JSON Schema keywords for a present value of this type."""
        constraints: Dict[str, Any] = {"type": self.json_type}
        if self is AttributeType.INT64:
            constraints.update({"minimum": INT64_MIN, "maximum": INT64_MAX})
        return constraints


INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_JSON_TYPES = {
    AttributeType.STRING: "string",
    AttributeType.INT64: "integer",
    AttributeType.BOOL: "boolean",
}

_LABELS = {
    AttributeType.STRING: "String",
    AttributeType.INT64: "Number",
    AttributeType.BOOL: "Boolean",
}


class Requirement(Enum):
    """Requirement class of an attribute."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    COMPUTED = "computed"
    OPTIONAL_COMPUTED = "optional_computed"


@dataclass(frozen=True)
class Attribute:
    """Declaration of a single attribute."""

    name: str
    type: AttributeType
    requirement: Requirement
    description: str = ""
    validators: Tuple[FieldValidator, ...] = ()
    # A change forces destroy and recreate instead of an in-place update
    requires_replace: bool = False
    sensitive: bool = False
    # Kept in state only, never sent to the remote API
    local: bool = False
    default: Any = None

    @property
    def is_required(self) -> bool:
        return self.requirement is Requirement.REQUIRED

    @property
    def is_computed(self) -> bool:
        return self.requirement is Requirement.COMPUTED

    @property
    def is_remote_input(self) -> bool:
        """True if a user-supplied value is passed to create/update calls."""
        return not self.is_computed and not self.local

    def json_schema(self) -> Dict[str, Any]:
        prop = self.type.json_constraints()
        if not self.is_required:
            prop["type"] = [prop["type"], "null"]
        if self.description:
            prop["description"] = self.description
        if self.is_computed:
            prop["readOnly"] = True
        if self.default is not None:
            prop["default"] = self.default
        for validator in self.validators:
            prop.update(validator.json_schema())
        if "enum" in prop and not self.is_required:
            prop["enum"] = prop["enum"] + [None]
        return prop

    def markdown(self) -> str:
        text = f"- `{self.name}` ({self.type.label}"
        if self.sensitive:
            text += ", Sensitive"
        text += ")"
        if self.description:
            text += f" {self.description}"
        for validator in self.validators:
            desc = validator.markdown_description()
            text += f" Value {desc}."
        return text


def present_values(record: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return a copy of ``record`` without unset (None) values."""
    if not record:
        return {}
    return {k: v for k, v in record.items() if v is not None}


@dataclass
class EntitySchema:
    """Ordered attribute specification for one entity type."""

    type_name: str
    description: str
    attributes: Sequence[Attribute]
    identifier: Optional[str] = None
    kind: str = "resource"
    exactly_one_of: Sequence[Tuple[str, ...]] = ()
    _by_name: Dict[str, Attribute] = field(init=False, repr=False)

    def __post_init__(self):
        self.attributes = tuple(self.attributes)
        self._by_name = {}
        for attr in self.attributes:
            if attr.name in self._by_name:
                raise ValueError(
                    f"Duplicate attribute '{attr.name}' in schema {self.type_name}"
                )
            self._by_name[attr.name] = attr

        if self.identifier is not None and self.identifier not in self._by_name:
            raise ValueError(
                f"Identifier '{self.identifier}' is not an attribute of "
                f"{self.type_name}"
            )
        for group in self.exactly_one_of:
            for name in group:
                if name not in self._by_name:
                    raise ValueError(
                        f"Unknown attribute '{name}' in exactly_one_of of "
                        f"{self.type_name}"
                    )

    # Lookup

    @property
    def names(self) -> List[str]:
        return [attr.name for attr in self.attributes]

    def has_attribute(self, name: str) -> bool:
        return name in self._by_name

    def attribute(self, name: str) -> Attribute:
        return self._by_name[name]

    @property
    def replacement_attributes(self) -> List[Attribute]:
        return [attr for attr in self.attributes if attr.requires_replace]

    @property
    def local_attributes(self) -> List[Attribute]:
        return [attr for attr in self.attributes if attr.local]

    # Validation and parameter selection

    def validate(
        self,
        desired: Mapping[str, Any],
        tracked: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Validate a Desired State record.

        Raises:
            ValidationError: Listing every violation found
        """
        violations = validate_desired_state(desired, self, tracked)
        if violations:
            raise ValidationError(violations)

    def create_params(self, desired: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Select the attributes passed to the remote create call.

        Required attributes plus present Optional and OptionalComputed ones.
        Absent attributes are left out so the server applies its defaults.
        """
        present = present_values(desired)
        return {
            attr.name: present[attr.name]
            for attr in self.attributes
            if attr.is_remote_input and attr.name in present
        }

    def update_params(
        self, desired: Mapping[str, Any], tracked: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """
        Select the full mutable attribute set for the remote update call.

        Present values are always sent. An absent OptionalComputed attribute
        carries the server value adopted into Tracked State; an absent
        Optional attribute is never sent.
        """
        present = present_values(desired)
        params: Dict[str, Any] = {}
        for attr in self.attributes:
            if not attr.is_remote_input or attr.requires_replace:
                continue
            if attr.name in present:
                params[attr.name] = present[attr.name]
            elif (
                attr.requirement is Requirement.OPTIONAL_COMPUTED
                and tracked.get(attr.name) is not None
            ):
                params[attr.name] = tracked[attr.name]
        return params

    def changed_replacement_attributes(
        self, desired: Mapping[str, Any], tracked: Mapping[str, Any]
    ) -> List[str]:
        """Names of immutable attributes whose desired value differs from state."""
        present = present_values(desired)
        return [
            attr.name
            for attr in self.replacement_attributes
            if attr.name in present and present[attr.name] != tracked.get(attr.name)
        ]

    def local_values(self, source: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Local attribute values from ``source``, falling back to defaults."""
        present = present_values(source)
        return {
            attr.name: present.get(attr.name, attr.default)
            for attr in self.local_attributes
        }

    def empty_state(self) -> Dict[str, Any]:
        return {name: None for name in self.names}

    # Declared surface

    def to_json_schema(self) -> Dict[str, Any]:
        """Render the Desired State shape as a Draft 7 JSON Schema."""
        rendered: Dict[str, Any] = {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": self.type_name,
            "description": self.description,
            "type": "object",
            "properties": {
                attr.name: attr.json_schema() for attr in self.attributes
            },
            "required": [attr.name for attr in self.attributes if attr.is_required],
            "additionalProperties": False,
        }
        return rendered

    def to_markdown(self) -> str:
        """Render documentation for the entity type."""
        title = "Data Source" if self.kind == "data_source" else "Resource"
        lines = [f"# {self.type_name} ({title})", "", self.description, "", "## Schema"]

        sections = [
            ("Required", [a for a in self.attributes if a.is_required]),
            (
                "Optional",
                [a for a in self.attributes if not a.is_required and not a.is_computed],
            ),
            ("Read-Only", [a for a in self.attributes if a.is_computed]),
        ]
        for heading, attrs in sections:
            if not attrs:
                continue
            lines.extend(["", f"### {heading}", ""])
            lines.extend(attr.markdown() for attr in attrs)

        if self.identifier and self.kind == "resource":
            lines.extend(
                [
                    "",
                    "## Import",
                    "",
                    f"Import is supported using the `{self.identifier}` attribute.",
                ]
            )
        return "\n".join(lines) + "\n"
