"""
Field Validators - Reusable predicates attached to declared attributes.

Validators are stateless and only consulted when an attribute has a value;
an absent or null value has not been determined yet and always passes.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Pattern, Sequence, Union


class FieldValidator(ABC):
    """Abstract base class for attribute validators."""

    @abstractmethod
    def description(self) -> str:
        """Plain-text description of the constraint."""
        pass

    @abstractmethod
    def markdown_description(self) -> str:
        """Markdown description of the constraint, used in generated docs."""
        pass

    @abstractmethod
    def check(self, value: Any) -> Optional[str]:
        """
        Check a present value.

        Args:
            value: The attribute value, never None.

        Returns:
            None if the value is acceptable, otherwise the violation message.
        """
        pass

    def json_schema(self) -> Dict[str, Any]:
        """JSON Schema keywords expressing the same constraint."""
        return {}

    def validate(self, value: Any) -> Optional[str]:
        """
        Validate a value, skipping absent ones.

        Returns:
            None if the value is absent or acceptable, otherwise the
            violation message.
        """
        if value is None:
            return None
        return self.check(value)


class StringInSliceValidator(FieldValidator):
    """Value must equal one of a fixed, ordered set of strings."""

    def __init__(self, allowed: Sequence[str]):
        self.allowed = tuple(allowed)

    def __repr__(self) -> str:
        return f"StringInSliceValidator({list(self.allowed)!r})"

    def description(self) -> str:
        return "must be one of: " + ", ".join(self.allowed)

    def markdown_description(self) -> str:
        return "must be one of: `" + "`, `".join(self.allowed) + "`"

    def check(self, value: Any) -> Optional[str]:
        if value in self.allowed:
            return None
        return self.description()

    def json_schema(self) -> Dict[str, Any]:
        return {"enum": list(self.allowed)}


class StringMatchesRegexpValidator(FieldValidator):
    """Value must fully match a fixed regular expression."""

    def __init__(self, pattern: Union[str, Pattern[str]]):
        self.regexp = re.compile(pattern) if isinstance(pattern, str) else pattern

    def __repr__(self) -> str:
        return f"StringMatchesRegexpValidator({self.regexp.pattern!r})"

    def description(self) -> str:
        return f"must match regexp: {self.regexp.pattern}"

    def markdown_description(self) -> str:
        return f"must match regexp: `{self.regexp.pattern}`"

    def check(self, value: Any) -> Optional[str]:
        if isinstance(value, str) and self.regexp.fullmatch(value):
            return None
        return self.description()

    def json_schema(self) -> Dict[str, Any]:
        return {"pattern": self.regexp.pattern}
