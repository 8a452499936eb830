"""
Provider Errors - Error kinds raised by entity controllers and the registry.

Every error carries a short category and a human-readable detail message.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence


class ProviderError(Exception):
    """Base class for all errors surfaced to the host."""

    category = "Provider Error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{self.category}: {detail}")


@dataclass(frozen=True)
class Violation:
    """A single attribute constraint violation."""

    attribute: str
    message: str

    def __str__(self) -> str:
        return f"{self.attribute}: {self.message}"


class ValidationError(ProviderError):
    """One or more attributes violate their schema constraints."""

    category = "Validation Error"

    def __init__(self, violations: Sequence[Violation]):
        self.violations: List[Violation] = list(violations)
        super().__init__("; ".join(str(v) for v in self.violations))

    @property
    def attributes(self) -> List[str]:
        return [v.attribute for v in self.violations]


class RemoteError(ProviderError):
    """A remote API call failed."""

    category = "Client Error"

    def __init__(self, detail: str, status: Optional[int] = None):
        self.status = status
        super().__init__(detail)


class NotFound(ProviderError):
    """The remote object no longer exists or never existed."""

    category = "Not Found"


class RequiresReplacement(ProviderError):
    """An immutable attribute changed; the entity must be destroyed and recreated."""

    category = "Requires Replacement"

    def __init__(self, attributes: Sequence[str]):
        self.attributes: List[str] = list(attributes)
        super().__init__(
            f"changing {', '.join(self.attributes)} forces a new resource to be created"
        )


class UnknownEntityType(ProviderError):
    """No controller is registered under the requested type name."""

    category = "Unknown Entity Type"

    def __init__(self, name: str, available: Sequence[str] = ()):
        self.name = name
        super().__init__(
            f"Unknown entity type: {name}. "
            f"Available types: {', '.join(available) or 'none'}"
        )


class MisconfiguredProvider(ProviderError):
    """Provider configuration is missing or authentication failed."""

    category = "Misconfigured Provider"
