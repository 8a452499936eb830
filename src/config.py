"""
Configuration module for the Podio controller.

Loads configuration from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

DEFAULT_API_URL = "https://api.podio.com"
DEFAULT_TRUST_LEVEL = 2


@dataclass
class ProviderConfig:
    """Provider-level credentials and API settings."""

    client_id: Optional[str] = field(default=None, repr=False)
    client_secret: Optional[str] = field(default=None, repr=False)
    username: Optional[str] = field(default=None, repr=False)
    password: Optional[str] = field(default=None, repr=False)  # Never log password
    trust_level: int = DEFAULT_TRUST_LEVEL
    api_url: str = DEFAULT_API_URL
    timeout: int = 30  # seconds

    @classmethod
    def from_env(cls):
        """
        Load from environment variables.

        Missing credentials are left unset; the provider registry reports
        all of them at once when it is configured.
        """
        return cls(
            client_id=os.getenv("PODIO_CLIENT_ID") or None,
            client_secret=os.getenv("PODIO_CLIENT_SECRET") or None,
            username=os.getenv("PODIO_USERNAME") or None,
            password=os.getenv("PODIO_PASSWORD") or None,
            trust_level=int(os.getenv("PODIO_TRUST_LEVEL", str(DEFAULT_TRUST_LEVEL))),
            api_url=os.getenv("PODIO_API_URL", DEFAULT_API_URL),
            timeout=int(os.getenv("PODIO_TIMEOUT", "30")),
        )

    def as_dict(self) -> Dict[str, Any]:
        """Configuration values keyed by provider schema attribute name."""
        return {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "username": self.username,
            "password": self.password,
            "trust_level": self.trust_level,
        }


@dataclass
class CLIConfig:
    """Command line host configuration."""

    state_file: str = "podio.state.yaml"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            state_file=os.getenv("PODIO_STATE_FILE", "podio.state.yaml"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


@dataclass
class Config:
    """Main configuration object."""

    provider: ProviderConfig
    cli: CLIConfig

    @classmethod
    def from_env(cls):
        """Load all configuration from environment variables."""
        return cls(
            provider=ProviderConfig.from_env(),
            cli=CLIConfig.from_env(),
        )


# Global config instance
config: Optional[Config] = None


def load_config() -> Config:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = Config.from_env()
    return config


def get_config() -> Config:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None
