"""Unit tests for config.py - Configuration management."""

import os
from unittest.mock import patch

import config
from config import (
    DEFAULT_API_URL,
    CLIConfig,
    Config,
    ProviderConfig,
    get_config,
    load_config,
    reset_config,
)


class TestProviderConfig:
    """Tests for ProviderConfig class."""

    def test_default_values(self):
        """Test default configuration values."""
        cfg = ProviderConfig()
        assert cfg.client_id is None
        assert cfg.client_secret is None
        assert cfg.username is None
        assert cfg.password is None
        assert cfg.trust_level == 2
        assert cfg.api_url == DEFAULT_API_URL
        assert cfg.timeout == 30

    def test_from_env(self):
        """Test loading configuration from environment variables."""
        env_vars = {
            "PODIO_CLIENT_ID": "my-client",
            "PODIO_CLIENT_SECRET": "my-secret",
            "PODIO_USERNAME": "user@example.com",
            "PODIO_PASSWORD": "hunter2",
            "PODIO_TRUST_LEVEL": "1",
            "PODIO_API_URL": "https://api.example.com",
            "PODIO_TIMEOUT": "5",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            cfg = ProviderConfig.from_env()
            assert cfg.client_id == "my-client"
            assert cfg.client_secret == "my-secret"
            assert cfg.username == "user@example.com"
            assert cfg.password == "hunter2"
            assert cfg.trust_level == 1
            assert cfg.api_url == "https://api.example.com"
            assert cfg.timeout == 5

    def test_from_env_missing_credentials_left_unset(self):
        """Missing credentials are reported later by the registry, not here."""
        with patch.dict(os.environ, {"PODIO_CLIENT_ID": ""}, clear=True):
            cfg = ProviderConfig.from_env()
            assert cfg.client_id is None
            assert cfg.password is None
            assert cfg.trust_level == 2

    def test_secrets_not_in_repr(self):
        cfg = ProviderConfig(
            client_id="my-client",
            client_secret="my-secret",
            username="user@example.com",
            password="hunter2",
        )
        text = repr(cfg)
        assert "my-secret" not in text
        assert "hunter2" not in text
        assert "trust_level=2" in text

    def test_as_dict(self):
        cfg = ProviderConfig(client_id="a", client_secret="b", username="c", password="d")
        assert cfg.as_dict() == {
            "client_id": "a",
            "client_secret": "b",
            "username": "c",
            "password": "d",
            "trust_level": 2,
        }


class TestCLIConfig:
    """Tests for CLIConfig class."""

    def test_default_values(self):
        cfg = CLIConfig()
        assert cfg.state_file == "podio.state.yaml"
        assert cfg.log_level == "INFO"

    def test_from_env(self):
        env_vars = {"PODIO_STATE_FILE": "/tmp/state.yaml", "LOG_LEVEL": "DEBUG"}
        with patch.dict(os.environ, env_vars, clear=True):
            cfg = CLIConfig.from_env()
            assert cfg.state_file == "/tmp/state.yaml"
            assert cfg.log_level == "DEBUG"


class TestConfig:
    """Tests for main Config class."""

    def test_from_env(self):
        with patch.dict(os.environ, {"PODIO_CLIENT_ID": "env-client"}, clear=True):
            cfg = Config.from_env()
            assert cfg.provider.client_id == "env-client"
            assert cfg.cli.state_file == "podio.state.yaml"


class TestConfigSingleton:
    """Tests for config singleton functions."""

    def test_load_config_caches(self):
        reset_config()
        with patch.dict(os.environ, {"PODIO_CLIENT_ID": "first"}, clear=True):
            first = load_config()
        with patch.dict(os.environ, {"PODIO_CLIENT_ID": "second"}, clear=True):
            second = load_config()
        assert first is second
        assert second.provider.client_id == "first"

    def test_get_config_loads_when_unset(self):
        reset_config()
        assert config.config is None
        cfg = get_config()
        assert cfg is not None
        assert config.config is cfg

    def test_reset_config(self):
        get_config()
        reset_config()
        assert config.config is None
