"""
Unit tests for registry settings.
"""

import pytest

from star_registry.config import (
    RegistrySettings, load_settings, get_settings,
    OWNERSHIP_WINDOW_SECONDS, PROTOCOL_TAG, GENESIS_DATA,
)
from star_registry.errors import ConfigError


class TestSettings:
    """Tests for RegistrySettings."""

    def test_defaults(self, monkeypatch):
        for name in ("OWNERSHIP_WINDOW_SECONDS", "PROTOCOL_TAG", "GENESIS_DATA"):
            monkeypatch.delenv(f"STAR_REGISTRY_{name}", raising=False)
        settings = load_settings()
        assert settings.ownership_window_seconds == OWNERSHIP_WINDOW_SECONDS == 300
        assert settings.protocol_tag == PROTOCOL_TAG == "starRegistry"
        assert settings.genesis_data == GENESIS_DATA

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("STAR_REGISTRY_OWNERSHIP_WINDOW_SECONDS", "600")
        assert RegistrySettings().ownership_window_seconds == 600

    def test_explicit_override(self):
        assert load_settings(protocol_tag="myTag").protocol_tag == "myTag"

    def test_negative_window_rejected(self):
        with pytest.raises(ConfigError):
            load_settings(ownership_window_seconds=-1)

    def test_tag_with_separator_rejected(self):
        with pytest.raises(ConfigError):
            load_settings(protocol_tag="star:registry")

    def test_empty_tag_rejected(self):
        with pytest.raises(ConfigError):
            load_settings(protocol_tag="")

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()
