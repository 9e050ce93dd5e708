"""
Registry Settings

Defaults live in module constants; every value can be overridden from the
environment with the STAR_REGISTRY_ prefix, e.g.
STAR_REGISTRY_OWNERSHIP_WINDOW_SECONDS=600.
"""

from functools import lru_cache
from typing import Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError


OWNERSHIP_WINDOW_SECONDS = 300
PROTOCOL_TAG = "starRegistry"
GENESIS_DATA = "Genesis Block"


class RegistrySettings(BaseSettings):
    """Runtime settings for the chain and the ownership-proof protocol."""

    model_config = SettingsConfigDict(env_prefix="STAR_REGISTRY_")

    ownership_window_seconds: int = OWNERSHIP_WINDOW_SECONDS
    protocol_tag: str = PROTOCOL_TAG
    genesis_data: str = GENESIS_DATA

    @field_validator("ownership_window_seconds")
    @classmethod
    def window_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("ownership_window_seconds must be >= 0")
        return v

    @field_validator("protocol_tag")
    @classmethod
    def tag_must_be_single_field(cls, v: str) -> str:
        # The tag is the third ':'-separated field of a challenge message
        if not v or ":" in v:
            raise ValueError("protocol_tag must be non-empty and contain no ':'")
        return v


def load_settings(**overrides) -> RegistrySettings:
    """
    Build settings from the environment plus explicit overrides.

    Raises:
        ConfigError: If any value fails validation
    """
    try:
        return RegistrySettings(**overrides)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


@lru_cache(maxsize=1)
def get_settings() -> RegistrySettings:
    """Process-wide settings, read from the environment once."""
    return load_settings()


def resolve_settings(settings: Optional[RegistrySettings]) -> RegistrySettings:
    return settings if settings is not None else get_settings()
