"""
Environment-driven settings for neo-identity.

Settings that are not part of IdentityOptions live here: secrets and
process-level knobs read from the environment or a ``.env`` file.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class IdentitySettings(BaseSettings):
    """Process-level identity settings."""

    model_config = SettingsConfigDict(
        env_prefix="NEO_IDENTITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Root secret for data protection; per-purpose keys are derived from it
    data_protection_key: Optional[SecretStr] = Field(default=None)


@lru_cache()
def get_identity_settings() -> IdentitySettings:
    """Get cached identity settings."""
    return IdentitySettings()
