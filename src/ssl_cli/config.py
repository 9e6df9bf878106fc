"""Runtime configuration loaded from ``SSL_CLI_*`` environment variables."""

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SSL_CLI_", env_file=".env", extra="ignore")

    certs_dir: str = Field(
        default_factory=lambda: os.path.join(os.path.expanduser("~"), "certs"),
        description="Directory holding the CA and domain certificates",
    )
    nginx_sites_available: str = Field(default="/etc/nginx/sites-available")
    nginx_sites_enabled: str = Field(default="/etc/nginx/sites-enabled")
    log_level: str = Field(default="WARNING", description="Root log level")

    @field_validator("certs_dir")
    @classmethod
    def _expand_certs_dir(cls, value: str) -> str:
        return os.path.expanduser(value)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        allowed = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper_value = value.upper()
        if upper_value not in allowed:
            raise ValueError(f"Invalid log level '{value}'. Choose one of: {', '.join(sorted(allowed))}.")
        return upper_value
