"""Application settings powered by Pydantic BaseSettings."""

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from edge_api.cache.store import DEFAULT_MAX_ENTRIES
from edge_api.fetch.constants import DEFAULT_USER_AGENT
from edge_api.fetch.redact import redact_secret


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    bridge_base: str | None = Field(default=None, validation_alias="BRIDGE_BASE")
    bridge_token: str | None = Field(default=None, validation_alias="BRIDGE_TOKEN")
    allowed_video_hosts: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(), validation_alias="ALLOWED_VIDEO_HOSTS"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT, min_length=1, validation_alias="EDGE_API_USER_AGENT"
    )
    cache_max_entries: int = Field(
        default=DEFAULT_MAX_ENTRIES, ge=1, validation_alias="EDGE_API_CACHE_MAX_ENTRIES"
    )
    log_level: str = Field(default="INFO", validation_alias="EDGE_API_LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="EDGE_API_LOG_JSON")

    @field_validator("allowed_video_hosts", mode="before")
    @classmethod
    def parse_host_list(cls, value: object) -> tuple[str, ...]:
        """Split a comma-separated host list, dropping blanks."""
        if value is None:
            return ()
        if isinstance(value, str):
            items = value.split(",")
        elif isinstance(value, list | tuple | set | frozenset):
            items = [str(item) for item in value]
        else:
            msg = "ALLOWED_VIDEO_HOSTS must be a comma-separated string"
            raise ValueError(msg)
        return tuple(item.strip().lower() for item in items if item.strip())

    @field_validator("bridge_base", "bridge_token", mode="before")
    @classmethod
    def blank_as_unset(cls, value: object) -> object:
        """Treat empty strings as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Ensure the log level is one the logging module knows."""
        upper = value.strip().upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return upper

    def redacted(self) -> dict[str, object]:
        """Return the settings with secrets masked, for display."""
        data = self.model_dump()
        data["bridge_token"] = redact_secret(self.bridge_token)
        data["allowed_video_hosts"] = list(self.allowed_video_hosts)
        return data


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
