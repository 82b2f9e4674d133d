"""Configuration management using pydantic-settings."""

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BIND = "0.0.0.0:8787"


class Settings(BaseSettings):
    """Settings for the image proxy, read once at startup."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QUICKLY_",
        case_sensitive=False,
        extra="ignore",
    )

    # Origin
    upstream_uri: str = Field(
        ...,
        validation_alias=AliasChoices("quickly_upstream", "upstream_uri"),
        description="Base URI that image paths are appended to",
    )
    upstream_timeout: float = 30.0

    # Listener
    bind: str = Field(DEFAULT_BIND, validation_alias=AliasChoices("quickly_bind", "bind"))

    # Service
    log_level: str = "INFO"
    compress: bool = True
    health_path: str | None = "/_health"  # Shadows the origin path of the same name

    @field_validator("bind")
    @classmethod
    def _check_bind(cls, value: str) -> str:
        host, sep, port = value.rpartition(":")
        if not sep or not host or not port.isdigit() or int(port) > 65535:
            raise ValueError(f"Bind address must be host:port, got {value!r}")
        return value

    @property
    def host(self) -> str:
        return self.bind.rpartition(":")[0].strip("[]")

    @property
    def port(self) -> int:
        return int(self.bind.rpartition(":")[2])
