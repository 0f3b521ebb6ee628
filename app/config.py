"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = "PersonalHabitatBot/1.0 (+https://example.com)"


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Personal Habitat", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    data_dir: Path = Field(default=Path("./data"), alias="DATA_DIR")
    media_file: str = Field(default="media.json", alias="MEDIA_FILE")

    cache_ttl_seconds: int = Field(default=3_600, alias="CACHE_TTL", ge=0)
    fetch_timeout_seconds: float = Field(default=10.0, alias="FETCH_TIMEOUT", gt=0)
    max_redirects: int = Field(default=10, alias="MAX_REDIRECTS", ge=0, le=50)
    max_concurrent_fetches: int = Field(
        default=8, alias="MAX_CONCURRENT_FETCHES", ge=1, le=64
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, alias="USER_AGENT")
    accept_language: str = Field(
        default="zh-CN,zh;q=0.9,en;q=0.8", alias="ACCEPT_LANGUAGE"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("user_agent", mode="before")
    @classmethod
    def _default_user_agent(cls, value: object) -> object:
        """Fall back to the bot identifier when the user agent is blank."""

        if value is None:
            return DEFAULT_USER_AGENT
        if isinstance(value, str):
            return value.strip() or DEFAULT_USER_AGENT
        return value

    @property
    def media_path(self) -> Path:
        """Return the location of the media catalog file."""

        return self.data_dir / self.media_file

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
