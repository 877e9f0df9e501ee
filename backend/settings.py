from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field("sqlite+aiosqlite:///./habitbloom.db", alias="DATABASE_URL")
    token_secret: str = Field(..., alias="TOKEN_SECRET")
    token_ttl_seconds: int = Field(7 * 24 * 3600, alias="TOKEN_TTL_SECONDS")

    password_min_length: int = Field(6, alias="PASSWORD_MIN_LENGTH")
    habit_name_max_length: int = Field(60, alias="HABIT_NAME_MAX_LENGTH")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None

