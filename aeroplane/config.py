from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    HOST: str = "0.0.0.0"
    PORT: int = Field(default=8080, ge=1, le=65535)

    # Client assets (index.html, 404.html, js/, ...) are served from here.
    STATIC_DIR: str = "public"

    LOG_LEVEL: str = "INFO"

    # 0 keeps rooms until the process exits.
    ROOM_IDLE_TTL_SECONDS: float = Field(default=0, ge=0)
    ROOM_SWEEP_INTERVAL_SECONDS: float = Field(default=60, gt=0)

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalise_log_level(cls, value: str) -> str:
        return str(value).strip().upper() or "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
