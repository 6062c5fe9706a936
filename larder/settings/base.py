# larder/settings/base.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class LarderBaseSettings(BaseSettings):
    """Shared .env loading for every settings section."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
