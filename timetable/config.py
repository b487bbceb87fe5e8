"""Runtime settings, read from the environment (prefix ``TIMETABLE_``) or a .env file."""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TIMETABLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Weekly sessions assumed for a subject with no explicit hours
    default_subject_hours: int = 2
    # Weekly teaching cap assumed for a teacher with no max_hours
    default_max_hours: int = 20
    document_version: str = "1.4"
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
