"""
Runtime configuration, read from RUNES_* environment variables or a .env file.
"""

import os
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_rules_dir() -> str:
    base = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(base, "rulesets")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RUNES_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    rules_dir: str = Field(default_factory=default_rules_dir)
    log_level: str = "info"
    json_logs: bool = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
