"""Library configuration via environment variables."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from SCHEMAGUARD_* environment variables."""

    # Schemas
    SCHEMA_DIR: Optional[str] = None

    # Logging
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    model_config = {"env_prefix": "SCHEMAGUARD_", "env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
