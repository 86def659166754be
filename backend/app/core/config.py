"""Application settings using environment variables."""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fhe_core.tenseal_context import DEFAULT_PLAIN_MODULUS, DEFAULT_POLY_MODULUS_DEGREE


class Settings(BaseSettings):
    """Environment-driven configuration for the FastAPI backend."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    APP_TITLE: str = Field("Encrypted Assessment Service")
    APP_VERSION: str = Field("0.1.0")
    LOG_LEVEL: str = Field("INFO")

    # Routes are mounted under this prefix, e.g. "/ml".
    ASSESSMENT_API_PREFIX: str = Field("")
    CORS_ALLOW_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    BFV_POLY_MODULUS_DEGREE: int = Field(DEFAULT_POLY_MODULUS_DEGREE)
    BFV_PLAIN_MODULUS: int = Field(DEFAULT_PLAIN_MODULUS)
    BFV_KEY_CACHE_SIZE: int = Field(64)

    # Optional JSON file overriding the built-in model parameters.
    ASSESSMENT_MODEL_PATH: Optional[str] = Field(None)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance to avoid re-parsing env."""
    return Settings()


settings = get_settings()
