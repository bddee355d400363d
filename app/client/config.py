# app/client/config.py
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    # HOARDINGS_API_URL, HOARDINGS_REQUEST_TIMEOUT_SECONDS, ...
    model_config = SettingsConfigDict(
        env_prefix="HOARDINGS_", env_file='.env', case_sensitive=False, extra='ignore'
    )

    API_URL: str = Field("http://localhost:8000/api")
    REQUEST_TIMEOUT_SECONDS: float = Field(15.0, gt=0)

    NEARBY_CACHE_TTL_MS: int = Field(2 * 60 * 1000, gt=0)
    DEFAULT_RADIUS_M: int = Field(5000, gt=0)

    CACHE_BACKEND: str = Field("memory")
    REDIS_URL: Optional[str] = Field(None)
