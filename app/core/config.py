# app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import SecretStr, Field
from typing import List


class Settings(BaseSettings):
    # Loaded from .env first, then the process environment. Unknown keys are
    # ignored so the same .env can carry client settings too.
    model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

    # Project Settings
    PROJECT_NAME: str = Field("Hoarding Finder API")
    API_PREFIX: str = Field("/api")
    ENV: str = Field("nonprod")
    LOG_LEVEL: str = Field("INFO")
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:19000",
            "http://localhost:19001",
            "http://localhost:19002",
            "http://localhost:8081",
        ]
    )

    # Database Settings
    DATABASE_URL: str = Field("sqlite:///./hoardings.db")

    # JWT Authentication Settings
    SECRET_KEY: SecretStr = Field(...)  # Required secret
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24)

    # Nearby search, meters
    DEFAULT_NEARBY_RADIUS_M: int = Field(5000, gt=0)
    MAX_NEARBY_RADIUS_M: int = Field(50000, gt=0)


settings = Settings()
