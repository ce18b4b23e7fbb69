"""Environment-driven settings for the Health Risk Profiler service."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from the environment or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HRP_",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Health Risk Profiler API"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"

    # OCR
    ocr_confidence_threshold: int = Field(default=60, ge=0, le=100, description="Minimum OCR confidence, percent")
    ocr_max_attempts: int = Field(default=2, ge=1)
    ocr_min_latency: float = Field(default=1.5, ge=0, description="Simulated OCR latency lower bound, seconds")
    ocr_max_latency: float = Field(default=3.5, ge=0, description="Simulated OCR latency upper bound, seconds")

    # Uploads
    max_upload_bytes: int = 5 * 1024 * 1024

    # Health check
    health_cache_ttl: float = 30.0
    memory_warning_mb: int = 200
    memory_critical_mb: int = 400


@lru_cache()
def get_settings() -> Settings:
    return Settings()
