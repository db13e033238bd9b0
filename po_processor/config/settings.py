from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Ingestion configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    temp_directory: Path = Path("temp-uploads")
    scratch_max_age_seconds: int = 24 * 60 * 60

    text_engine: str = "pdfplumber"
    feature_flags: set[str] = Field(default_factory=lambda: {"llm_structuring"})

    structuring_provider: str = "openai"
    structuring_api_key: str = ""
    structuring_model_name: str = "gpt-4"
    structuring_base_url: str | None = None
    structuring_timeout_seconds: int = 30
    structuring_temperature: float = 0.3
    structuring_max_tokens: int = 2000

    total_tolerance: float = 0.01
    max_upload_attempts: int = 3
    retry_backoff_seconds: float = 1.0
