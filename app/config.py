"""
Global configuration settings for the solar analysis relay.

Combines OCR, LLM, upload storage and logging options into one centralized
module. All settings can be overridden via environment variables or a `.env`
file.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings

from app.exceptions import ConfigurationError


class Settings(BaseSettings):
    # ==== OCR (OCR.space) ====
    OCR_API_KEY: str = ""
    OCR_API_URL: str = "https://api.ocr.space/parse/image"
    OCR_LANGUAGE: str = "eng"
    OCR_FILETYPE: str = "pdf"
    OCR_IS_TABLE: bool = True

    # ==== LLM (Anthropic Messages API) ====
    CLAUDE_API_KEY: str = ""
    ANTHROPIC_BASE_URL: str = "https://api.anthropic.com"
    ANTHROPIC_VERSION: str = "2023-06-01"
    CLAUDE_MODEL: str = "claude-3-7-sonnet-20250219"
    CLAUDE_MAX_TOKENS: int = 4000

    # Applies to both providers; long analyses can take minutes
    HTTP_TIMEOUT_SECONDS: float = 300.0

    # Refuse to start when a provider key is missing
    REQUIRE_API_KEYS: bool = True

    # ==== Paths ====
    UPLOAD_DIR: str = "uploads"

    # ==== Server ====
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: List[str] = ["*"]

    # ==== Logging ====
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def missing_api_keys(self) -> List[str]:
        """Names of the provider credentials that are not set."""
        missing = []
        if not self.OCR_API_KEY:
            missing.append("OCR_API_KEY")
        if not self.CLAUDE_API_KEY:
            missing.append("CLAUDE_API_KEY")
        return missing

    def validate_credentials(self) -> None:
        """
        Fail fast when provider credentials are absent.

        Without this check a missing key only shows up as an authentication
        failure from the provider on the first request.
        """
        if not self.REQUIRE_API_KEYS:
            return
        missing = self.missing_api_keys()
        if missing:
            raise ConfigurationError(
                f"Missing required settings: {', '.join(missing)}. "
                "Set them in the environment or .env, or set REQUIRE_API_KEYS=false."
            )


@lru_cache
def get_settings() -> Settings:
    """Helper to get the process-wide settings instance."""
    return Settings()
