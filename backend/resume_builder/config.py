from pydantic_settings import BaseSettings
from functools import lru_cache
import os


class Settings(BaseSettings):
    app_name: str = "Resume Builder API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = "INFO"

    # Database - supports both SQLite (local) and PostgreSQL (production)
    database_url: str = "sqlite+aiosqlite:///./resume_builder.db"

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # AI/LLM Configuration
    gemini_api_key: str = ""
    gemini_api_keys: str = ""  # comma-separated, takes precedence over gemini_api_key
    gemini_model: str = "gemini-2.0-flash"
    ai_request_timeout: float = 30.0  # seconds
    ai_retry_attempts: int = 3
    ai_retry_delay: float = 1.0  # seconds, doubled after every failed attempt
    ai_cache_ttl_seconds: int = 1800
    ai_cache_max_entries: int = 256
    ai_max_prompt_chars: int = 30000
    ai_vision_fallback: bool = True  # send page images when a PDF has no text layer

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB
    min_upload_bytes: int = 100
    max_pdf_pages: int = 10

    class Config:
        env_file = ".env"
        extra = "ignore"
        # Make field names case-insensitive for environment variables
        case_sensitive = False

    def get_cors_origins(self) -> list:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def get_gemini_api_keys(self) -> list:
        """All configured Gemini keys, multi-key setting first."""
        raw = self.gemini_api_keys or self.gemini_api_key
        return [key.strip() for key in raw.split(",") if key.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
