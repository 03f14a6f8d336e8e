"""
Application configuration management
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Google Gemini (generative extraction)
    GOOGLE_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # OpenAI (speech-to-text and recitation fallback)
    OPENAI_API_KEY: str = ""
    OPENAI_FALLBACK_MODEL: str = "gpt-4o-mini"
    TRANSCRIPTION_MODEL: str = "gpt-4o-mini-transcribe"

    # Paprika recipe manager
    PAPRIKA_EMAIL: str = ""
    PAPRIKA_PASSWORD: str = ""
    PAPRIKA_API_URL: str = "https://www.paprikaapp.com/api/v1"

    # RapidAPI video download services
    RAPIDAPI_KEY: str = ""
    TIKTOK_API_HOST: str = "tiktok-download-video-no-watermark.p.rapidapi.com"
    INSTAGRAM_API_HOST: str = "instagram-reels-downloader2.p.rapidapi.com"

    # Application
    APP_ENV: str = "development"
    APP_NAME: str = "Recipe Inbox"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Uvicorn Workers (0 = auto-calculate based on CPU cores)
    UVICORN_WORKERS: int = 0

    # Raw upload bodies (images, PDFs, emails)
    MAX_UPLOAD_SIZE_MB: int = 25

    # Extraction pipeline
    HTML_CHAR_LIMIT: int = 50_000
    URL_FETCH_TIMEOUT: float = 30.0
    VIDEO_FETCH_TIMEOUT: float = 120.0
    PROCESS_ITEMS_CONCURRENTLY: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    # Error reporting (disabled when empty)
    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 1.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.APP_ENV == "production"

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
