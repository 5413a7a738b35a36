"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Supabase (storage + auth)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "resources"
    SIGNED_URL_TTL: int = 3600  # 1 hour

    # Gemini API (generation is disabled when the key is missing)
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_TEMPERATURE: float = 0.2

    # Extraction heuristics
    MIN_EXTRACTED_CHARS: int = 50
    MAX_PROMPT_CHARS: int = 100_000

    # Redis hot cache for generated artifacts
    REDIS_URL: Optional[str] = None
    ARTIFACT_CACHE_TTL: int = 3600

    # Paystack
    PAYSTACK_SECRET_KEY: str = ""
    PAYSTACK_BASE_URL: str = "https://api.paystack.co"
    PAYSTACK_TIMEOUT: float = 30.0

    # Subscriptions / rewards
    APP_URL: str = "http://localhost:3000"
    SUBSCRIPTIONS_ENABLED: bool = False
    DEFAULT_SUBSCRIPTION_DAYS: int = 120  # one semester
    QUIZ_COMPLETION_POINTS: int = 20

    # Application
    APP_NAME: str = "EduPal Study Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # Rate limiting (generation endpoint)
    RATE_LIMIT_PER_MINUTE: int = 10
    RATE_LIMIT_PER_HOUR: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
