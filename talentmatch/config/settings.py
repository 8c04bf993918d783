"""
Configuration settings for the TalentMatch AI backend.
Values come from the environment, with a .env file loaded first when present.
"""

import os
import logging
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Application settings and configuration management."""

    # Server Configuration
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    API_PREFIX: str = "/api/v1"

    # OpenAI API Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_TIMEOUT: float = float(os.getenv("OPENAI_TIMEOUT", "60"))

    # Hosted database (Postgres behind the backend-as-a-service)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DATABASE_SSL: str = os.getenv("DATABASE_SSL", "require")

    # Hosted object storage
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_SERVICE_ROLE_KEY: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    STORAGE_BUCKET: str = os.getenv("STORAGE_BUCKET", "documents")
    RESUME_FOLDER: str = os.getenv("RESUME_FOLDER", "resumes")
    STORAGE_CACHE_CONTROL: str = os.getenv("STORAGE_CACHE_CONTROL", "3600")

    # Resume Upload Configuration
    MAX_RESUME_UPLOAD_SIZE: int = int(os.getenv("MAX_RESUME_UPLOAD_SIZE", "5242880"))  # 5MB
    MAX_PDF_VALIDATION_SIZE: int = int(os.getenv("MAX_PDF_VALIDATION_SIZE", "10485760"))  # 10MB
    ALLOWED_RESUME_MIME_TYPES: List[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ]

    # Text Extraction Configuration
    MIN_EXTRACTED_TEXT_LENGTH: int = int(os.getenv("MIN_EXTRACTED_TEXT_LENGTH", "50"))
    RESUME_SUMMARY_WORD_LIMIT: int = int(os.getenv("RESUME_SUMMARY_WORD_LIMIT", "1000"))
    FETCH_TIMEOUT: float = float(os.getenv("FETCH_TIMEOUT", "30"))
    MAX_FETCH_SIZE: int = int(os.getenv("MAX_FETCH_SIZE", "10485760"))  # 10MB

    # OCR Configuration (EasyOCR only - pip-installable)
    OCR_LANGUAGE: str = os.getenv("OCR_LANGUAGE", "en")
    OCR_CONFIDENCE_THRESHOLD: float = float(os.getenv("OCR_CONFIDENCE_THRESHOLD", "0.5"))
    USE_GPU: bool = os.getenv("USE_GPU", "False").lower() == "true"

    # HTTP Configuration
    CORS_ORIGINS: List[str] = _split_csv(os.getenv("CORS_ORIGINS", "*"))
    AI_RATE_LIMIT: str = os.getenv("AI_RATE_LIMIT", "30/minute")

    # Application Configuration
    APP_NAME: str = "TalentMatch AI API"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Resume analysis, AI job matching and career assistant API"

    @classmethod
    def validate_settings(cls) -> bool:
        """
        Validate that all required settings are properly configured.

        Missing credentials only produce warnings so the API can still start
        and report what is missing through /setup-check.

        Returns:
            bool: True once validation has run
        """
        if not cls.OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY not set. AI endpoints will not work.")

        if not cls.DATABASE_URL:
            logger.warning("DATABASE_URL not set. Profile updates and analyses cannot be stored.")

        if not cls.SUPABASE_URL or not cls.SUPABASE_SERVICE_ROLE_KEY:
            logger.warning("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not set. Resume storage is unavailable.")

        return True


# Create settings instance
settings = Settings()
