"""Конфигурация Analyze Service."""
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Настройки приложения из .env"""

    # Service
    SERVICE_NAME: str = "analyze_service"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # API keys
    GOOGLE_TRANSLATE_API_KEY: str = ""
    GOOGLE_VISION_API_KEY: str = ""
    CLOUDMERSIVE_API_KEY: str = ""
    HUGGING_FACE_API_KEY: str = ""

    # Provider endpoints
    GOOGLE_TRANSLATE_URL: str = "https://translation.googleapis.com/language/translate/v2"
    GOOGLE_VISION_URL: str = "https://vision.googleapis.com/v1"
    CLOUDMERSIVE_URL: str = "https://api.cloudmersive.com"
    HUGGING_FACE_URL: str = "https://api-inference.huggingface.co/models"
    HUGGING_FACE_MODEL: str = "cardiffnlp/twitter-xlm-roberta-base-sentiment"

    # Режимы (варианты обработчика)
    OCR_PROVIDER: Literal["google", "cloudmersive"] = "google"
    OCR_PDF_FALLBACK: bool = True
    SENTIMENT_PROVIDER: Literal["huggingface", "cloudmersive"] = "huggingface"
    TRANSLATION_FAILURE_MODE: Literal["degrade", "strict"] = "degrade"

    # Object storage (S3-совместимый, GCS через interoperability endpoint)
    GOOGLE_CLOUD_PROJECT_ID: str = ""
    STORAGE_ENDPOINT: str = "storage.googleapis.com"
    STORAGE_ACCESS_KEY: str = ""
    STORAGE_SECRET_KEY: str = ""
    STORAGE_SECURE: bool = True
    STORAGE_BUCKET: str = ""

    # PDF OCR (async batch)
    OCR_POLL_ATTEMPTS: int = 30
    OCR_POLL_INTERVAL: float = 2.0
    OCR_BATCH_SIZE: int = 2

    # Timeouts
    TIMEOUT_TRANSLATE: int = 30
    TIMEOUT_OCR: int = 120
    TIMEOUT_SENTIMENT: int = 60

    # Request defaults
    DEFAULT_SOURCE_LANGUAGE: str = "auto"
    DEFAULT_TARGET_LANGUAGE: str = "ru"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def ocr_bucket(self) -> str:
        """Bucket для временных файлов OCR."""
        if self.STORAGE_BUCKET:
            return self.STORAGE_BUCKET
        if self.GOOGLE_CLOUD_PROJECT_ID:
            return f"{self.GOOGLE_CLOUD_PROJECT_ID}-ocr-temp"
        return ""


config = Settings()
