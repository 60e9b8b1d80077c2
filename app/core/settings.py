"""
Core settings and environment variables for the Balagh reports backend.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Balagh Reports Hub"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - dashboard URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    FIREBASE_STORAGE_BUCKET: Optional[str] = None  # Required for image uploads

    # In-memory store for local development without Firebase credentials
    USE_MOCK_DB: bool = False

    REPORTS_COLLECTION: str = "reports"
    SETTINGS_COLLECTION: str = "settings"
    USERS_COLLECTION: str = "users"

    # Reverse geocoding
    # - GEOCODING_PROVIDER: "opencage" (default, needs GEOPROXY_KEY), "nominatim" or "none"
    GEOCODING_PROVIDER: str = "opencage"
    GEOPROXY_KEY: Optional[str] = None
    GEOCODING_LANGUAGE: str = "en"
    GEOCODING_TIMEOUT_SECONDS: float = 3.0

    # WhatsApp Cloud API (notification on "processing")
    WHATSAPP_ACCESS_TOKEN: Optional[str] = None
    WHATSAPP_PHONE_NUMBER_ID: Optional[str] = None
    WHATSAPP_API_BASE: str = "https://graph.facebook.com/v22.0"
    WHATSAPP_TIMEOUT_SECONDS: float = 5.0

    # Object storage
    STORAGE_TIMEOUT_SECONDS: float = 30.0

    # Listing
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    def cors_origins_list(self) -> List[str]:
        raw = self.CORS_ORIGINS or ""
        return [x.strip().rstrip("/") for x in raw.split(",") if x.strip()]


# Global settings instance
settings = Settings()
