# ==================================================================================
# core/config.py: FastAPI Configuration (SQLModel store + SendGrid + Pydantic v2)
# ==================================================================================
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import EmailStr, ValidationError
import sys


class Settings(BaseSettings):
    # ------------------------
    # DATABASE CONFIG
    # ------------------------
    # File-backed SQLite by default; point at a real database in production.
    DATABASE_URL: str = "sqlite:///./receipt_portal.db"

    # ------------------------
    # SECURITY CONFIG
    # ------------------------
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    SESSION_EXPIRE_HOURS: int = 24

    # ------------------------
    # SUBSCRIPTION CONFIG
    # ------------------------
    TRIAL_DAYS: int = 30

    # ------------------------
    # SENDGRID EMAIL CONFIG
    # ------------------------
    SENDGRID_API_KEY: Optional[str] = None
    MAIL_FROM: Optional[EmailStr] = None  # Example: "noreply@receiptcapture.com"

    # ------------------------
    # CORS CONFIG
    # ------------------------
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # ------------------------
    # ENVIRONMENT SETTINGS
    # ------------------------
    ENVIRONMENT: str = "development"  # 'development' | 'production' | 'test'
    LOG_LEVEL: str = "INFO"
    SEED_DEMO_DATA: bool = False

    @property
    def IS_PRODUCTION(self) -> bool:
        """True when ENVIRONMENT is production"""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def EMAIL_ENABLED(self) -> bool:
        """SendGrid is used only when both the key and the sender are set"""
        return bool(self.SENDGRID_API_KEY and self.MAIL_FROM)

    # ------------------------
    # Pydantic v2 Settings
    # ------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# ------------------------
# Global Settings Loader
# ------------------------
try:
    settings = Settings()
except ValidationError as e:
    print("❌ Portal configuration error: missing or invalid settings (is SECRET_KEY set?)")
    print(e)
    sys.exit(1)
