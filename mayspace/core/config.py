"""
May Space Application Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "May Space API"
    PROJECT_DESCRIPTION: str = "Rental unit marketplace - listings, bookings and inquiries"
    VERSION: str = "1.0.0"

    # ==================== Database ====================
    # DATABASE_URL wins; otherwise the DB_* parts build a MySQL URL,
    # otherwise a local SQLite file is used.
    DATABASE_URL: str = ""
    DB_DRIVER: str = "mysql+pymysql"
    DB_HOST: str = ""
    DB_USER: str = ""
    DB_PASS: str = ""
    DB_NAME: str = ""
    DB_PORT: int = 3307

    # ==================== Database Connection Pool ====================
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600

    # ==================== CORS ====================
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "https://may-space.onrender.com",
    ]

    # ==================== Server Configuration ====================
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # ==================== Uploads ====================
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_IMAGES_PER_UNIT: int = 10
    MAX_IMAGE_SIZE_MB: int = 10

    # ==================== Security ====================
    BCRYPT_ROUNDS: int = 10
    OTP_TTL_MINUTES: int = 10
    RESET_HIDE_UNKNOWN_EMAIL: bool = False

    # ==================== Email Configuration ====================
    EMAIL_FROM: str = ""
    AUDIT_EMAIL: str = ""
    GMAIL_CLIENT_ID: str = ""
    GMAIL_CLIENT_SECRET: str = ""
    GMAIL_REFRESH_TOKEN: str = ""
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_SECURE: bool = True
    SMTP_USER: str = ""
    SMTP_PASS: str = ""
    MAIL_TIMEOUT_SECONDS: float = 10.0

    # ==================== Features ====================
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
    )

    # ==================== Properties ====================
    @property
    def database_url(self) -> str:
        """Resolve the SQLAlchemy URL from DATABASE_URL or the DB_* parts"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_HOST and self.DB_NAME:
            return (
                f"{self.DB_DRIVER}://{self.DB_USER}:{self.DB_PASS}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )
        return "sqlite:///./mayspace.db"

    @property
    def mail_sender(self) -> str:
        return self.EMAIL_FROM or self.SMTP_USER

    @property
    def gmail_configured(self) -> bool:
        return bool(self.GMAIL_CLIENT_ID and self.GMAIL_CLIENT_SECRET and self.GMAIL_REFRESH_TOKEN)

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_USER and self.SMTP_PASS)

    @property
    def max_image_size_bytes(self) -> int:
        return self.MAX_IMAGE_SIZE_MB * 1024 * 1024


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()


def is_sqlite(url: Optional[str] = None) -> bool:
    return (url or settings.database_url).startswith("sqlite")
