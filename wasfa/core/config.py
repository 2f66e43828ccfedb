from functools import lru_cache

from pydantic import EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "local"
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Security
    secret_key: str = "changeme"  # override in .env
    access_token_expire_minutes: int = 60
    password_reset_expire_hours: int = 1

    # Database
    database_url: str

    # Clinic defaults
    trial_days: int = 14
    default_language: str = "fr"

    # Email
    email_from: EmailStr = "no-reply@example.com"
    email_backend: str = "smtp"
    email_smtp_host: str = "localhost"
    email_smtp_port: int = 1025
    email_smtp_username: str | None = None
    email_smtp_password: str | None = None
    email_sandbox_mode: bool = True
    email_test_recipient: EmailStr | None = None
    resend_api_key: str | None = None
    frontend_url: str = "http://localhost:5173"

    # File storage
    file_storage_root: str = "uploads"
    signed_url_expire_seconds: int = 3600
    max_upload_bytes: int = 2 * 1024 * 1024

    # PDF documents: TTF font with Arabic glyphs (system fonts are searched when unset)
    pdf_font_path: str | None = None

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance so the .env is parsed once.
    """
    return Settings()
