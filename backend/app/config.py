"""
Application configuration using Pydantic Settings.
All environment variables are loaded here with sensible defaults.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: str = "dev"
    log_level: str = "INFO"
    api_version: str = "1.0.0"

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = ["*"]

    # Google Drive
    # Path to a service account JSON file, or the JSON itself
    google_application_credentials: str = "./google-credentials.json"
    drive_scopes: List[str] = ["https://www.googleapis.com/auth/drive.file"]
    storage_timeout_seconds: float = 30.0

    # Daily folder naming: "<prefix>_<YYYY-MM-DD>"
    folder_prefix: str = "DugunAnilari"
    folder_timezone: str = "UTC"

    # Upload limits
    max_file_size_bytes: int = 10 * 1024 * 1024  # 10 MiB per file
    max_files: int = 10  # photos + audio
    max_audio_files: int = 1

    # Email notification (Gmail SMTP by default)
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    notification_recipient: Optional[str] = None  # Defaults to email_user
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    notification_timeout_seconds: float = 15.0

    # Echo underlying error messages to clients (trusted deployments only)
    expose_error_details: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
