"""Server-level configuration from environment variables.

Contains everything the backend needs before the remote document is
available: where the document lives, how writes are batched, server
host/port, the administrator override login and the outbound email
provider. All fields have defaults, no .env file is required.

User-facing site settings (site name, maintenance mode, player defaults)
live inside the remote document itself, see models/site_settings.py.
"""

import secrets

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server infrastructure settings. Loaded from YUME_* environment variables; optionally from .env."""

    model_config = SettingsConfigDict(
        env_prefix="YUME_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote document store
    document_store_url: str = "https://api.jsonstorage.net/v1/json/yume/document"
    document_store_timeout: float = 15.0
    save_debounce_seconds: float = 1.5

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["http://localhost:4200", "http://127.0.0.1:4200"]

    # Administrator override login (empty username disables it)
    admin_username: str = ""
    admin_password: str = ""

    # Outbound email provider (EmailJS-compatible REST endpoint)
    email_api_url: str = "https://api.emailjs.com/api/v1.0/email/send"
    email_service_id: str = ""
    email_template_id: str = ""
    email_public_key: str = ""

    # Accounts
    public_origin: str = "http://localhost:4200"
    verification_token_ttl_hours: int = 24
    min_password_length: int = 6

    # Session cookie
    session_cookie_name: str = "yume_tv_currentUser"
    session_cookie_max_age_days: int = 365
    # Key for the signed session token; a random per-process key when unset,
    # which signs everyone out on restart
    session_secret: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    session_algorithm: str = "HS256"

    # Retry of the initial document load after a failure at startup
    load_retry_seconds: float = 5.0
    load_retry_max_seconds: float = 300.0


settings = Settings()
