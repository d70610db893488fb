"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
application starts without any configuration in development.  In a
production deployment you should at least override ``SECRET_KEY`` and
``DATABASE_URL``.
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Pet Rescue API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_bool("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Signing key for API tokens, admin session cookies and password
    # reset codes.
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    reset_token_expire_minutes: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "60"))

    # Admin session cookie.  ``session_expire_days`` is the lifetime of a
    # "remember me" cookie; without it the cookie lives for the browser
    # session only.
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "petrescue_session")
    session_expire_days: int = int(os.getenv("SESSION_EXPIRE_DAYS", "10"))
    session_cookie_secure: bool = _env_bool("SESSION_COOKIE_SECURE", "false")

    # Account lockout after repeated failed sign-ins.
    max_failed_logins: int = int(os.getenv("MAX_FAILED_LOGINS", "10"))
    lockout_minutes: int = int(os.getenv("LOCKOUT_MINUTES", "30"))

    # Whether ``/admin/register`` may create new administrator accounts.
    allow_admin_registration: bool = _env_bool("ALLOW_ADMIN_REGISTRATION", "true")

    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "6"))

    # Comma-separated list of origins allowed to call the JSON API from a
    # browser.
    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:5128")

    # Path to the SQLite database.  A relative path is resolved relative
    # to the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "pet_rescue.db")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
