"""Application settings loaded from environment variables.

Configuration file discovery (in priority order):
1. OS environment variables (always highest priority)
2. LEMON_ENV_FILE environment variable (path to .env file)
3. config/.env.dev - local development
4. config/.env - production/Docker

Uses pydantic-settings for automatic type coercion and validation.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Value of smtp_host that still selects the mock mail sender
MOCK_SMTP_HOST = "foo"

DEFAULT_CORS_METHODS = "GET,HEAD,POST,PUT,PATCH,DELETE,OPTIONS"
DEFAULT_CORS_HEADERS = (
    "Accept,Accept-Encoding,Accept-Language,Authorization,Cache-Control,"
    "Connection,Content-Length,Content-Type,Cookie,Host,Origin,Pragma,"
    "Referer,User-Agent,x-requested-with"
)
DEFAULT_CORS_EXPOSED_HEADERS = (
    "Cache-Control,Connection,Content-Type,Date,Expires,Pragma,Server,"
    "Set-Cookie,Transfer-Encoding,X-Content-Type-Options,X-XSS-Protection,"
    "X-Frame-Options,X-Application-Context"
)


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve().parent

    for parent in [current, *current.parents]:
        if (parent / "config").is_dir():
            return parent
        if (parent / ".git").is_dir():
            return parent
        if (parent / "pyproject.toml").is_file():
            return parent

    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Get the config directory path."""
    return _find_project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    """Resolve the .env file path.

    Priority:
    1. LEMON_ENV_FILE env var (full path)
    2. config/.env.dev (local development)
    3. config/.env (production)
    """
    env_file_path = os.environ.get("LEMON_ENV_FILE")
    if env_file_path:
        path = Path(env_file_path)
        if not path.is_absolute():
            path = _find_project_root() / path
        if path.exists():
            return path

    config_dir = get_config_dir()

    dev_env = config_dir / ".env.dev"
    if dev_env.exists():
        return dev_env

    prod_env = config_dir / ".env"
    if prod_env.exists():
        return prod_env

    return None


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Values are loaded from:
    1. OS environment variables (highest priority)
    2. .env file (config/.env.dev or config/.env)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Security (MUST be set - app fails without these)
    jwt_secret_key: SecretStr  # Active key for signing JWT tokens
    remember_me_key: SecretStr  # Active key for signing remember-me cookies

    # Application
    app_name: str = "Lemon"
    application_url: str = "http://localhost:9000"

    # Database
    database_url: str = "sqlite+aiosqlite:///./lemon.db"

    # API (API_ prefix)
    api_debug: bool = False
    api_cookie_secure: bool = True  # Secure cookies by default
    api_cookie_samesite: Literal["lax", "strict", "none"] = "strict"
    api_cookie_domain: str | None = None

    # JSON vulnerability prefix, on unless explicitly disabled
    json_prefix_enabled: bool = True

    # CORS (only configured when allowed origins are given)
    cors_allowed_origins: str = ""
    cors_allowed_methods: str = DEFAULT_CORS_METHODS
    cors_allowed_headers: str = DEFAULT_CORS_HEADERS
    cors_exposed_headers: str = DEFAULT_CORS_EXPOSED_HEADERS
    cors_max_age: int = 3600

    @field_validator(
        "cors_allowed_origins",
        "cors_allowed_methods",
        "cors_allowed_headers",
        "cors_exposed_headers",
        "jwt_previous_secret_keys",
        "remember_me_previous_keys",
        mode="before",
    )
    @classmethod
    def _validate_csv(cls, v: Any) -> str:
        """Ensure list-like settings are stored as comma-separated strings."""
        if isinstance(v, list):
            return ",".join(v)
        return str(v) if v else ""

    # JWT
    jwt_previous_secret_keys: str = ""  # Retired keys, still accepted
    jwt_access_token_expire_minutes: int = 60
    jwt_refresh_token_expire_days: int = 7

    # Remember-me
    remember_me_previous_keys: str = ""
    remember_me_validity_seconds: int = 14 * 24 * 60 * 60

    # reCAPTCHA (checks are skipped without a secret key)
    recaptcha_site_key: str = ""
    recaptcha_secret_key: SecretStr | None = None
    recaptcha_verify_url: str = "https://www.google.com/recaptcha/api/siteverify"
    recaptcha_timeout: float = 10.0

    # SMTP (SMTP_ prefix), mock mail sender without a host
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: SecretStr | None = None
    smtp_from_email: str = ""
    smtp_from_name: str = "Lemon"
    smtp_use_tls: bool = True
    smtp_starttls: bool = True

    # First admin, created at startup when both are set
    admin_email: str = ""
    admin_password: SecretStr | None = None

    # Redirect target for failed logins (JSON 401 when unset)
    auth_failure_url: str | None = None

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    # Computed properties
    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return _split_csv(self.cors_allowed_origins)

    @property
    def cors_methods(self) -> list[str]:
        return _split_csv(self.cors_allowed_methods)

    @property
    def cors_headers(self) -> list[str]:
        return _split_csv(self.cors_allowed_headers)

    @property
    def cors_expose_headers(self) -> list[str]:
        return _split_csv(self.cors_exposed_headers)

    @property
    def jwt_verification_keys(self) -> list[str]:
        """Active JWT key followed by the retired ones."""
        return [
            self.jwt_secret_key.get_secret_value(),
            *_split_csv(self.jwt_previous_secret_keys),
        ]

    @property
    def remember_me_verification_keys(self) -> list[str]:
        """Active remember-me key followed by the retired ones."""
        return [
            self.remember_me_key.get_secret_value(),
            *_split_csv(self.remember_me_previous_keys),
        ]

    @property
    def mail_enabled_smtp(self) -> bool:
        """Whether mails go out over SMTP rather than to the log."""
        host = self.smtp_host.strip()
        return bool(host) and host != MOCK_SMTP_HOST


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    Required fields (jwt_secret_key, remember_me_key) must be provided
    via environment variables or .env file.
    """
    return Settings()  # type: ignore[call-arg]  # pydantic-settings loads from env


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
