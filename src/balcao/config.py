"""
Utilities to centralize configuration handling across the balcao services.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Simple container for application level settings."""

    app_name: str
    # PostgreSQL/Supabase database
    db_host: str
    db_port: int
    db_user: str
    db_password: str
    db_name: str
    db_sslmode: str
    # Supabase
    supabase_url: str
    supabase_service_role_key: str
    # Storage
    storage_bucket_banners: str
    storage_bucket_logos: str
    # Public links (online store / kitchen monitor)
    public_base_url: str
    # Reports
    report_timezone: str
    currency_symbol: str
    # App settings
    secret_key: str
    log_level: str
    debug_mode: bool
    flask_debug: bool

    @property
    def sqlalchemy_uri(self) -> str:
        """
        Build a SQLAlchemy PostgreSQL URI using psycopg2 as the driver.

        Includes SSL mode for Supabase connections.
        """
        ssl_arg = f"?sslmode={self.db_sslmode}" if self.db_sslmode else ""
        return (
            f"postgresql+psycopg2://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}{ssl_arg}"
        )


def _read_env(name: str, default: str | None = None) -> str:
    """
    Internal helper to fetch environment variables with support for defaults.
    """
    value = os.getenv(name)
    if value is None:
        if default is None:
            raise RuntimeError(f"Missing required environment variable '{name}'")
        value = default
    return value


def read_bool(name: str, default: str = "false") -> bool:
    value = _read_env(name, default)
    return value.strip().lower() in {"1", "true", "yes", "on"}


def validate_required_env_vars(skip_in_debug: bool = False) -> None:
    """
    Validate that all required environment variables are set.

    Fails fast during startup rather than on the first request that needs the
    database. When DATABASE_URL is provided the POSTGRES_* variables are not
    required.

    Args:
        skip_in_debug: If True, skip validation when DEBUG_MODE=true

    Raises:
        RuntimeError: If any required variable is missing or has an invalid value
    """
    if skip_in_debug and read_bool("DEBUG_MODE", "false"):
        return

    errors = []

    secret_key = os.getenv("SECRET_KEY", "")
    if not secret_key or secret_key in ["change-me-please", "super-secret-change-me"]:
        errors.append(
            "SECRET_KEY must be configured with a secure random value. "
            'Generate with: python3 -c "import secrets; print(secrets.token_urlsafe(32))"'
        )

    if not os.getenv("DATABASE_URL"):
        for name in ("POSTGRES_HOST", "POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB"):
            if not os.getenv(name, ""):
                errors.append(f"{name} must be configured (or set DATABASE_URL)")

    port = os.getenv("POSTGRES_PORT", "")
    if port:
        try:
            int(port)
        except ValueError:
            errors.append(f"POSTGRES_PORT must be a valid integer, got: {port}")

    if errors:
        error_msg = "\nConfiguration errors - missing or invalid environment variables:\n"
        for error in errors:
            error_msg += f"  - {error}\n"
        raise RuntimeError(error_msg)


def load_config(app_name: str) -> AppConfig:
    """
    Produce an AppConfig instance populated from environment variables.

    Each service passes its desired `app_name` to keep logs easy to
    differentiate while still reusing the same config loader.
    """
    return AppConfig(
        app_name=app_name,
        db_host=_read_env("POSTGRES_HOST", "localhost"),
        db_port=int(_read_env("POSTGRES_PORT", "5432")),
        db_user=_read_env("POSTGRES_USER", "postgres"),
        db_password=_read_env("POSTGRES_PASSWORD", "postgres"),
        db_name=_read_env("POSTGRES_DB", "postgres"),
        db_sslmode=_read_env("POSTGRES_SSLMODE", "require"),
        supabase_url=_read_env("SUPABASE_URL", ""),
        supabase_service_role_key=_read_env("SUPABASE_SERVICE_ROLE_KEY", ""),
        storage_bucket_banners=_read_env("STORAGE_BUCKET_BANNERS", "banners"),
        storage_bucket_logos=_read_env("STORAGE_BUCKET_LOGOS", "store-logos"),
        public_base_url=_read_env("PUBLIC_BASE_URL", "http://localhost:8080").rstrip("/"),
        report_timezone=_read_env("REPORT_TIMEZONE", "America/Sao_Paulo"),
        currency_symbol=_read_env("CURRENCY_SYMBOL", "R$"),
        secret_key=_read_env("SECRET_KEY", "super-secret-change-me"),
        log_level=_read_env("LOG_LEVEL", "INFO"),
        debug_mode=read_bool("DEBUG_MODE", "false"),
        flask_debug=read_bool("FLASK_DEBUG", "false"),
    )
