"""Runtime configuration for the API, read from environment variables."""

import os
from dataclasses import dataclass

from rolodex.domain import ConfigError
from rolodex.infrastructure.credentials import API_USERS_FILE_KEY, DEFAULT_API_USERS_FILE
from rolodex.infrastructure.validation import (
    APILAYER_BASE_URL,
    APILAYER_BASE_URL_KEY,
    APILAYER_KEY_KEY,
)

BACKEND_SQL = "sql"
BACKEND_MEMORY = "memory"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Which backend to use and which optional checks are switched on."""

    backend: str = BACKEND_MEMORY
    database_url: str | None = None
    auth_enabled: bool = False
    api_users_file: str = DEFAULT_API_USERS_FILE
    phone_validation_enabled: bool = False
    apilayer_key: str | None = None
    apilayer_base_url: str = APILAYER_BASE_URL


def _flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUE_VALUES


def load_settings() -> Settings:
    """Load settings from environment variables.

    CONTACTS_BACKEND defaults to "sql" when DATABASE_URL is set, else "memory".

    Raises:
        ConfigError: on an unknown backend, sql without DATABASE_URL, or phone
            validation without APILAYER_KEY.
    """
    database_url = os.environ.get("DATABASE_URL", "").strip() or None
    backend = os.environ.get("CONTACTS_BACKEND", "").strip().lower()
    if not backend:
        backend = BACKEND_SQL if database_url else BACKEND_MEMORY
    if backend not in (BACKEND_SQL, BACKEND_MEMORY):
        raise ConfigError(f"Unknown CONTACTS_BACKEND {backend!r}; use 'sql' or 'memory'.")
    if backend == BACKEND_SQL and not database_url:
        raise ConfigError("CONTACTS_BACKEND=sql requires DATABASE_URL.")

    phone_validation_enabled = _flag("PHONE_VALIDATION_ENABLED")
    apilayer_key = os.environ.get(APILAYER_KEY_KEY, "").strip() or None
    if phone_validation_enabled and not apilayer_key:
        raise ConfigError(f"PHONE_VALIDATION_ENABLED requires {APILAYER_KEY_KEY}.")

    return Settings(
        backend=backend,
        database_url=database_url,
        auth_enabled=_flag("AUTH_ENABLED"),
        api_users_file=os.environ.get(API_USERS_FILE_KEY, "").strip()
        or DEFAULT_API_USERS_FILE,
        phone_validation_enabled=phone_validation_enabled,
        apilayer_key=apilayer_key,
        apilayer_base_url=os.environ.get(APILAYER_BASE_URL_KEY, "").strip()
        or APILAYER_BASE_URL,
    )
