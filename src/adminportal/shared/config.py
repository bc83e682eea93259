"""
Centralized configuration for the admin portal access layer.

- Frozen dataclass loaded from OS env (plus a repo-level .env via python-dotenv).
- Validation in __post_init__.
- Immutable singleton via functools.lru_cache.
- Secrets never logged (masked).
"""

from __future__ import annotations

import functools
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, cast
from urllib.parse import urlparse

from dotenv import load_dotenv

# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------
def _mask_secret(value: Optional[str]) -> str:
    if not value:
        return "<unset>"
    if len(value) <= 8:
        return "***"
    return value[:2] + "…" + value[-2:]


def _get_env_str(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    v = os.getenv(key, default)
    if required and (v is None or str(v).strip() == ""):
        raise ValueError(f"Missing required env var: {key}")
    return v


def _get_env_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None:
        return default
    v = v.strip().lower()
    return v in {"1", "true", "t", "yes", "y", "on"}


def _get_env_int(key: str, default: int) -> int:
    v = os.getenv(key)
    if v is None or v.strip() == "":
        return default
    try:
        return int(v)
    except ValueError:
        raise ValueError(f"Env var {key} must be an integer")


def _get_env_csv(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    v = os.getenv(key)
    if v is None or v.strip() == "":
        return default
    return tuple(part.strip() for part in v.split(",") if part.strip())


def _validate_choice(value: str, *, choices: tuple[str, ...], key: str) -> str:
    if value not in choices:
        raise ValueError(f"{key} must be one of {choices}, got {value!r}")
    return value


def _validate_url(value: Optional[str], *, key: str, allowed_schemes: tuple[str, ...]) -> Optional[str]:
    if value in (None, ""):
        return None
    parsed = urlparse(value)
    if parsed.scheme not in allowed_schemes or not parsed.netloc:
        raise ValueError(f"{key} must be a valid URL with scheme in {allowed_schemes}")
    return value


_DSN_PREFIXES = ("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")


def _validate_database_dsn(value: str, *, key: str) -> str:
    if not value.startswith(_DSN_PREFIXES):
        raise ValueError(f"{key} must start with one of {_DSN_PREFIXES}")
    # async engine needs the asyncpg driver
    if value.startswith("postgresql://"):
        value = "postgresql+asyncpg://" + value[len("postgresql://"):]
    return value


# ------------------------------------------------------------------------------
# Settings dataclass (immutable)
# ------------------------------------------------------------------------------
EnvName = Literal["local", "dev", "test", "staging", "prod"]
LogFormat = Literal["json", "console"]

DEFAULT_LEGACY_SESSION_COOKIES = ("portal.session-token", "__Secure-portal.session-token")


@dataclass(frozen=True)
class Settings:
    # Environment
    environment: EnvName = "local"
    debug: bool = False

    # Database
    database_url: str = field(default="")
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_auto_create: bool = False

    # Legacy session store
    redis_url: Optional[str] = None
    legacy_session_cookie_names: tuple[str, ...] = DEFAULT_LEGACY_SESSION_COOKIES
    legacy_session_key_prefix: str = "portal:session:"

    # Primary session token
    jwt_secret: str = field(default="")
    jwt_algorithm: str = "HS256"
    session_cookie_name: str = "auth-token"
    session_expiry_days: int = 7

    # External API key gate
    api_key: Optional[str] = None
    api_key_header: str = "x-api-key"
    api_key_query_param: str = "apiKey"
    api_key_query_param_enabled: bool = True

    # External identity provider
    external_auth_url: Optional[str] = None
    external_auth_timeout_seconds: int = 10
    external_auth_default_tenant_id: Optional[str] = None

    # Observability
    log_level: str = "INFO"
    log_format: Optional[LogFormat] = None

    # Derived/computed flags (filled in __post_init__)
    is_prod: bool = field(init=False)
    is_staging: bool = field(init=False)
    is_local: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "environment",
            _validate_choice(self.environment, choices=("local", "dev", "test", "staging", "prod"), key="ENVIRONMENT"),
        )
        object.__setattr__(
            self, "jwt_algorithm",
            _validate_choice(self.jwt_algorithm, choices=("HS256", "HS384", "HS512"), key="JWT_ALGORITHM"),
        )
        if self.log_format is not None:
            _validate_choice(self.log_format, choices=("json", "console"), key="LOG_FORMAT")

        object.__setattr__(self, "database_url", _validate_database_dsn(self.database_url, key="DATABASE_URL"))
        if self.redis_url:
            _validate_url(self.redis_url, key="REDIS_URL", allowed_schemes=("redis", "rediss"))
        _validate_url(self.external_auth_url, key="EXTERNAL_AUTH_URL", allowed_schemes=("http", "https"))

        if not self.jwt_secret or not self.jwt_secret.strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        if self.session_expiry_days <= 0:
            raise ValueError("SESSION_EXPIRY_DAYS must be > 0")
        if not self.session_cookie_name:
            raise ValueError("SESSION_COOKIE_NAME must be non-empty")
        if not self.api_key_header:
            raise ValueError("API_KEY_HEADER must be non-empty")
        if self.api_key is not None and not self.api_key.strip():
            # blank counts as not configured
            object.__setattr__(self, "api_key", None)

        if not re.fullmatch(r"(?i)DEBUG|INFO|WARNING|ERROR|CRITICAL", self.log_level.strip()):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")

        env = self.environment
        object.__setattr__(self, "is_prod", env == "prod")
        object.__setattr__(self, "is_staging", env == "staging")
        object.__setattr__(self, "is_local", env in ("local", "dev", "test"))

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_expiry_days * 24 * 60 * 60

    # Safe dict (for debug prints without secrets)
    def safe_dict(self) -> dict:
        return {
            "environment": self.environment,
            "debug": self.debug,
            "database_url": "<masked>" if self.database_url else "<unset>",
            "database_pool_size": self.database_pool_size,
            "database_max_overflow": self.database_max_overflow,
            "database_auto_create": self.database_auto_create,
            "redis_url": "<masked>" if self.redis_url else "<unset>",
            "legacy_session_cookie_names": list(self.legacy_session_cookie_names),
            "jwt_secret": _mask_secret(self.jwt_secret),
            "jwt_algorithm": self.jwt_algorithm,
            "session_cookie_name": self.session_cookie_name,
            "session_expiry_days": self.session_expiry_days,
            "api_key": _mask_secret(self.api_key),
            "api_key_header": self.api_key_header,
            "api_key_query_param_enabled": self.api_key_query_param_enabled,
            "external_auth_url": self.external_auth_url or "<unset>",
            "external_auth_default_tenant_id": self.external_auth_default_tenant_id or "<unset>",
            "log_level": self.log_level,
            "log_format": self.log_format or "<auto>",
        }


# ------------------------------------------------------------------------------
# Loader (singleton)
# ------------------------------------------------------------------------------
def load_settings() -> Settings:
    """Build Settings from the process environment (no caching)."""
    return Settings(
        environment=cast(EnvName, _get_env_str("ENVIRONMENT", "local") or "local"),
        debug=_get_env_bool("DEBUG", False),
        database_url=_get_env_str("DATABASE_URL", required=True) or "",
        database_pool_size=_get_env_int("DATABASE_POOL_SIZE", 5),
        database_max_overflow=_get_env_int("DATABASE_MAX_OVERFLOW", 10),
        database_auto_create=_get_env_bool("DATABASE_AUTO_CREATE", False),
        redis_url=_get_env_str("REDIS_URL", None),
        legacy_session_cookie_names=_get_env_csv("LEGACY_SESSION_COOKIE_NAMES", DEFAULT_LEGACY_SESSION_COOKIES),
        legacy_session_key_prefix=_get_env_str("LEGACY_SESSION_KEY_PREFIX", "portal:session:") or "portal:session:",
        jwt_secret=_get_env_str("JWT_SECRET", required=True) or "",
        jwt_algorithm=_get_env_str("JWT_ALGORITHM", "HS256") or "HS256",
        session_cookie_name=_get_env_str("SESSION_COOKIE_NAME", "auth-token") or "auth-token",
        session_expiry_days=_get_env_int("SESSION_EXPIRY_DAYS", 7),
        api_key=_get_env_str("API_KEY", None),
        api_key_header=_get_env_str("API_KEY_HEADER", "x-api-key") or "x-api-key",
        api_key_query_param=_get_env_str("API_KEY_QUERY_PARAM", "apiKey") or "apiKey",
        api_key_query_param_enabled=_get_env_bool("API_KEY_QUERY_PARAM_ENABLED", True),
        external_auth_url=_get_env_str("EXTERNAL_AUTH_URL", None),
        external_auth_timeout_seconds=_get_env_int("EXTERNAL_AUTH_TIMEOUT_SECONDS", 10),
        external_auth_default_tenant_id=_get_env_str("EXTERNAL_AUTH_DEFAULT_TENANT_ID", None),
        log_level=_get_env_str("LOG_LEVEL", "INFO") or "INFO",
        log_format=cast(Optional[LogFormat], _get_env_str("LOG_FORMAT", None)),
    )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    # .env at the repo root (../../../.env relative to this file)
    env_file = Path(__file__).resolve().parents[3] / ".env"
    if env_file.exists():
        load_dotenv(dotenv_path=str(env_file), override=False)
    return load_settings()
