from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

PRINCIPAL_ENV_PREFIXES = ("SUPER_ADMIN", "RESTAURANT", "WORKER")
SUPPORTED_STORAGE_BACKENDS = {"local", "s3"}
SUPPORTED_COOKIE_SAMESITE = {"lax", "strict", "none"}

DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES = 24 * 60
DEFAULT_REFRESH_TOKEN_EXPIRE_MINUTES = {
    "SUPER_ADMIN": 2 * 24 * 60,
    "RESTAURANT": 10 * 24 * 60,
    "WORKER": 10 * 24 * 60,
}


def _split_csv(value: str | None) -> tuple[str, ...]:
    if not value:
        return tuple()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env(name: str) -> str | None:
    raw_value = os.getenv(name)
    if raw_value is None:
        return None
    normalized = raw_value.strip()
    return normalized or None


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _secret_env_names() -> list[str]:
    names: list[str] = []
    for prefix in PRINCIPAL_ENV_PREFIXES:
        names.append(f"{prefix}_ACCESS_TOKEN_SECRET")
        names.append(f"{prefix}_REFRESH_TOKEN_SECRET")
    return names


def _expiry_env_names() -> list[str]:
    names: list[str] = []
    for prefix in PRINCIPAL_ENV_PREFIXES:
        names.append(f"{prefix}_ACCESS_TOKEN_EXPIRE_MINUTES")
        names.append(f"{prefix}_REFRESH_TOKEN_EXPIRE_MINUTES")
    return names


def collect_missing_required_env_vars() -> list[str]:
    missing: list[str] = []

    always_required = ("MONGO_URL", "DB_NAME", *_secret_env_names())
    for var_name in always_required:
        if _env(var_name) is None:
            missing.append(var_name)

    storage_backend = (_env("STORAGE_BACKEND") or "local").lower()
    if storage_backend == "s3" and _env("S3_BUCKET_NAME") is None:
        missing.append("S3_BUCKET_NAME")

    return sorted(set(missing))


def collect_invalid_env_values() -> list[str]:
    invalid_values: list[str] = []

    storage_backend = (_env("STORAGE_BACKEND") or "local").lower()
    if storage_backend not in SUPPORTED_STORAGE_BACKENDS:
        invalid_values.append("STORAGE_BACKEND must be one of: local, s3")

    samesite = (_env("COOKIE_SAMESITE") or "lax").lower()
    if samesite not in SUPPORTED_COOKIE_SAMESITE:
        invalid_values.append("COOKIE_SAMESITE must be one of: lax, strict, none")

    for var_name in (*_expiry_env_names(), "MAX_IMAGE_SIZE_BYTES"):
        raw = _env(var_name)
        if raw is None:
            continue
        try:
            if int(raw) <= 0:
                raise ValueError("must be positive")
        except ValueError:
            invalid_values.append(f"{var_name} must be a positive integer")

    # every signing secret is unique across kinds and token types
    secrets = [(name, _env(name)) for name in _secret_env_names()]
    seen: dict[str, str] = {}
    for name, value in secrets:
        if value is None:
            continue
        if value in seen:
            invalid_values.append(f"{name} must differ from {seen[value]}")
        else:
            seen[value] = name

    return invalid_values


def validate_required_environment() -> None:
    missing_vars = collect_missing_required_env_vars()
    invalid_values = collect_invalid_env_values()
    if not missing_vars and not invalid_values:
        return

    message_lines = ["Application startup blocked by invalid environment configuration."]
    if missing_vars:
        message_lines.append("")
        message_lines.append("Missing required environment variables:")
        message_lines.extend(f"- {name}" for name in missing_vars)
    if invalid_values:
        message_lines.append("")
        message_lines.append("Invalid environment values:")
        message_lines.extend(f"- {message}" for message in invalid_values)
    raise RuntimeError("\n".join(message_lines))


@dataclass(frozen=True)
class TokenSettings:
    access_secret: str
    refresh_secret: str
    access_expire_minutes: int
    refresh_expire_minutes: int


@dataclass(frozen=True)
class Settings:
    env: str
    mongo_url: str
    db_name: str
    super_admin_tokens: TokenSettings
    restaurant_tokens: TokenSettings
    worker_tokens: TokenSettings
    cookie_secure: bool
    cookie_samesite: str
    cors_origins: tuple[str, ...]
    debug_include_error_details: bool
    log_level: str
    storage_backend: str
    storage_local_root: str
    media_base_url: str
    s3_bucket_name: str | None
    s3_region: str | None
    s3_endpoint_url: str | None
    max_image_size_bytes: int
    rate_limit_storage_url: str
    role_rate_limits: str | None

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


def _token_settings(prefix: str) -> TokenSettings:
    return TokenSettings(
        access_secret=os.environ[f"{prefix}_ACCESS_TOKEN_SECRET"].strip(),
        refresh_secret=os.environ[f"{prefix}_REFRESH_TOKEN_SECRET"].strip(),
        access_expire_minutes=int(
            _env(f"{prefix}_ACCESS_TOKEN_EXPIRE_MINUTES") or DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES
        ),
        refresh_expire_minutes=int(
            _env(f"{prefix}_REFRESH_TOKEN_EXPIRE_MINUTES") or DEFAULT_REFRESH_TOKEN_EXPIRE_MINUTES[prefix]
        ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    validate_required_environment()

    return Settings(
        env=os.getenv("ENV", "development"),
        mongo_url=os.environ["MONGO_URL"].strip(),
        db_name=os.environ["DB_NAME"].strip(),
        super_admin_tokens=_token_settings("SUPER_ADMIN"),
        restaurant_tokens=_token_settings("RESTAURANT"),
        worker_tokens=_token_settings("WORKER"),
        cookie_secure=_env_bool("COOKIE_SECURE", True),
        cookie_samesite=(_env("COOKIE_SAMESITE") or "lax").lower(),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS")),
        debug_include_error_details=_env_bool("DEBUG_INCLUDE_ERROR_DETAILS", False),
        log_level=(_env("LOG_LEVEL") or "INFO").upper(),
        storage_backend=(_env("STORAGE_BACKEND") or "local").lower(),
        storage_local_root=_env("STORAGE_LOCAL_ROOT") or "uploads",
        media_base_url=(_env("MEDIA_BASE_URL") or "/media").rstrip("/"),
        s3_bucket_name=_env("S3_BUCKET_NAME"),
        s3_region=_env("S3_REGION"),
        s3_endpoint_url=_env("S3_ENDPOINT_URL"),
        max_image_size_bytes=int(_env("MAX_IMAGE_SIZE_BYTES") or 5 * 1024 * 1024),
        rate_limit_storage_url=_env("RATE_LIMIT_STORAGE_URL") or "memory://",
        role_rate_limits=_env("ROLE_RATE_LIMITS"),
    )
