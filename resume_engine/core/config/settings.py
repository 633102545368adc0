from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

STORAGE_BACKENDS = {"memory", "sqlite"}
PDF_FORMATS = {"A4", "Letter"}


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    rate_limit: str
    print_rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    storage_backend: str
    storage_db_path: str
    resume_ttl_days: int
    store_purge_interval_seconds: int
    pdf_timeout_seconds: float
    pdf_default_format: str
    summary_llm_enabled: bool
    summary_llm_model: str
    openai_api_key: str | None
    openai_base_url: str | None


settings = Settings(
    api_key=_get_env("API_KEY"),
    rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
    print_rate_limit=_get_env("PRINT_RATE_LIMIT", "10/minute") or "10/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
    storage_backend=(_get_env("STORAGE_BACKEND", "memory") or "memory").strip().lower(),
    storage_db_path=_get_env("STORAGE_DB_PATH", "data/resume_engine.db") or "data/resume_engine.db",
    resume_ttl_days=_get_env_int("RESUME_TTL_DAYS", 7),
    store_purge_interval_seconds=_get_env_int("STORE_PURGE_INTERVAL_SECONDS", 3600),
    pdf_timeout_seconds=_get_env_float("PDF_TIMEOUT_SECONDS", 30.0),
    pdf_default_format=(_get_env("PDF_DEFAULT_FORMAT", "A4") or "A4").strip(),
    summary_llm_enabled=_get_env_bool("SUMMARY_LLM_ENABLED", False),
    summary_llm_model=_get_env("SUMMARY_LLM_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
    openai_api_key=_get_env("OPENAI_API_KEY"),
    openai_base_url=_get_env("OPENAI_BASE_URL"),
)

if settings.storage_backend not in STORAGE_BACKENDS:
    raise RuntimeError("STORAGE_BACKEND must be either 'memory' or 'sqlite'.")

if settings.pdf_default_format not in PDF_FORMATS:
    raise RuntimeError("PDF_DEFAULT_FORMAT must be either 'A4' or 'Letter'.")
