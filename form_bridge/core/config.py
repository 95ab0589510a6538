"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass(frozen=True)
class FetchConfig:
    """Outbound HTTP client settings for form fetch and submit."""

    user_agent: str
    request_timeout_seconds: float
    submit_timeout_seconds: float
    pool_maxsize: int


@dataclass(frozen=True)
class RenderConfig:
    """Headless Chromium fallback settings."""

    enabled: bool
    headless: bool
    navigation_timeout_ms: int
    form_wait_timeout_ms: int
    entry_wait_timeout_ms: int
    blocked_resource_types: tuple[str, ...]


@dataclass(frozen=True)
class InspectConfig:
    """Inspection endpoint tuning."""

    min_fields: int
    cache_max_age_seconds: int


@dataclass(frozen=True)
class SubmitConfig:
    """Submission endpoint tuning."""

    debug_excerpt_chars: int


@dataclass(frozen=True)
class LoggingConfig:
    """Structured logging configuration."""

    level: str


@dataclass(frozen=True)
class SecurityConfig:
    """API perimeter security settings."""

    cors_allowed_origins: list[str]
    request_max_bytes: int


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    fetch: FetchConfig
    render: RenderConfig
    inspect: InspectConfig
    submit: SubmitConfig
    logging: LoggingConfig
    security: SecurityConfig

    @staticmethod
    def from_env() -> "AppConfig":
        """Build app config from process environment."""
        user_agent = os.getenv("FETCH_USER_AGENT", "").strip() or "Mozilla/5.0"
        log_level = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"

        return AppConfig(
            fetch=FetchConfig(
                user_agent=user_agent,
                request_timeout_seconds=float(os.getenv("FETCH_TIMEOUT_SECONDS", "15")),
                submit_timeout_seconds=float(os.getenv("SUBMIT_TIMEOUT_SECONDS", "20")),
                pool_maxsize=int(os.getenv("FETCH_POOL_MAXSIZE", "16")),
            ),
            render=RenderConfig(
                enabled=_env_flag("RENDER_ENABLED", "1"),
                headless=_env_flag("RENDER_HEADLESS", "1"),
                navigation_timeout_ms=int(
                    os.getenv("RENDER_NAVIGATION_TIMEOUT_MS", "30000")
                ),
                form_wait_timeout_ms=int(
                    os.getenv("RENDER_FORM_WAIT_TIMEOUT_MS", "10000")
                ),
                entry_wait_timeout_ms=int(
                    os.getenv("RENDER_ENTRY_WAIT_TIMEOUT_MS", "5000")
                ),
                blocked_resource_types=tuple(
                    item.lower()
                    for item in _env_list(
                        "RENDER_BLOCKED_RESOURCE_TYPES",
                        "image,font,media,stylesheet",
                    )
                ),
            ),
            inspect=InspectConfig(
                min_fields=int(os.getenv("INSPECT_MIN_FIELDS", "3")),
                cache_max_age_seconds=int(
                    os.getenv("INSPECT_CACHE_MAX_AGE_SECONDS", "60")
                ),
            ),
            submit=SubmitConfig(
                debug_excerpt_chars=int(os.getenv("SUBMIT_DEBUG_EXCERPT_CHARS", "1200")),
            ),
            logging=LoggingConfig(level=log_level),
            security=SecurityConfig(
                cors_allowed_origins=_env_list(
                    "CORS_ALLOWED_ORIGINS",
                    "http://localhost:3000,http://127.0.0.1:3000",
                ),
                request_max_bytes=int(os.getenv("REQUEST_MAX_BYTES", str(1024 * 1024))),
            ),
        )
