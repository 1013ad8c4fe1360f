from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

# 30 days
DEFAULT_DURATION_SECONDS = 30 * 24 * 60 * 60
DEFAULT_PRICE = 100


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _getint(name: str, default: int) -> int:
    raw = _getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    redis_url: str | None
    membership_price: int = DEFAULT_PRICE
    membership_duration_seconds: int = DEFAULT_DURATION_SECONDS
    admin_ids: frozenset[str] = frozenset()

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json = _getenv("LOG_JSON", "false").lower() in ("1", "true", "yes")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    port = _getint("PORT", 8000)

    price = _getint("MEMBERSHIP_PRICE", DEFAULT_PRICE)
    if price < 0:
        raise ValueError(f"MEMBERSHIP_PRICE must be >= 0 (got {price})")

    duration = _getint("MEMBERSHIP_DURATION_SECONDS", DEFAULT_DURATION_SECONDS)
    if duration <= 0:
        raise ValueError(f"MEMBERSHIP_DURATION_SECONDS must be > 0 (got {duration})")

    admin_ids = frozenset(
        part.strip() for part in _getenv("ADMIN_IDS", "").split(",") if part.strip()
    )

    redis_url = _getenv("REDIS_URL", "") or None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json,
        port=port,
        redis_url=redis_url,
        membership_price=price,
        membership_duration_seconds=duration,
        admin_ids=admin_ids,
    )


SETTINGS = load_settings()
