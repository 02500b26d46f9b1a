from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it's easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getbool(name: str, default: bool) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    redis_url: str | None
    admin_username: str = "admin"
    admin_email: str = "admin@eduhub.com"
    admin_password: str = "admin123"
    seed_demo_data: bool = True

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    admin_username = _getenv("ADMIN_USERNAME", "admin")
    admin_email = _getenv("ADMIN_EMAIL", "admin@eduhub.com").lower()
    admin_password = _getenv("ADMIN_PASSWORD", "admin123")
    if not admin_username or not admin_email or not admin_password:
        raise ValueError("ADMIN_USERNAME, ADMIN_EMAIL and ADMIN_PASSWORD must be set")

    if app_env_raw == "prod" and admin_password == "admin123":
        raise ValueError("ADMIN_PASSWORD must be changed from the default in prod")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getbool("LOG_JSON", False),
        port=port,
        redis_url=_getenv("REDIS_URL", "") or None,
        admin_username=admin_username,
        admin_email=admin_email,
        admin_password=admin_password,
        seed_demo_data=_getbool("SEED_DEMO_DATA", True),
    )


# Module-level singleton so imports are cheap
SETTINGS = load_settings()
