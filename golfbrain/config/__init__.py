"""Configuration helpers for the scoring service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


__all__ = [
    "_Settings",
    "DEFAULT_DATA_DIR",
    "DEFAULT_STORE_KEY",
    "env_bool",
    "env_list",
    "get_settings",
    "reset_settings_cache",
]

DEFAULT_DATA_DIR = "data/golfbrain"
DEFAULT_STORE_KEY = "golf-brain"


@dataclass(frozen=True)
class _Settings:
    data_dir: str = DEFAULT_DATA_DIR
    store_key: str = DEFAULT_STORE_KEY
    store_backend: str = "file"
    require_api_key: bool = False
    api_keys: tuple[str, ...] = ()
    cors_allow_origins: tuple[str, ...] = ("http://localhost", "http://127.0.0.1")


@lru_cache(maxsize=1)
def get_settings() -> _Settings:
    """Return cached application settings."""

    return _Settings(
        data_dir=os.getenv("GOLFBRAIN_DATA_DIR") or DEFAULT_DATA_DIR,
        store_key=os.getenv("GOLFBRAIN_STORE_KEY") or DEFAULT_STORE_KEY,
        store_backend=(os.getenv("GOLFBRAIN_STORE_BACKEND") or "file").strip().lower(),
        require_api_key=env_bool("REQUIRE_API_KEY", False),
        api_keys=tuple(env_list("API_KEYS") or env_list("API_KEY")),
        cors_allow_origins=tuple(
            env_list("CORS_ALLOW_ORIGINS")
            or ["http://localhost", "http://127.0.0.1"]
        ),
    )


def reset_settings_cache() -> None:
    """Clear cached settings (primarily for tests)."""

    get_settings.cache_clear()


def env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_list(name: str) -> list[str]:
    value = os.getenv(name, "")
    return [item.strip() for item in value.split(",") if item.strip()]
