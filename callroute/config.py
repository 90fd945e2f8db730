# file: callroute/config.py
"""
Configuration loader.

Design goals:
- Support `.env` for local development.
- Support YAML for non-secret deployment defaults.
- Validate configuration with pydantic.

Precedence (highest to lowest):
1. OS environment variables
2. `.env` values
3. YAML config file values
4. Code defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, Field, field_validator
from pydantic import ConfigDict as PydanticConfigDict


class CallrouteSettings(BaseModel):
    model_config = PydanticConfigDict(extra="ignore")

    # General
    log_level: str = "INFO"
    json_logging: bool = False

    # Routing
    timezone: str = "UTC"
    evaluation_timeout_seconds: float | None = Field(default=5.0)

    # Storage
    database_path: Path = Path("callroute.sqlite3")

    @field_validator("evaluation_timeout_seconds", mode="before")
    @classmethod
    def _blank_timeout_is_none(cls, value: Any) -> Any:
        # "", "0" or "none" in env/YAML disable the deadline.
        if value is None:
            return None
        if isinstance(value, str) and value.strip().lower() in ("", "none", "off"):
            return None
        if isinstance(value, (int, float, str)) and float(value) <= 0:
            return None
        return value


_ENV_MAP: dict[str, str] = {
    "CALLROUTE_LOG_LEVEL": "log_level",
    "CALLROUTE_JSON_LOGGING": "json_logging",
    "CALLROUTE_TIMEZONE": "timezone",
    "CALLROUTE_EVALUATION_TIMEOUT_SECONDS": "evaluation_timeout_seconds",
    "CALLROUTE_DATABASE_PATH": "database_path",
}


def _read_yaml(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    return raw if isinstance(raw, dict) else {}


def _read_dotenv(path: Path) -> dict[str, str]:
    # dotenv_values does not mutate os.environ; it just parses the file.
    values = dotenv_values(path)
    out: dict[str, str] = {}
    for k, v in values.items():
        if isinstance(k, str) and isinstance(v, str):
            out[k] = v
    return out


def _overlay_env(target: dict[str, Any], env: dict[str, str]) -> None:
    for env_key, field_name in _ENV_MAP.items():
        if env_key in env:
            target[field_name] = env[env_key]


def load_settings(
    *, yaml_path: Path | None = None, env_path: Path | None = None
) -> CallrouteSettings:
    """
    Load settings from YAML and .env, with OS env overrides.

    Args:
        yaml_path: Optional YAML config path.
        env_path: Optional .env path (default: `.env` if present).
    """

    data: dict[str, Any] = {}

    if env_path is None:
        maybe = Path(".env")
        env_path = maybe if maybe.exists() else None

    dotenv = _read_dotenv(env_path) if env_path is not None and env_path.exists() else {}

    # YAML path resolution:
    # - explicit yaml_path wins
    # - else CALLROUTE_CONFIG from OS env
    # - else CALLROUTE_CONFIG from .env
    if yaml_path is None:
        cfg = os.environ.get("CALLROUTE_CONFIG") or dotenv.get("CALLROUTE_CONFIG")
        if cfg:
            yaml_path = Path(cfg)

    if yaml_path is not None and yaml_path.exists():
        data.update(_read_yaml(yaml_path))

    if dotenv:
        _overlay_env(data, dotenv)

    os_env: dict[str, str] = {k: v for k, v in os.environ.items() if k in _ENV_MAP}
    _overlay_env(data, os_env)

    return CallrouteSettings.model_validate(data)
