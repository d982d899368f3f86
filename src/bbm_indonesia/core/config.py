"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from bbm_indonesia.core.exceptions import ConfigError

DEFAULT_PROVIDERS = ("pertamina", "shell", "bp", "vivo", "mobil")


class RegionsConfig(BaseModel):
    """Administrative region directory (emsifa api-wilayah-indonesia)."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://emsifa.github.io/api-wilayah-indonesia/api"
    rate_limit: int = 10
    request_timeout: int = 15
    ttl_seconds: int = 86400

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("rate_limit")
    @classmethod
    def rate_limit_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("rate_limit must be >= 1")
        return v


class ProvidersConfig(BaseModel):
    """Which provider adapters run, and how long each may take."""

    model_config = ConfigDict(frozen=True)

    enabled: list[str] = list(DEFAULT_PROVIDERS)
    timeout_seconds: float = 90.0
    request_timeout: int = 60
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    @field_validator("enabled", mode="before")
    @classmethod
    def enabled_lowercase_unique(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            v = v.split(",")
        keys = [str(k).strip().lower() for k in v if str(k).strip()]
        if len(set(keys)) != len(keys):
            raise ValueError("enabled providers must be unique")
        return keys

    @field_validator("timeout_seconds")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return v


class CacheConfig(BaseModel):
    """In-memory snapshot cache settings."""

    model_config = ConfigDict(frozen=True)

    snapshot_ttl_seconds: int = 3600

    @field_validator("snapshot_ttl_seconds")
    @classmethod
    def ttl_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("snapshot_ttl_seconds must be >= 0")
        return v


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 3000
    prefix: str = ""

    @field_validator("prefix")
    @classmethod
    def prefix_format(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            raise ValueError("prefix must start with '/'")
        return v


class BbmConfig(BaseModel):
    """Root configuration for the entire bbm-indonesia system."""

    model_config = ConfigDict(frozen=True)

    regions: RegionsConfig = RegionsConfig()
    providers: ProvidersConfig = ProvidersConfig()
    cache: CacheConfig = CacheConfig()
    api: APIConfig = APIConfig()


def load_config(
    config_path: str | None = None,
    env_prefix: str = "BBM_INDONESIA_",
) -> BbmConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (BBM_INDONESIA_CACHE__SNAPSHOT_TTL_SECONDS, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        BBM_INDONESIA_API__PORT=8080  ->  api.port = 8080
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        return BbmConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("BBM_INDONESIA_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(
                f"Config file from BBM_INDONESIA_CONFIG not found: {env_path}",
                context={"field": "BBM_INDONESIA_CONFIG", "value": env_path},
            )
        return p

    default = Path("bbm-indonesia.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels. Comma-separated values
    become lists (BBM_INDONESIA_PROVIDERS__ENABLED=shell,bp).
    """
    result = dict(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # Skip the CONFIG env var itself
        if parts == ["config"]:
            continue

        cast_value = _auto_cast(value)

        target = result
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            target = target[part]
        target[parts[-1]] = cast_value

    return result


def _auto_cast(value: str) -> str | int | float | bool | list[str]:
    """Auto-cast string values from environment variables."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    if "," in value:
        return [v.strip() for v in value.split(",") if v.strip()]
    return value
