"""
Process configuration read from environment variables.

All settings are read once at startup (see `main.run`). Required values that
are missing or unparsable raise `ConfigurationError` and the process does not
serve.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError

DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"


def _required(env: Mapping[str, str], name: str) -> str:
    value = (env.get(name) or "").strip()
    if not value:
        raise ConfigurationError(f"{name} is not set.")
    return value


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Failed to parse {name}: {raw!r} is not an integer.") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}.")
    return value


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Failed to parse {name}: {raw!r} is not a number.") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}.")
    return value


def _binding_port(env: Mapping[str, str]) -> int:
    raw = _required(env, "BINDING_PORT")
    try:
        port = int(raw)
    except ValueError as exc:
        raise ConfigurationError("Failed to parse BINDING_PORT.") from exc
    if not 0 < port < 65536:
        raise ConfigurationError(f"BINDING_PORT out of range: {port}.")
    return port


@dataclass(frozen=True)
class Settings:
    binding_address: str
    binding_port: int
    postgres_url: str
    redis_url: str
    core_api_url: str
    module_api_url: str
    module_web_url: str
    log_level: str = "debug"
    postgres_pool_min_size: int = 10
    postgres_pool_max_size: int = 10
    postgres_acquire_timeout_s: float = 10.0
    postgres_command_timeout_s: float = 30.0
    redis_pool_max_size: int = 10
    registration_interval_s: float = 5.0
    registry_timeout_s: float = 10.0
    migrations_dir: Path = DEFAULT_MIGRATIONS_DIR

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if env is None else env

        pool_min = _env_int(env, "POSTGRES_POOL_MIN_SIZE", 10)
        pool_max = _env_int(env, "POSTGRES_POOL_MAX_SIZE", 10)
        if pool_min > pool_max:
            raise ConfigurationError(
                f"POSTGRES_POOL_MIN_SIZE ({pool_min}) exceeds POSTGRES_POOL_MAX_SIZE ({pool_max})."
            )

        migrations_dir = (env.get("MIGRATIONS_DIR") or "").strip()

        return cls(
            binding_address=_required(env, "BINDING_ADDRESS"),
            binding_port=_binding_port(env),
            postgres_url=_required(env, "POSTGRES_URL"),
            redis_url=_required(env, "REDIS_URL"),
            core_api_url=_required(env, "CORE_API_URL").rstrip("/"),
            module_api_url=_required(env, "MODULE_API_URL"),
            module_web_url=_required(env, "MODULE_WEB_URL"),
            log_level=(env.get("LOG_LEVEL") or "").strip() or "debug",
            postgres_pool_min_size=pool_min,
            postgres_pool_max_size=pool_max,
            postgres_acquire_timeout_s=_env_float(env, "POSTGRES_ACQUIRE_TIMEOUT_S", 10.0),
            postgres_command_timeout_s=_env_float(env, "POSTGRES_COMMAND_TIMEOUT_S", 30.0),
            redis_pool_max_size=_env_int(env, "REDIS_POOL_MAX_SIZE", 10),
            registration_interval_s=_env_float(env, "REGISTRATION_INTERVAL_S", 5.0),
            registry_timeout_s=_env_float(env, "REGISTRY_TIMEOUT_S", 10.0),
            migrations_dir=Path(migrations_dir) if migrations_dir else DEFAULT_MIGRATIONS_DIR,
        )
