"""Configuration loading & validation.

Precedence (last wins): base.yaml → overrides.local.yaml → ENV (LAZYMOD__*).

- `schema_version` missing → assume 1, warn.
- Each section validated by its own schema (`lazymod.config.schemas.*`).
- Unknown top-level or section keys rejected.
"""
from __future__ import annotations

import logging
import os
import pathlib
import threading
from functools import lru_cache
from typing import Any, Dict, Type

import yaml
from pydantic import BaseModel, ConfigDict

from lazymod import metrics
from lazymod.errors import validate_error_type

from .schemas.modules import ModulesConfig
from .schemas.observability import ApiConfig, LoggingConfig

logger = logging.getLogger("lazymod.config")

CURRENT_SCHEMA_VERSION = 1


class AggregatedConfig(BaseModel):
    schema_version: int = CURRENT_SCHEMA_VERSION
    modules: ModulesConfig = ModulesConfig()
    logging: LoggingConfig = LoggingConfig()
    api: ApiConfig = ApiConfig()

    model_config = ConfigDict(extra="forbid")


DEFAULT_CONFIG_DIR = "configs"
ENV_PREFIX = "LAZYMOD__"

SUB_SCHEMA_CLASSES: Dict[str, Type[BaseModel]] = {
    "modules": ModulesConfig,
    "logging": LoggingConfig,
    "api": ApiConfig,
}


class ConfigError(Exception):
    pass


def _load_yaml_if_exists(path: pathlib.Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name}: top-level mapping expected")
    return data


def _merge_dict(
    base: Dict[str, Any], override: Dict[str, Any]
) -> Dict[str, Any]:
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            base[k] = _merge_dict(base[k], v)
        else:
            base[k] = v
    return base


def _is_str_field(path_parts: list[str]) -> bool:
    if len(path_parts) != 2:
        return False
    cls = SUB_SCHEMA_CLASSES.get(path_parts[0])
    field = cls.model_fields.get(path_parts[1]) if cls else None
    return field is not None and field.annotation is str


def _cast_env_value(value: str) -> Any:
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _apply_env(cfg: Dict[str, Any]) -> None:
    prefix_len = len(ENV_PREFIX)
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        path_parts = env_key[prefix_len:].lower().split("__")
        target = cfg
        for part in path_parts[:-1]:
            if part not in target or not isinstance(target[part], dict):
                target[part] = {}
            target = target[part]
        if _is_str_field(path_parts):
            target[path_parts[-1]] = value
        else:
            target[path_parts[-1]] = _cast_env_value(value)
        dotted_path = ".".join(path_parts)
        metrics.inc("env_override_total", {"path": dotted_path})
        logger.info("config env override path=%s source=env", dotted_path)


_lock = threading.Lock()


def _resolve_config_dir() -> pathlib.Path:
    """Resolve config directory each call honoring env var changes."""
    return pathlib.Path(os.getenv("LAZYMOD_CONFIG_DIR", DEFAULT_CONFIG_DIR))


def _migrate(data: Dict[str, Any]) -> Dict[str, Any]:
    if "schema_version" not in data:
        logger.warning("config schema_version missing; assuming %d",
                       CURRENT_SCHEMA_VERSION)
        data["schema_version"] = CURRENT_SCHEMA_VERSION
    return data


def _validate_bounds(raw: Dict[str, Any]) -> None:
    """Cross-field bounds checks pydantic types alone do not cover.

    Emits metrics on violations and raises ConfigError if any.
    """
    errors: list[tuple[str, str, str]] = []  # (path, code, msg)
    version = raw.get("schema_version")
    if not isinstance(version, int) or version > CURRENT_SCHEMA_VERSION:
        errors.append(
            (
                "schema_version",
                "config-invalid",
                f"unsupported (max {CURRENT_SCHEMA_VERSION})",
            )
        )
    port = (raw.get("api") or {}).get("port")
    if isinstance(port, int) and not (0 < port < 65536):
        errors.append(("api.port", "config-out-of-range", "1..65535"))

    if errors:
        for path, code, _ in errors:
            validate_error_type(code)
            metrics.inc(
                "config_validation_errors_total",
                {"path": path, "code": code},
            )
        details = ", ".join(f"{p}:{c}:{m}" for p, c, m in errors)
        raise ConfigError(f"config validation failed: {details}")


def _validate_sections(raw: Dict[str, Any]) -> Dict[str, BaseModel]:
    validated: Dict[str, BaseModel] = {}
    for name, cls in SUB_SCHEMA_CLASSES.items():
        if name not in raw:
            continue
        try:
            validated[name] = cls.model_validate(raw[name] or {})
        except Exception as e:  # noqa: BLE001
            raise ConfigError(
                f"Validation failed for section '{name}': {e}"
            ) from e
    return validated


@lru_cache(maxsize=1)
def get_config() -> AggregatedConfig:  # noqa: D401
    with _lock:
        cfg_dir = _resolve_config_dir()
        base_cfg = _load_yaml_if_exists(cfg_dir / "base.yaml")
        overrides_cfg = _load_yaml_if_exists(cfg_dir / "overrides.local.yaml")
        merged = _merge_dict(base_cfg, overrides_cfg)
        _apply_env(merged)
        migrated = _migrate(merged)
        _validate_bounds(migrated)
        sections = _validate_sections(migrated)
        unknown = set(migrated) - set(SUB_SCHEMA_CLASSES) - {"schema_version"}
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")
        return AggregatedConfig(
            schema_version=migrated["schema_version"], **sections
        )


def clear_config_cache() -> None:
    """Clear cached config (primarily for tests)."""
    get_config.cache_clear()


def as_dict() -> Dict[str, Any]:
    return get_config().model_dump()
