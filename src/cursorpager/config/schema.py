"""Typed configuration schema and loader for the cursorpager package."""

from __future__ import annotations

import os
from collections.abc import Mapping
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, SecretStr, ValidationError, conint, confloat

from cursorpager.utils.errors import ConfigError

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class StoreSettings(BaseModel):
    """Connection settings for the document store."""

    uri_env: str
    uri: SecretStr | None = None
    database_env: str
    database: str | None = None
    collection_env: str
    collection: str | None = None
    app_name: str
    server_selection_timeout_ms: conint(gt=0)

    model_config = ConfigDict(extra="forbid")


class PagingSettings(BaseModel):
    """Pagination defaults."""

    key_field: str
    page_size: conint(gt=0)
    timeout_seconds: confloat(gt=0.0) | None = None

    model_config = ConfigDict(extra="forbid")


class LoggingSettings(BaseModel):
    """Logging and query observation settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    command_events: bool
    excluded_operations: list[str]
    indent: conint(ge=0)

    model_config = ConfigDict(extra="forbid")


class ConfigModel(BaseModel):
    """Top-level configuration model."""

    schema_version: conint(ge=1)
    store: StoreSettings
    paging: PagingSettings
    logging: LoggingSettings

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Loader utilities
# ---------------------------------------------------------------------------


def deep_merge_dicts(a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge mapping ``b`` onto ``a`` returning a new dict."""

    result: dict[str, Any] = dict(a)
    for key, b_val in b.items():
        if key in result and isinstance(result[key], dict) and isinstance(b_val, dict):
            result[key] = deep_merge_dicts(result[key], b_val)
        else:
            result[key] = b_val
    return result


def load_config(
    path: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> ConfigModel:
    """Load configuration from defaults and optional user overrides.

    Precedence of sources: package ``defaults.yml`` < user-provided YAML <
    environment variables named by ``store.uri_env``, ``store.database_env``
    and ``store.collection_env``.

    Raises
    ------
    ConfigError
        If the YAML cannot be parsed or does not match the schema.
    """

    with (
        importlib_resources.files("cursorpager.config")
        .joinpath("defaults.yml")
        .open("r", encoding="utf-8") as f
    ):
        defaults = yaml.safe_load(f) or {}

    try:
        if path is not None:
            with Path(path).open("r", encoding="utf-8") as f:
                overrides = yaml.safe_load(f) or {}
            if not isinstance(overrides, dict):
                raise ConfigError(f"{path}: top level must be a mapping")
            merged = deep_merge_dicts(defaults, overrides)
        else:
            merged = defaults
        cfg = ConfigModel.model_validate(merged)
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    environ = env if env is not None else os.environ
    store = cfg.store
    if store.uri_env in environ:
        store.uri = SecretStr(environ[store.uri_env])
    if store.database_env in environ:
        store.database = environ[store.database_env]
    if store.collection_env in environ:
        store.collection = environ[store.collection_env]

    return cfg


def require_store(cfg: ConfigModel, *, env: Mapping[str, str] | None = None) -> tuple[str, str, str]:
    """Return ``(uri, database, collection)`` or raise :class:`ConfigError`.

    ``env`` is consulted for values still unset on ``cfg``.
    """

    environ = env if env is not None else os.environ
    store = cfg.store
    uri = store.uri.get_secret_value() if store.uri is not None else environ.get(store.uri_env)
    database = store.database or environ.get(store.database_env)
    collection = store.collection or environ.get(store.collection_env)
    for value, name in (
        (uri, store.uri_env),
        (database, store.database_env),
        (collection, store.collection_env),
    ):
        if not value:
            raise ConfigError(f"{name} is not set")
    return uri, database, collection  # type: ignore[return-value]


__all__ = [
    "ConfigModel",
    "StoreSettings",
    "PagingSettings",
    "LoggingSettings",
    "deep_merge_dicts",
    "load_config",
    "require_store",
]
