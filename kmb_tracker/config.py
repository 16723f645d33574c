"""Configuration loader for the KMB stop tracker app."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

from dotenv import load_dotenv
import yaml


@dataclass(frozen=True)
class APIConfig:
    """KMB open-data API configuration."""

    stop_list_url: str
    eta_url_base: str
    timeout_seconds: float


@dataclass(frozen=True)
class StorageConfig:
    """Location of the local key/value storage document."""

    path: str


@dataclass(frozen=True)
class ServerConfig:
    """Bind address for the web front end."""

    host: str
    port: int


@dataclass(frozen=True)
class DisplayConfig:
    """Arrival board image size."""

    width: int
    height: int


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str
    log_dir: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    api: APIConfig
    storage: StorageConfig
    server: ServerConfig
    display: DisplayConfig
    log: LoggingConfig


def _require_key(mapping: dict[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ValueError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _require_section(data: dict[str, Any], key: str) -> dict[str, Any]:
    section = _require_key(data, key, key)
    if not isinstance(section, dict):
        raise ValueError(f"'{key}' config must be a mapping")
    return section


def load_config(path: str = "config/config.yaml") -> AppConfig:
    """Load application configuration from a YAML file."""
    load_dotenv()
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    api_section = _require_section(data, "api")
    storage_section = _require_section(data, "storage")
    server_section = _require_section(data, "server")
    display_section = _require_section(data, "display")
    logging_section = _require_section(data, "logging")

    api = APIConfig(
        stop_list_url=_require_key(api_section, "stop_list_url", "api"),
        eta_url_base=_require_key(api_section, "eta_url_base", "api").rstrip("/"),
        timeout_seconds=_require_key(api_section, "timeout_seconds", "api"),
    )

    storage_path = os.environ.get("KMB_STORAGE_PATH", "").strip()
    storage = StorageConfig(
        path=storage_path or _require_key(storage_section, "path", "storage"),
    )

    server = ServerConfig(
        host=_require_key(server_section, "host", "server"),
        port=_require_key(server_section, "port", "server"),
    )

    display = DisplayConfig(
        width=_require_key(display_section, "width", "display"),
        height=_require_key(display_section, "height", "display"),
    )

    logging = LoggingConfig(
        level=_require_key(logging_section, "level", "logging"),
        log_dir=_require_key(logging_section, "log_dir", "logging"),
    )

    return AppConfig(api=api, storage=storage, server=server, display=display, log=logging)
