"""Configuration loading from YAML files and environment variables."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..schemas import AppConfig

_CLIENT_ENV = {
    "DAXTRA_BASE_URL": "base_url",
    "DAXTRA_ACCOUNT": "account",
    "DAXTRA_JWT_SECRET": "jwt_secret",
    "DAXTRA_TIMEOUT_MS": "timeout_ms",
}
_SERVICE_ENV = {
    "HOST": "host",
    "PORT": "port",
    "LOG_LEVEL": "log_level",
}


def read_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML mapping; an empty file yields an empty mapping."""
    with Path(path).open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {path} must contain a YAML mapping")
    return loaded


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Build the application config; environment values override the file."""
    environ = os.environ if environ is None else environ
    raw = read_yaml(path) if path else {}

    daxtra = dict(raw.get("daxtra") or {})
    service = dict(raw.get("service") or {})

    for key, field in _CLIENT_ENV.items():
        if environ.get(key):
            daxtra[field] = environ[key]
    if "DAXTRA_TURBO" in environ:
        daxtra["turbo"] = environ["DAXTRA_TURBO"].strip().lower() == "true"
    for key, field in _SERVICE_ENV.items():
        if environ.get(key):
            service[field] = environ[key]

    return AppConfig.model_validate({"daxtra": daxtra, "service": service})


__all__ = ["load_config", "read_yaml"]
