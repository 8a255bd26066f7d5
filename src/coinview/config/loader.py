"""Configuration loader for the dashboard and CLI.

The packaged ``default.yaml`` holds every setting the dashboard reads: the
``backend`` block (URL, timeout), the coin list and the form defaults under
``scenario`` and ``train``. A user file (``--config`` or ``COINVIEW_CONFIG``)
only needs the keys it changes; it is merged over the defaults section by
section.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default.yaml")
ENV_CONFIG = "COINVIEW_CONFIG"

_ACTIVE_CONFIG: dict[str, Any] | None = None


def _resolve_path(path: str | Path | None = None) -> Path:
    if path is not None:
        candidate = Path(path)
    else:
        env_path = os.environ.get(ENV_CONFIG)
        candidate = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
    return candidate.expanduser().resolve()


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at root of config {config_path}")
    return data


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: str | Path | None = None, *, cache: bool = False) -> dict[str, Any]:
    """Load the packaged defaults overlaid with the user file, if any."""
    global _ACTIVE_CONFIG

    config_path = _resolve_path(path)
    data = _read_yaml(DEFAULT_CONFIG_PATH.resolve())
    if config_path != DEFAULT_CONFIG_PATH.resolve():
        data = _merge(data, _read_yaml(config_path))

    if cache:
        _ACTIVE_CONFIG = data
    return data


def set_runtime_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load and cache configuration for use throughout the application."""
    return load_config(path, cache=True)


def get_runtime_config() -> dict[str, Any]:
    """Return the active configuration, loading defaults if necessary."""
    if _ACTIVE_CONFIG is None:
        load_config(cache=True)
    return dict(_ACTIVE_CONFIG or {})


def section(name: str, config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return one settings block (``backend``, ``scenario``, ``train``)."""
    source = config if config is not None else get_runtime_config()
    value = source.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return dict(value)
