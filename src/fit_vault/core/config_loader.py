"""
YAML -> Settings loader.

Loads user settings from ~/.fit-vault/config.yaml (or an explicit path)
and merges them over the defaults from config.py.

Usage:
    from fit_vault.core.config_loader import load_settings
    settings = load_settings()
    settings.default_rest_seconds

A missing file yields the defaults. If the file exists but cannot be
parsed, a warning is emitted and the defaults are used.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any

import yaml

from .config import Settings

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; warn and return {} when it is unusable."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"fit-vault: ignoring config file {path} ({exc})", stacklevel=3)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        warnings.warn(f"fit-vault: config file {path} is not a mapping; ignored", stacklevel=3)
        return {}
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_user_config_path() -> Path:
    """Return ~/.fit-vault/config.yaml (which may not exist)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".fit-vault" / "config.yaml"


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load settings, merging the user YAML file over the defaults.

    Unknown keys in the file are ignored.

    Args:
        path: Explicit config file; defaults to ~/.fit-vault/config.yaml

    Returns:
        Settings instance

    Raises:
        ValueError: If the file contains invalid values
    """
    config_path = Path(path) if path is not None else get_user_config_path()
    merged: dict[str, Any] = asdict(Settings())

    if config_path.exists():
        user_cfg = _load_yaml_file(config_path)
        known = {f.name for f in fields(Settings)}
        merged = _deep_merge(merged, {k: v for k, v in user_cfg.items() if k in known})

    return Settings(**merged)
