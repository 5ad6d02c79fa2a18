"""Configuration loading for gitcherry (.gitcherry.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import CherryError

CONFIG_FILENAME = ".gitcherry.yml"


class ConfigError(CherryError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class FingerprintConfig:
    """Patch canonicalization settings."""

    ignore_whitespace: bool = True


@dataclass
class CherryConfig:
    """Represents the settings defined in .gitcherry.yml."""

    root: Path
    abbrev: Optional[int] = None
    verbose: Optional[bool] = None
    fingerprint: FingerprintConfig = field(default_factory=FingerprintConfig)
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> CherryConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CherryConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    fingerprint = FingerprintConfig()
    fingerprint_data = _as_dict(data.get("fingerprint"))
    ignore_whitespace = _as_bool(fingerprint_data.get("ignore_whitespace"))
    if ignore_whitespace is not None:
        fingerprint.ignore_whitespace = ignore_whitespace

    log_file_str = _as_str(data.get("log_file"))

    return CherryConfig(
        root=root,
        abbrev=_as_int(data.get("abbrev")),
        verbose=_as_bool(data.get("verbose")),
        fingerprint=fingerprint,
        log_file=root / log_file_str if log_file_str else None,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = ["CONFIG_FILENAME", "CherryConfig", "ConfigError", "FingerprintConfig", "load_config"]
