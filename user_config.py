"""Persisted per-user defaults (style, locale, format, intext) and run settings."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from renderer import DEFAULT_FORMAT, DEFAULT_LOCALE, DEFAULT_STYLE, OUTPUT_FORMATS

CONFIG_FILE_NAME = "config.json"
CONFIG_KEYS: tuple[str, ...] = ("style", "locale", "format", "intext")

LOGGER = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """The configuration file cannot be read, parsed or updated as asked."""


@dataclass(frozen=True, slots=True)
class Settings:
    """Effective options for one run: config file defaults overridden by flags."""

    style: str = DEFAULT_STYLE
    locale: str = DEFAULT_LOCALE
    output_format: str = DEFAULT_FORMAT
    intext: bool = False
    log_errors: bool = False


def config_dir() -> Path:
    return Path(os.getenv("CITEEASE_CONFIG_DIR", Path.home() / ".citeease-cli"))


def config_path() -> Path:
    return config_dir() / CONFIG_FILE_NAME


def load_config(path: Path | None = None) -> dict[str, str]:
    """Read the config file; a missing file is an empty config."""
    path = path or config_path()
    if not path.exists():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, JSONDecodeError) as exc:
        raise ConfigError(f"Failed to parse configuration file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Failed to parse configuration file {path}: expected a JSON object")
    return {str(key): str(value) for key, value in data.items()}


def save_config(config: dict[str, str], path: Path | None = None) -> None:
    path = path or config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to update configuration: {exc}") from exc
    LOGGER.debug("Saved configuration to %s", path)


def validate_key(key: str) -> None:
    if key not in CONFIG_KEYS:
        allowed = ", ".join(f'"{name}"' for name in CONFIG_KEYS)
        raise ConfigError(f"Invalid key. Allowed keys are {allowed}, or \"reset\".")


def validate_entry(key: str, value: str) -> None:
    validate_key(key)
    if key == "format" and value not in OUTPUT_FORMATS:
        raise ConfigError('Invalid format. Allowed formats are: "text", "html", "rtf", or "asciidoc".')
    if key == "intext" and value not in ("true", "false"):
        raise ConfigError('Invalid intext value. Allowed values are "true" or "false".')


def update_config(key: str, value: str, path: Path | None = None) -> dict[str, str]:
    validate_entry(key, value)
    config = load_config(path)
    config[key] = value
    save_config(config, path)
    return config


def get_config_value(key: str, path: Path | None = None) -> str | None:
    validate_key(key)
    return load_config(path).get(key) or None


def reset_config(path: Path | None = None) -> None:
    save_config({}, path)


def resolve_settings(config: dict[str, str], overrides: dict[str, Any] | None = None) -> Settings:
    """Merge config file values with command-line overrides (``None`` = not given)."""
    overrides = {key: value for key, value in (overrides or {}).items() if value is not None}

    output_format = str(overrides.get("output_format", config.get("format") or DEFAULT_FORMAT)).lower()
    if output_format not in OUTPUT_FORMATS:
        raise ConfigError('Invalid format. Allowed formats are: "text", "html", "rtf", or "asciidoc".')

    return Settings(
        style=overrides.get("style", config.get("style") or DEFAULT_STYLE),
        locale=overrides.get("locale", config.get("locale") or DEFAULT_LOCALE),
        output_format=output_format,
        intext=overrides.get("intext", config.get("intext") == "true"),
        log_errors=bool(overrides.get("log_errors", False)),
    )
