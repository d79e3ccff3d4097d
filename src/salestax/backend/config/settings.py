"""Settings loader wrapping the shared schema models."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schema import (
    ConfigurationError,
    ServiceSettings,
    TaxConfiguration,
    TaxSettings,
    describe_validation_error,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
SETTINGS_FILE = CONFIG_DIRECTORY / "settings.yaml"
SETTINGS_ENV = "SALESTAX_SETTINGS_FILE"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as error:
            raise ConfigurationError(f"Settings file is not valid YAML: {error}") from error
    if not isinstance(data, dict):
        raise ConfigurationError("Settings file must define a mapping at the top level")
    return data


def settings_path() -> Path:
    """Return the settings file in effect, honouring ``SALESTAX_SETTINGS_FILE``."""

    override = os.getenv(SETTINGS_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return SETTINGS_FILE


def read_settings(path: Path) -> ServiceSettings:
    """Parse ``path`` into :class:`ServiceSettings` without further checks."""

    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    raw_settings = _load_yaml(path)

    try:
        return ServiceSettings.model_validate(raw_settings)
    except ValidationError as error:
        raise ConfigurationError(
            f"Settings validation failed for {path.name}: "
            f"{describe_validation_error(error)}"
        ) from error


@lru_cache(maxsize=4)
def _load_settings(path: Path) -> ServiceSettings:
    settings = read_settings(path)
    # Resolve the tax block eagerly so broken rates fail at load time.
    settings.tax_configuration()
    return settings


def load_settings() -> ServiceSettings:
    """Load and cache the active settings file."""

    return _load_settings(settings_path())


def load_default_configuration() -> TaxConfiguration:
    """Return the tax configuration declared by the active settings file."""

    return load_settings().tax_configuration()


def clear_settings_cache() -> None:
    _load_settings.cache_clear()


__all__ = [
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "SETTINGS_ENV",
    "SETTINGS_FILE",
    "ServiceSettings",
    "TaxSettings",
    "clear_settings_cache",
    "load_default_configuration",
    "load_settings",
    "read_settings",
    "settings_path",
]
