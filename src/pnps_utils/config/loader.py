"""Settings loading with YAML parsing and validation."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import PnPsSettings


def load_settings(settings_path: Path | str | None = None) -> PnPsSettings:
    """
    Load and validate settings from a YAML file.

    Args:
        settings_path: Path to YAML settings file, None for the defaults

    Returns:
        Validated PnPsSettings instance

    Raises:
        FileNotFoundError: If the settings file doesn't exist
        pydantic.ValidationError: If settings are invalid
    """
    if settings_path is None:
        return PnPsSettings()

    settings_path = Path(settings_path)

    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with open(settings_path, "r") as f:
        yaml_content = f.read()

    # An empty file means all defaults
    if not yaml_content.strip():
        return PnPsSettings()

    return pydantic_yaml.parse_yaml_raw_as(PnPsSettings, yaml_content)


def load_settings_with_overrides(
    settings_path: Path | str | None,
    overrides: dict[str, Any],
) -> PnPsSettings:
    """
    Load settings and apply dictionary overrides.

    Used by CLI flags that override settings file values. Keys may be
    dotted (``"parse.min_depth"``); ``None`` values are ignored so unset
    click options leave the file value in place.

    Args:
        settings_path: Path to YAML settings file, or None
        overrides: Dictionary of values to override

    Returns:
        Validated PnPsSettings with overrides applied

    Raises:
        pydantic.ValidationError: If final settings are invalid
    """
    settings = load_settings(settings_path)
    settings_dict = settings.model_dump()

    for key, value in overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        target = settings_dict
        for part in parts[:-1]:
            target = target[part]
        target[parts[-1]] = value

    return PnPsSettings.model_validate(settings_dict)
