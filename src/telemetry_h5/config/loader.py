"""
Configuration loading utilities.

Supports environment variable interpolation and overrides on top of the
built-in defaults. An empty or missing config yields the defaults.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from telemetry_h5.config.settings import (
    ConverterConfig,
    LayoutConfig,
    LayoutMode,
    LoggingConfig,
    OutputConfig,
)

KNOWN_SECTIONS = ("layout", "output", "logging")


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _parse_bool(value: Any) -> bool:
    """Parse a boolean that may arrive as an interpolated string."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "on", "1"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "off", "0", ""):
        return False
    msg = f"Cannot parse boolean from {type(value).__name__}: {value!r}"
    raise ValueError(msg)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a mapping, got {type(data).__name__}"
        raise ValueError(msg)
    return _process_config_values(data)


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ConverterConfig:
    """
    Load converter configuration.

    Example config:
        layout:
          mode: flat
          compression_level: 9
        output:
          remove_partial_on_failure: false
        logging:
          level: ${TELEMETRY_H5_LOG_LEVEL:INFO}
          json_output: false

    Args:
        config_path: Optional YAML file. Without one the defaults are used.
        overrides: Nested values applied last (e.g. from CLI options).

    Returns:
        Fully validated ConverterConfig instance.

    Raises:
        FileNotFoundError: If config_path does not exist.
        ValueError: If the config contains unknown sections or invalid values.
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        data = load_yaml(config_path)

    if overrides:
        data = _deep_merge(data, overrides)

    unknown = sorted(set(data) - set(KNOWN_SECTIONS))
    if unknown:
        msg = f"Unknown config sections: {', '.join(unknown)}"
        raise ValueError(msg)

    layout_data = data.get("layout") or {}
    layout = LayoutConfig(
        mode=LayoutMode(layout_data.get("mode", LayoutMode.FLAT.value)),
        compression_level=layout_data.get("compression_level", 9),
    )

    output_data = data.get("output") or {}
    output = OutputConfig(
        remove_partial_on_failure=_parse_bool(
            output_data.get("remove_partial_on_failure", False)
        ),
    )

    logging_data = data.get("logging") or {}
    logging_config = LoggingConfig(
        level=str(logging_data.get("level", "INFO")),
        json_output=_parse_bool(logging_data.get("json_output", False)),
    )

    return ConverterConfig(layout=layout, output=output, logging=logging_config)
