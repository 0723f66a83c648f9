"""
Configuration management with typed Pydantic models.

Provides layout, output and logging settings with YAML loading.
"""

from telemetry_h5.config.loader import load_config
from telemetry_h5.config.settings import (
    ConverterConfig,
    LayoutConfig,
    LayoutMode,
    LoggingConfig,
    OutputConfig,
)

__all__ = [
    "ConverterConfig",
    "LayoutConfig",
    "LayoutMode",
    "LoggingConfig",
    "OutputConfig",
    "load_config",
]
