"""
Typed configuration models using Pydantic.

Everything the converter lets an operator tune lives here. The normalization
rules themselves (row reversal, timestamp rescaling, categorical codes) are
fixed and deliberately not configurable.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from telemetry_h5.utils.logging import LOG_LEVELS


class LayoutMode(str, Enum):
    """Physical layout of the HDF5 output."""

    FLAT = "flat"  # one dataset per record at the file root
    GROUPED = "grouped"  # dataset_<i>/<record>/values, uncompressed


class LayoutConfig(BaseModel):
    """Storage layout configuration."""

    model_config = ConfigDict(frozen=True)

    mode: LayoutMode = Field(
        default=LayoutMode.FLAT,
        description="Output layout: 'flat' or 'grouped'",
    )
    compression_level: int = Field(
        default=9,
        ge=0,
        le=9,
        description="Gzip level for flat-layout datasets (0 disables compression)",
    )


class OutputConfig(BaseModel):
    """Output file handling."""

    model_config = ConfigDict(frozen=True)

    remove_partial_on_failure: bool = Field(
        default=False,
        description="Delete the output file when a store error aborts the run",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Log level name")
    json_output: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure level is a known logging level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            msg = f"Log level must be one of {', '.join(LOG_LEVELS)}, got: {v!r}"
            raise ValueError(msg)
        return level


class ConverterConfig(BaseModel):
    """Complete converter configuration."""

    model_config = ConfigDict(frozen=True)

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def compression_level(self) -> int:
        """Convenience accessor for the gzip level."""
        return self.layout.compression_level
