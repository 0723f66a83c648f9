"""
Record models for the conversion pipeline.

RawRecord validates one JSON input record at the ingestion boundary.
NormalizedRecord and LayoutPlan are the internal, fully typed products
handed from normalization to layout planning and storage.
"""

from dataclasses import dataclass
from typing import Annotated, Any, TypeAlias

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Closed set of values json.loads can produce inside a matrix row
CellValue: TypeAlias = bool | int | float | str | None | list[Any] | dict[str, Any]

SmallUInt = Annotated[int, Field(ge=0, le=255)]


class RawRecord(BaseModel):
    """
    One input record as decoded from JSON.

    Field aliases match the compact input keys: c, l, a, la, v.
    Missing or null fields fall back to empty values.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: str = Field(default="", alias="c", description="Namespaced identifier")
    labels: dict[str, str] = Field(default_factory=dict, alias="l")
    attributes: dict[str, SmallUInt] = Field(default_factory=dict, alias="a")
    scalar_flag: SmallUInt = Field(default=0, alias="la")
    matrix: list[list[CellValue]] = Field(default_factory=list, alias="v")

    @field_validator("category", mode="before")
    @classmethod
    def null_category(cls, v: Any) -> Any:
        """Treat a null category as empty."""
        return "" if v is None else v

    @field_validator("labels", "attributes", mode="before")
    @classmethod
    def null_mapping(cls, v: Any) -> Any:
        """Treat a null map as empty."""
        return {} if v is None else v

    @field_validator("scalar_flag", mode="before")
    @classmethod
    def null_flag(cls, v: Any) -> Any:
        """Treat a null flag as zero."""
        return 0 if v is None else v

    @field_validator("matrix", mode="before")
    @classmethod
    def null_matrix(cls, v: Any) -> Any:
        """Treat a null matrix, or null rows, as empty."""
        if v is None:
            return []
        if isinstance(v, list):
            return [[] if row is None else row for row in v]
        return v


@dataclass
class NormalizedRecord:
    """
    A record whose matrix has been coerced to a dense float64 grid.

    Attributes:
        category: Original category name.
        labels: Label map, unchanged.
        attributes: Attribute map after categorical injection.
        scalar_flag: The 'la' value.
        matrix: Array of shape (rows, cols), rows reversed, column 0 in seconds.
        coercion_warnings: Number of cells that degraded to 0.0.
    """

    category: str
    labels: dict[str, str]
    attributes: dict[str, int]
    scalar_flag: int
    matrix: np.ndarray
    coercion_warnings: int = 0

    @property
    def rows(self) -> int:
        return int(self.matrix.shape[0])

    @property
    def cols(self) -> int:
        return int(self.matrix.shape[1])

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to persist."""
        return self.matrix.size == 0


@dataclass(frozen=True)
class LayoutPlan:
    """Storage layout for one normalized matrix."""

    shape: tuple[int, int]
    chunk_shape: tuple[int, int]
    compression_level: int

    @property
    def compressed(self) -> bool:
        return self.compression_level > 0
