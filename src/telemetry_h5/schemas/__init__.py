"""
Record models for input validation and internal data products.
"""

from telemetry_h5.schemas.records import (
    CellValue,
    LayoutPlan,
    NormalizedRecord,
    RawRecord,
)

__all__ = [
    "CellValue",
    "LayoutPlan",
    "NormalizedRecord",
    "RawRecord",
]
