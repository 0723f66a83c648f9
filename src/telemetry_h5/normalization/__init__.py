"""
Data normalization layer.

Coerces heterogeneous matrix cells to float64, applies the categorical
encodings and the fixed structural transforms (row reversal, timestamp
rescaling).
"""

from telemetry_h5.normalization.categorical import (
    ENCODINGS,
    CategoricalEncoding,
    inject_attributes,
    matching_encodings,
)
from telemetry_h5.normalization.entry import transform_entry
from telemetry_h5.normalization.scalar import normalize_value

__all__ = [
    "ENCODINGS",
    "CategoricalEncoding",
    "inject_attributes",
    "matching_encodings",
    "normalize_value",
    "transform_entry",
]
