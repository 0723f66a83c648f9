"""
Entry transformation.

Turns one RawRecord into a NormalizedRecord: dense float64 matrix, rows in
chronological order, timestamps in seconds, categorical attributes injected.
"""

import numpy as np

from telemetry_h5.normalization.categorical import inject_attributes
from telemetry_h5.normalization.scalar import DEFAULT_VALUE, coerce_value, warn_uncoercible
from telemetry_h5.schemas.records import CellValue, NormalizedRecord, RawRecord
from telemetry_h5.utils.logging import get_logger

log = get_logger(__name__)

TIMESTAMP_COLUMN = 0
TIMESTAMP_DIVISOR = 1000.0  # milliseconds -> seconds


def build_dense_matrix(rows: list[list[CellValue]]) -> tuple[np.ndarray, int]:
    """
    Coerce a possibly ragged matrix into a rectangular float64 array.

    The width is taken from the first row. Shorter rows are zero-padded,
    extra cells in longer rows are ignored.

    Args:
        rows: Raw matrix rows.

    Returns:
        Tuple of (array of shape (len(rows), len(rows[0])), number of cells
        that degraded to 0.0).
    """
    if not rows:
        return np.zeros((0, 0), dtype=np.float64), 0

    n_rows = len(rows)
    n_cols = len(rows[0])
    dense = np.zeros((n_rows, n_cols), dtype=np.float64)
    n_failed = 0

    for i, row in enumerate(rows):
        for j, value in enumerate(row[:n_cols]):
            result = coerce_value(value)
            if result is None:
                warn_uncoercible(value, i, j)
                n_failed += 1
                result = DEFAULT_VALUE
            dense[i, j] = result

    return dense, n_failed


def transform_entry(raw: RawRecord) -> NormalizedRecord:
    """
    Normalize one raw record.

    Steps, in order:
        1. Coerce every cell (ragged rows zero-padded to the first row's width).
        2. Reverse the row order.
        3. Divide column 0 by 1000 (millisecond timestamps to seconds).
        4. Inject categorical state attributes based on the category.

    An empty matrix yields a (0, 0) array; callers must not persist it.

    Args:
        raw: Validated input record.

    Returns:
        Normalized record.
    """
    dense, n_failed = build_dense_matrix(raw.matrix)

    if dense.size:
        dense = np.ascontiguousarray(dense[::-1])
        dense[:, TIMESTAMP_COLUMN] /= TIMESTAMP_DIVISOR

    ragged = sum(1 for row in raw.matrix if len(row) != dense.shape[1])
    if ragged:
        log.debug("Ragged rows padded or truncated", category=raw.category, rows=ragged)

    return NormalizedRecord(
        category=raw.category,
        labels=dict(raw.labels),
        attributes=inject_attributes(raw.category, raw.attributes),
        scalar_flag=raw.scalar_flag,
        matrix=dense,
        coercion_warnings=n_failed,
    )
