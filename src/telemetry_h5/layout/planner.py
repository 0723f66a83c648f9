"""
Storage layout planning.

Every column of a matrix becomes one chunk, so a single channel's time series
can be read back without decompressing the others.
"""

from telemetry_h5.schemas.records import LayoutPlan

DEFAULT_COMPRESSION_LEVEL = 9
MAX_COMPRESSION_LEVEL = 9


def plan_layout(
    rows: int,
    cols: int,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
) -> LayoutPlan:
    """
    Derive shape, chunk shape and compression level for a matrix.

    Args:
        rows: Number of rows.
        cols: Number of columns.
        compression_level: Gzip level 0-9 (0 means uncompressed).

    Returns:
        LayoutPlan with chunk shape (rows, 1).

    Raises:
        ValueError: If a dimension is zero or negative, or the level is out of range.
    """
    if rows <= 0 or cols <= 0:
        msg = f"Cannot plan layout for empty matrix of shape ({rows}, {cols})"
        raise ValueError(msg)
    if not 0 <= compression_level <= MAX_COMPRESSION_LEVEL:
        msg = f"Compression level must be between 0 and {MAX_COMPRESSION_LEVEL}, got {compression_level}"
        raise ValueError(msg)

    return LayoutPlan(
        shape=(rows, cols),
        chunk_shape=(rows, 1),
        compression_level=compression_level,
    )
