"""
Scalar normalization.

Coerces one heterogeneous matrix cell to float64.
"""

import math

from telemetry_h5.normalization.categorical import TOKEN_CODES
from telemetry_h5.schemas.records import CellValue
from telemetry_h5.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_VALUE = 0.0

INFINITY_LITERALS = ("inf", "infinity")


def parse_number(text: str) -> float | None:
    """
    Parse a decimal or exponent string strictly.

    Underscore digit separators, surrounding whitespace and values outside
    the float64 range are rejected. Explicit "inf", "infinity" and "nan"
    spellings are accepted.
    """
    if "_" in text or text != text.strip():
        return None
    try:
        result = float(text)
    except ValueError:
        return None
    if math.isinf(result) and text.lstrip("+-").lower() not in INFINITY_LITERALS:
        return None
    return result


def coerce_value(value: CellValue) -> float | None:
    """
    Convert a matrix cell to a float, or return None if it cannot be converted.

    Strings are first looked up in the categorical token table (exact,
    case-sensitive) and only then parsed as numbers.
    """
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return None
    if isinstance(value, str):
        code = TOKEN_CODES.get(value)
        if code is not None:
            return code
        return parse_number(value)
    return None


def warn_uncoercible(value: CellValue, row: int, col: int) -> None:
    """Log one warning for a cell that degraded to the default value."""
    if isinstance(value, str):
        log.warning(
            "Could not convert string to number, using 0.0",
            row=row,
            col=col,
            value=value,
        )
    elif isinstance(value, int) and not isinstance(value, bool):
        log.warning(
            "Integer out of float64 range, using 0.0",
            row=row,
            col=col,
            digits=len(str(abs(value))),
        )
    else:
        log.warning(
            "Unsupported value type, using 0.0",
            row=row,
            col=col,
            type=type(value).__name__,
            value=repr(value),
        )


def normalize_value(value: CellValue, row: int, col: int) -> float:
    """
    Convert a matrix cell to a float.

    Never raises: cells that cannot be converted are logged with their
    position and replaced by 0.0.

    Args:
        value: Cell value as decoded from JSON.
        row: Row index in the raw matrix (for diagnostics).
        col: Column index in the raw matrix (for diagnostics).

    Returns:
        Numeric value.
    """
    result = coerce_value(value)
    if result is None:
        warn_uncoercible(value, row, col)
        return DEFAULT_VALUE
    return result
