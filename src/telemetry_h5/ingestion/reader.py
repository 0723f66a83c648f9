"""
JSON input reader.

The input document is a list of namespaces, each a list of records with the
compact keys c, l, a, la, v. Everything is read and validated before any
output is created.
"""

import json
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from telemetry_h5.schemas.records import RawRecord
from telemetry_h5.utils.logging import get_logger

log = get_logger(__name__)

Namespaces = list[list[RawRecord]]

_NAMESPACES_ADAPTER: TypeAdapter[Namespaces] = TypeAdapter(Namespaces)


class InputError(Exception):
    """Raised when the input cannot be read or does not match the record model."""

    def __init__(self, operation: str, cause: BaseException | str) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation}: {cause}")


def parse_namespaces(data: object) -> Namespaces:
    """
    Validate decoded JSON against the namespace/record model.

    Args:
        data: Result of json.load.

    Returns:
        List of namespaces, each a list of RawRecord.

    Raises:
        InputError: If the structure or a field value is invalid.
    """
    try:
        return _NAMESPACES_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise InputError("decode JSON", e) from e


def read_namespaces(path: Path) -> Namespaces:
    """
    Read and validate the JSON input file.

    Args:
        path: Path to the JSON document.

    Returns:
        List of namespaces, each a list of RawRecord.

    Raises:
        InputError: If the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise InputError(f"read JSON file '{path}'", e) from e
    except ValueError as e:
        # JSONDecodeError, UnicodeDecodeError and integer digit limits
        raise InputError("decode JSON", e) from e

    namespaces = parse_namespaces(data)
    log.info(
        "Loaded input",
        path=str(path),
        namespaces=len(namespaces),
        records=sum(len(ns) for ns in namespaces),
    )
    return namespaces
