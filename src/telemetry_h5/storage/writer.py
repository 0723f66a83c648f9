"""
HDF5 store adapter.

Thin wrapper over h5py exposing the primitives the pipeline needs: create a
group, create a typed dataset from a LayoutPlan, write an attribute, write a
flattened matrix. Every h5py failure is re-raised as StoreError naming the
operation, so the CLI can report it and abort.
"""

from pathlib import Path
from types import TracebackType
from typing import TypeAlias

import h5py
import numpy as np

from telemetry_h5.schemas.records import LayoutPlan
from telemetry_h5.utils.logging import get_logger

log = get_logger(__name__)

H5Object: TypeAlias = h5py.Group | h5py.Dataset
AttributeValue: TypeAlias = str | int


class StoreError(Exception):
    """Raised when a store operation fails. Always fatal for the run."""

    def __init__(self, operation: str, cause: BaseException | str) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation}: {cause}")


def gzip_available() -> bool:
    """Check whether the HDF5 library was built with the deflate filter."""
    return bool(h5py.h5z.filter_avail(h5py.h5z.FILTER_DEFLATE))


def check_name(name: str, operation: str) -> None:
    """Reject names h5py would resolve as a path instead of a single link."""
    if not name or name == "." or "/" in name:
        raise StoreError(operation, f"invalid object name {name!r}")


class H5Store:
    """
    Write-only HDF5 file.

    Use as a context manager; the file is created (truncated) on enter and
    closed on exit, including when an error aborts the run.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._file: h5py.File | None = None
        self._gzip_available: bool | None = None
        self.compression_fallbacks = 0

    def __enter__(self) -> "H5Store":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        try:
            self._file = h5py.File(self.path, "w")
        except (OSError, ValueError) as e:
            raise StoreError(f"create file '{self.path}'", e) from e
        log.info("Created HDF5 file", path=str(self.path))

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    @property
    def root(self) -> h5py.File:
        if self._file is None:
            raise StoreError("access file", "store is not open")
        return self._file

    def create_group(self, parent: h5py.Group, name: str) -> h5py.Group:
        """Create a group under parent."""
        check_name(name, f"create group '{name}'")
        try:
            return parent.create_group(name)
        except (ValueError, OSError, RuntimeError, TypeError) as e:
            raise StoreError(f"create group '{name}'", e) from e

    def _compression_options(self, plan: LayoutPlan, name: str) -> dict[str, object]:
        if not plan.compressed:
            return {}
        if self._gzip_available is None:
            self._gzip_available = gzip_available()
        if not self._gzip_available:
            self.compression_fallbacks += 1
            log.warning(
                "Gzip compression unavailable, writing uncompressed",
                dataset=name,
                level=plan.compression_level,
            )
            return {}
        return {"compression": "gzip", "compression_opts": plan.compression_level}

    def create_dataset(self, parent: h5py.Group, name: str, plan: LayoutPlan) -> h5py.Dataset:
        """
        Create a float64 dataset with the planned shape, chunks and compression.

        Args:
            parent: Group to create the dataset in.
            name: Dataset name.
            plan: Layout plan.

        Returns:
            The new (empty) dataset.
        """
        check_name(name, f"create dataset '{name}'")
        options = self._compression_options(plan, name)
        try:
            return parent.create_dataset(
                name,
                shape=plan.shape,
                dtype=np.float64,
                chunks=plan.chunk_shape,
                **options,
            )
        except (ValueError, OSError, RuntimeError, TypeError) as e:
            raise StoreError(f"create dataset '{name}'", e) from e

    def create_plain_dataset(
        self, parent: h5py.Group, name: str, shape: tuple[int, int]
    ) -> h5py.Dataset:
        """Create a contiguous, uncompressed float64 dataset."""
        check_name(name, f"create dataset '{name}'")
        try:
            return parent.create_dataset(name, shape=shape, dtype=np.float64)
        except (ValueError, OSError, RuntimeError, TypeError) as e:
            raise StoreError(f"create dataset '{name}'", e) from e

    def write_attribute(self, obj: H5Object, key: str, value: AttributeValue) -> None:
        """
        Write a scalar attribute.

        Strings are stored as variable-length UTF-8 strings, integers as uint8.
        """
        try:
            if isinstance(value, str):
                obj.attrs.create(key, value, dtype=h5py.string_dtype("utf-8"))
            else:
                obj.attrs.create(key, value, dtype=np.uint8)
        except (ValueError, OSError, RuntimeError, TypeError, OverflowError) as e:
            raise StoreError(f"write attribute '{key}' on '{obj.name}'", e) from e

    def write_matrix(self, dataset: h5py.Dataset, values: np.ndarray) -> None:
        """
        Write a flattened row-major buffer into a 2D dataset.

        Element [i][j] of the dataset is taken from values[i * cols + j].
        """
        expected = int(np.prod(dataset.shape))
        if values.size != expected:
            raise StoreError(
                f"write data to '{dataset.name}'",
                f"expected {expected} values, got {values.size}",
            )
        try:
            dataset[...] = np.asarray(values, dtype=np.float64).reshape(dataset.shape)
        except (ValueError, OSError, RuntimeError, TypeError) as e:
            raise StoreError(f"write data to '{dataset.name}'", e) from e
