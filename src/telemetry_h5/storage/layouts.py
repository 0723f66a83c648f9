"""
Layout writers.

Translate a normalized record into store calls for one of the two output
layouts:

- flat: one chunked, compressed dataset per record, attributes on the dataset;
- grouped: one subgroup per record holding a fixed-width 'values' dataset,
  attributes on the subgroup, no compression.
"""

import h5py
import numpy as np

from telemetry_h5.layout.planner import plan_layout
from telemetry_h5.schemas.records import NormalizedRecord
from telemetry_h5.storage.writer import H5Object, H5Store

ORIGINAL_NAME_ATTR = "original_name"
LABEL_PREFIX = "l_"
ATTRIBUTE_PREFIX = "a_"
SCALAR_FLAG_ATTR = "la"

GROUPED_VALUES_NAME = "values"
GROUPED_WIDTH = 2


def namespace_group_name(index: int) -> str:
    """Name of the group holding namespace `index` in the grouped layout."""
    return f"dataset_{index}"


def _write_metadata(
    store: H5Store,
    obj: H5Object,
    record: NormalizedRecord,
    *,
    renamed: bool,
    stringify_attributes: bool,
) -> None:
    if renamed:
        store.write_attribute(obj, ORIGINAL_NAME_ATTR, record.category)
    for key, label in record.labels.items():
        store.write_attribute(obj, LABEL_PREFIX + key, label)
    for key, code in record.attributes.items():
        value = str(code) if stringify_attributes else code
        store.write_attribute(obj, ATTRIBUTE_PREFIX + key, value)
    store.write_attribute(obj, SCALAR_FLAG_ATTR, record.scalar_flag)


def write_flat_record(
    store: H5Store,
    parent: h5py.Group,
    record: NormalizedRecord,
    name: str,
    *,
    renamed: bool,
    compression_level: int,
) -> h5py.Dataset:
    """
    Persist one record as a dataset directly under parent.

    Call order: create dataset, original_name (if renamed), l_* labels,
    a_* attributes, la, then the flattened matrix.

    Args:
        store: Open store.
        parent: Group receiving the dataset (the file root for flat output).
        record: Non-empty normalized record.
        name: Unique dataset name.
        renamed: Whether name differs from the record category.
        compression_level: Gzip level for the dataset.

    Returns:
        The written dataset.
    """
    plan = plan_layout(record.rows, record.cols, compression_level)
    dataset = store.create_dataset(parent, name, plan)
    _write_metadata(store, dataset, record, renamed=renamed, stringify_attributes=False)
    store.write_matrix(dataset, record.matrix.ravel(order="C"))
    return dataset


def fixed_width(matrix: np.ndarray, width: int = GROUPED_WIDTH) -> np.ndarray:
    """Take the first `width` columns of matrix, zero-padding narrower matrices."""
    out = np.zeros((matrix.shape[0], width), dtype=np.float64)
    n = min(width, matrix.shape[1])
    out[:, :n] = matrix[:, :n]
    return out


def write_grouped_record(
    store: H5Store,
    parent: h5py.Group,
    record: NormalizedRecord,
    name: str,
    *,
    renamed: bool,
) -> h5py.Group:
    """
    Persist one record as a subgroup with a fixed-width 'values' dataset.

    Attribute values under a_* are written as strings in this layout.

    Args:
        store: Open store.
        parent: Namespace group.
        record: Non-empty normalized record.
        name: Unique subgroup name.
        renamed: Whether name differs from the record category.

    Returns:
        The written subgroup.
    """
    group = store.create_group(parent, name)
    _write_metadata(store, group, record, renamed=renamed, stringify_attributes=True)
    values = fixed_width(record.matrix)
    dataset = store.create_plain_dataset(group, GROUPED_VALUES_NAME, values.shape)
    store.write_matrix(dataset, values.ravel(order="C"))
    return group
