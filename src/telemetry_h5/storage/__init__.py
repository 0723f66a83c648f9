"""
HDF5 storage: store adapter and layout writers.
"""

from telemetry_h5.storage.layouts import write_flat_record, write_grouped_record
from telemetry_h5.storage.writer import H5Store, StoreError

__all__ = ["H5Store", "StoreError", "write_flat_record", "write_grouped_record"]
