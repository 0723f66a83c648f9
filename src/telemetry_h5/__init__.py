"""
telemetry-h5: JSON telemetry to HDF5 converter.

This package normalizes heterogeneous telemetry records (mixed scalar types,
categorical state codes, label and attribute maps) into chunked, compressed
float64 datasets in an HDF5 file.
"""

from importlib.metadata import version

__version__ = version("telemetry-h5")

__all__ = ["__version__"]
