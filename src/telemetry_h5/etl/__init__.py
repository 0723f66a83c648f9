"""
Conversion pipeline from JSON telemetry records to HDF5.

Orchestrates ingestion, normalization, naming and storage.
"""

from telemetry_h5.etl.pipeline import ConversionPipeline, ConversionResult, run_conversion

__all__ = ["ConversionPipeline", "ConversionResult", "run_conversion"]
