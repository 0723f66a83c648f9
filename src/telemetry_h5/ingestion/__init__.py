"""
Input ingestion: JSON decoding and record validation.
"""

from telemetry_h5.ingestion.reader import InputError, parse_namespaces, read_namespaces

__all__ = ["InputError", "parse_namespaces", "read_namespaces"]
