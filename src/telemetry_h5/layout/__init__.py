"""
Layout planning: unique dataset names and chunking/compression parameters.
"""

from telemetry_h5.layout.naming import NameRegistry
from telemetry_h5.layout.planner import plan_layout

__all__ = ["NameRegistry", "plan_layout"]
