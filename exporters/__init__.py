"""Exporters for writing the generated reducer artifacts."""

from .global_module_exporter import to_global_module
from .reducer_map_exporter import to_reducer_map

__all__ = ["to_global_module", "to_reducer_map"]
