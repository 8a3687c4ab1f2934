"""
Registry Module - Black Box Interface

Purpose: Discover capability units and register them with the host
Interface: auto_load_registry(), CapabilityUnit, CapabilityKind
Hidden: Filesystem layout, dynamic import, per-unit failure isolation

A unit that cannot be loaded is skipped and counted; the others still load.
"""

from .discovery import find_module_files, load_module
from .loader import LoadReport, ModuleResult, auto_load_registry, process_module
from .types import CapabilityKind, CapabilityUnit, is_capability_unit

__all__ = [
    "CapabilityKind",
    "CapabilityUnit",
    "LoadReport",
    "ModuleResult",
    "auto_load_registry",
    "find_module_files",
    "is_capability_unit",
    "load_module",
    "process_module",
]
