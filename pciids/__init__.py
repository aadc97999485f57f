"""
pciids: PCI ID database (pci.ids) parser and read-only lookup table.

Public API:
    - Building tables:
        build_table, load_table, open_table, PciIdTable
    - Process-wide table (built once, on first use):
        default_table, lookup_vendor, lookup_class, lookup_device,
        lookup_subclass, iter_vendors, iter_classes
    - Records and child iteration:
        Vendor, Device, Subsystem, Class, Subclass, ProgIf,
        devices_of, subsystems_of, subclasses_of, prog_ifs_of
    - Errors:
        PciIdsError, MalformedDatabase, IntegrityError
"""

from __future__ import annotations

from importlib.metadata import version, PackageNotFoundError

try:  # pragma: no cover
    __version__ = version("pciids")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0.dev0"

# Public API re-exports
from .api import (
    default_table,
    iter_classes,
    iter_vendors,
    lookup_class,
    lookup_device,
    lookup_subclass,
    lookup_vendor,
    open_table,
)
from .errors import IntegrityError, MalformedDatabase, PciIdsError
from .table import PciIdTable, build_table, dump_text, load_table
from .types import (
    Class,
    Device,
    ProgIf,
    Subclass,
    Subsystem,
    Vendor,
    devices_of,
    prog_ifs_of,
    subclasses_of,
    subsystems_of,
)

__all__ = [
    "__version__",
    # Tables
    "PciIdTable",
    "build_table",
    "load_table",
    "open_table",
    "dump_text",
    # Default table
    "default_table",
    "lookup_vendor",
    "lookup_class",
    "lookup_device",
    "lookup_subclass",
    "iter_vendors",
    "iter_classes",
    # Records
    "Vendor",
    "Device",
    "Subsystem",
    "Class",
    "Subclass",
    "ProgIf",
    "devices_of",
    "subsystems_of",
    "subclasses_of",
    "prog_ifs_of",
    # Errors
    "PciIdsError",
    "MalformedDatabase",
    "IntegrityError",
]
