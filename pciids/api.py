from __future__ import annotations
import logging
import threading
from typing import Iterator, Optional
from .table import PciIdTable, build_table, load_table
from .types import Class, Device, Subclass, Vendor

log = logging.getLogger(__name__)

_default: Optional[PciIdTable] = None
_default_lock = threading.Lock()


def open_table(path: Optional[str] = None) -> PciIdTable:
    """Build a new table from `path`, or from the first discovered database."""
    from .backends.discovery import discover_table

    return discover_table(path)


def default_table() -> PciIdTable:
    """
    The process-wide table, built on first use.

    Concurrent first callers block until the single build finishes and all
    get the same instance. A failed build publishes nothing.
    """
    table = _default
    if table is not None:
        return table
    return _build_default()


def _build_default() -> PciIdTable:
    global _default
    with _default_lock:
        if _default is None:
            log.debug("building default PCI ID table")
            _default = open_table()
        return _default


def lookup_vendor(vendor_id: int) -> Optional[Vendor]:
    return default_table().lookup_vendor(vendor_id)


def lookup_class(class_id: int) -> Optional[Class]:
    return default_table().lookup_class(class_id)


def lookup_device(vendor_id: int, device_id: int) -> Optional[Device]:
    return default_table().lookup_device(vendor_id, device_id)


def lookup_subclass(class_id: int, subclass_id: int) -> Optional[Subclass]:
    return default_table().lookup_subclass(class_id, subclass_id)


def iter_vendors() -> Iterator[Vendor]:
    return default_table().iter_vendors()


def iter_classes() -> Iterator[Class]:
    return default_table().iter_classes()


__all__ = [
    "PciIdTable",
    "build_table",
    "load_table",
    "open_table",
    "default_table",
    "lookup_vendor",
    "lookup_class",
    "lookup_device",
    "lookup_subclass",
    "iter_vendors",
    "iter_classes",
]
