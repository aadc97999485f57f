#!/usr/bin/python
#
# Python pciids library
# In-memory lookup table
#
# (c) 2025 Steven Noonan
# Licensed under the MIT license
#

from __future__ import annotations

import hashlib
import io
import logging
from types import MappingProxyType
from typing import IO, Iterable, Iterator, Mapping, Optional, Union

from .backends.textdb import (
    ClassDraft,
    ParseResult,
    VendorDraft,
    parse_lines,
    parse_pci_ids,
)
from .errors import IntegrityError
from .types import Class, Device, ProgIf, Subclass, Subsystem, Vendor

log = logging.getLogger(__name__)


def _clamp(x: int, low: int, high: int) -> int:
    return max(low, min(x, high))


class PciIdTable:
    """
    Read-only vendor and class tables built once from parsed drafts.

    Both tables are dict-backed (expected O(1) point lookups) and iterate in
    ascending id order. Children keep the order they had in the source text.
    """

    __slots__ = ("_vendors", "_classes")

    def __init__(
        self,
        vendors: Mapping[int, VendorDraft],
        classes: Mapping[int, ClassDraft],
    ) -> None:
        vendor_map = {}
        for vid in sorted(vendors):
            v = vendors[vid]
            devices = tuple(
                Device(
                    v.id,
                    d.id,
                    d.name,
                    tuple(Subsystem(sv, sd, name) for sv, sd, name in d.subsystems),
                    _table=self,
                )
                for d in v.devices
            )
            vendor_map[v.id] = Vendor(v.id, v.name, devices)

        class_map = {}
        for cid in sorted(classes):
            c = classes[cid]
            subclasses = tuple(
                Subclass(
                    c.id,
                    s.id,
                    s.name,
                    tuple(ProgIf(pi, name) for pi, name in s.prog_ifs),
                    _table=self,
                )
                for s in c.subclasses
            )
            class_map[c.id] = Class(c.id, c.name, subclasses)

        self._vendors: Mapping[int, Vendor] = MappingProxyType(vendor_map)
        self._classes: Mapping[int, Class] = MappingProxyType(class_map)
        self._check_integrity()

    def _check_integrity(self) -> None:
        for vid, vendor in self._vendors.items():
            if vendor.id != vid:
                raise IntegrityError(f"vendor {vendor.id:04x} keyed as {vid:04x}")
            for dev in vendor.devices:
                if self._vendors.get(dev.vendor_id) is not vendor:
                    raise IntegrityError(
                        f"device {dev.vendor_id:04x}:{dev.id:04x} not owned by its vendor"
                    )
        for cid, klass in self._classes.items():
            if klass.id != cid:
                raise IntegrityError(f"class {klass.id:02x} keyed as {cid:02x}")
            for sub in klass.subclasses:
                if self._classes.get(sub.class_id) is not klass:
                    raise IntegrityError(
                        f"subclass {sub.class_id:02x}{sub.id:02x} not owned by its class"
                    )

    # ----- structure -----
    @property
    def vendors(self) -> Mapping[int, Vendor]:
        return self._vendors

    @property
    def classes(self) -> Mapping[int, Class]:
        return self._classes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PciIdTable):
            return NotImplemented
        return dict(self._vendors) == dict(other._vendors) and dict(
            self._classes
        ) == dict(other._classes)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<PciIdTable vendors={len(self._vendors)} classes={len(self._classes)}>"

    # ----- point lookups -----
    def lookup_vendor(self, vendor_id: int) -> Optional[Vendor]:
        return self._vendors.get(vendor_id)

    def lookup_class(self, class_id: int) -> Optional[Class]:
        return self._classes.get(class_id)

    def lookup_device(self, vendor_id: int, device_id: int) -> Optional[Device]:
        vendor = self._vendors.get(vendor_id)
        return None if vendor is None else vendor.device(device_id)

    def lookup_subclass(self, class_id: int, subclass_id: int) -> Optional[Subclass]:
        klass = self._classes.get(class_id)
        return None if klass is None else klass.subclass(subclass_id)

    def iter_vendors(self) -> Iterator[Vendor]:
        return iter(self._vendors.values())

    def iter_classes(self) -> Iterator[Class]:
        return iter(self._classes.values())

    # ----- name helpers -----
    def get_vendor_name(self, vendor_id: int) -> Optional[str]:
        vendor = self.lookup_vendor(vendor_id)
        return None if vendor is None else vendor.name

    def get_device_name(self, vendor_id: int, device_id: int) -> Optional[str]:
        device = self.lookup_device(vendor_id, device_id)
        return None if device is None else device.name

    def get_subsystem_name(
        self, vendor_id: int, device_id: int, subvendor_id: int, subdevice_id: int
    ) -> Optional[str]:
        device = self.lookup_device(vendor_id, device_id)
        if device is None:
            return None
        sub = device.subsystem(subvendor_id, subdevice_id)
        return None if sub is None else sub.name

    def get_class_name(
        self, base: int, subclass: Optional[int] = None, prog_if: Optional[int] = None
    ) -> Optional[str]:
        klass = self.lookup_class(base)
        if klass is None:
            return None
        if subclass is None:
            return klass.name
        sub = klass.subclass(subclass)
        if sub is None:
            # unknown subclass → fall back to base only
            return klass.name
        if prog_if is None:
            return sub.name
        pi = sub.prog_if(prog_if)
        # fall back to subclass name if specific prog-if not found
        return sub.name if pi is None else pi.name

    def get_class_name_from_code(
        self, class_code_24bit: int, depth: int = 3
    ) -> Optional[str]:
        base = (class_code_24bit >> 16) & 0xFF
        sub = (class_code_24bit >> 8) & 0xFF
        pi = class_code_24bit & 0xFF
        depth = _clamp(depth, 0, 3)
        if depth > 2:
            return self.get_class_name(base, sub, pi)
        if depth > 1:
            return self.get_class_name(base, sub, None)
        return self.get_class_name(base, None, None)

    def describe_device_best_effort(
        self, vendor_id: int, device_id: int, class_code_24bit: Optional[int]
    ) -> str:
        # If exact vendor+device known, return "Vendor Device"
        dn = self.get_device_name(vendor_id, device_id)
        if dn:
            vn = self.get_vendor_name(vendor_id) or f"0x{vendor_id:04x}"
            return f"{vn} {dn}"

        vn = self.get_vendor_name(vendor_id)
        cn = (
            self.get_class_name_from_code(class_code_24bit, depth=2)
            if class_code_24bit is not None
            else None
        )
        vendor_part = vn if vn else f"0x{vendor_id:04x}"
        class_part = cn if cn else "PCI device"
        return f"Unknown {vendor_part} {class_part} (0x{device_id:04x})"

    # ----- canonical form -----
    def fingerprint(self) -> str:
        """SHA-256 of the canonical text dump; equal for builds of identical input."""
        buf = io.StringIO()
        dump_text(self, buf)
        return hashlib.sha256(buf.getvalue().encode("utf-8")).hexdigest()


def dump_text(table: PciIdTable, out: IO[str]) -> None:
    """
    Write `table` back out as pci.ids text. Comments are not preserved;
    top-level records come in id order, children in source order.
    """
    w = out.write

    # --- Vendors / Devices / Subsystems ---
    for vendor in table.iter_vendors():
        w(f"{vendor.id:04x}  {vendor.name}\n")
        for dev in vendor.devices:
            w(f"\t{dev.id:04x}  {dev.name}\n")
            for sub in dev.subsystems:
                w(f"\t\t{sub.subvendor:04x} {sub.subdevice:04x}  {sub.name}\n")

    w("\n")  # separator before classes

    # --- Classes / Subclasses / Prog-IF ---
    for klass in table.iter_classes():
        w(f"C {klass.id:02x}  {klass.name}\n")
        for sub in klass.subclasses:
            w(f"\t{sub.id:02x}  {sub.name}\n")
            for pi in sub.prog_ifs:
                w(f"\t\t{pi.id:02x}  {pi.name}\n")


def _from_result(result: ParseResult) -> PciIdTable:
    table = PciIdTable(result.vendors, result.classes)
    log.debug(
        "built %r from %d lines (stopped at %s)",
        table,
        result.lines_read,
        result.stopped_at,
    )
    return table


def build_table(lines: Iterable[Union[str, bytes]]) -> PciIdTable:
    """Parse a pci.ids line stream and build its lookup table."""
    return _from_result(parse_lines(lines))


def load_table(path: str) -> PciIdTable:
    """Build a lookup table from a pci.ids file on disk."""
    return _from_result(parse_pci_ids(path))
