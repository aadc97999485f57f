#!/usr/bin/python
#
# Python pciids library
# Immutable PCI ID records
#
# (c) 2025 Steven Noonan
# Licensed under the MIT license
#

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Optional, Tuple

from .errors import IntegrityError

if TYPE_CHECKING:  # pragma: no cover
    from .table import PciIdTable


def _owner(table: Optional["PciIdTable"]) -> "PciIdTable":
    # Records built outside a table resolve against the process-wide one.
    if table is not None:
        return table
    from .api import default_table

    return default_table()


@dataclass(frozen=True, slots=True)
class Subsystem:
    """
    A subvendor/subdevice pairing describing a card built on a device.

    The PCI ID database is not an authoritative source of subsystem
    information; query the hardware when it matters.
    """

    subvendor: int
    subdevice: int
    name: str


@dataclass(frozen=True, slots=True)
class Device:
    vendor_id: int
    id: int
    name: str
    subsystems: Tuple[Subsystem, ...] = ()
    _table: Optional["PciIdTable"] = field(
        default=None, compare=False, hash=False, repr=False
    )

    @classmethod
    def by_vendor_and_id(
        cls, vendor_id: int, device_id: int, table: Optional["PciIdTable"] = None
    ) -> Optional["Device"]:
        """First device with `device_id` under `vendor_id`, or None."""
        return _owner(table).lookup_device(vendor_id, device_id)

    def vendor(self) -> "Vendor":
        """The vendor this device belongs to. Looked up by id, O(1)."""
        vendor = _owner(self._table).lookup_vendor(self.vendor_id)
        if vendor is None:
            raise IntegrityError(
                f"device {self.vendor_id:04x}:{self.id:04x} has no vendor in its table"
            )
        return vendor

    def as_vid_pid(self) -> Tuple[int, int]:
        return (self.vendor_id, self.id)

    def subsystem(self, subvendor: int, subdevice: int) -> Optional[Subsystem]:
        for sub in self.subsystems:
            if sub.subvendor == subvendor and sub.subdevice == subdevice:
                return sub
        return None

    def iter_subsystems(self) -> Iterator[Subsystem]:
        return iter(self.subsystems)


@dataclass(frozen=True, slots=True)
class Vendor:
    id: int
    name: str
    devices: Tuple[Device, ...] = ()

    def device(self, device_id: int) -> Optional[Device]:
        # linear scan: ids may repeat, first one in source order wins
        for dev in self.devices:
            if dev.id == device_id:
                return dev
        return None

    def iter_devices(self) -> Iterator[Device]:
        return iter(self.devices)


@dataclass(frozen=True, slots=True)
class ProgIf:
    """A programming interface of a subclass. Not authoritative, like subsystems."""

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Subclass:
    class_id: int
    id: int
    name: str
    prog_ifs: Tuple[ProgIf, ...] = ()
    _table: Optional["PciIdTable"] = field(
        default=None, compare=False, hash=False, repr=False
    )

    @classmethod
    def by_class_and_id(
        cls, class_id: int, subclass_id: int, table: Optional["PciIdTable"] = None
    ) -> Optional["Subclass"]:
        """First subclass with `subclass_id` under `class_id`, or None."""
        return _owner(table).lookup_subclass(class_id, subclass_id)

    def class_of(self) -> "Class":
        """The class this subclass belongs to. Looked up by id, O(1)."""
        klass = _owner(self._table).lookup_class(self.class_id)
        if klass is None:
            raise IntegrityError(
                f"subclass {self.class_id:02x}{self.id:02x} has no class in its table"
            )
        return klass

    def as_cid_sid(self) -> Tuple[int, int]:
        return (self.class_id, self.id)

    def prog_if(self, prog_if_id: int) -> Optional[ProgIf]:
        for pi in self.prog_ifs:
            if pi.id == prog_if_id:
                return pi
        return None

    def iter_prog_ifs(self) -> Iterator[ProgIf]:
        return iter(self.prog_ifs)


@dataclass(frozen=True, slots=True)
class Class:
    id: int
    name: str
    subclasses: Tuple[Subclass, ...] = ()

    def subclass(self, subclass_id: int) -> Optional[Subclass]:
        for sub in self.subclasses:
            if sub.id == subclass_id:
                return sub
        return None

    def iter_subclasses(self) -> Iterator[Subclass]:
        return iter(self.subclasses)


# Child iteration, in source order. Each call starts a fresh pass.
def devices_of(vendor: Vendor) -> Iterator[Device]:
    return vendor.iter_devices()


def subsystems_of(device: Device) -> Iterator[Subsystem]:
    return device.iter_subsystems()


def subclasses_of(klass: Class) -> Iterator[Subclass]:
    return klass.iter_subclasses()


def prog_ifs_of(subclass: Subclass) -> Iterator[ProgIf]:
    return subclass.iter_prog_ifs()
