#!/usr/bin/python
#
# Python pciids library
# Plaintext database format parser
#
# (c) 2025 Steven Noonan
# Licensed under the MIT license
#

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..errors import MalformedDatabase

log = logging.getLogger(__name__)

SubsystemRow = Tuple[int, int, str]  # (subvendor, subdevice, name)
ProgIfRow = Tuple[int, str]  # (prog_if, name)


class LineKind(enum.Enum):
    SKIP = "skip"
    VENDOR = "vendor"
    DEVICE = "device"
    SUBSYSTEM = "subsystem"
    CLASS = "class"
    SUBCLASS = "subclass"
    PROG_IF = "prog-if"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ParsedLine:
    kind: LineKind
    ids: Tuple[int, ...] = ()
    name: str = ""

    @property
    def id(self) -> int:
        return self.ids[0]


# ---------- Line classifier ----------
_HEX4 = r"([0-9a-fA-F]{4})"
_HEX2 = r"([0-9a-fA-F]{2})"
# exactly two spaces, then a name that does not itself start with whitespace
_NAME = r"  ((?!\s).*)"

# fmt: off
_GRAMMAR = (
    (LineKind.VENDOR,    re.compile(_HEX4 + _NAME)),
    (LineKind.DEVICE,    re.compile("\t" + _HEX4 + _NAME)),
    (LineKind.SUBSYSTEM, re.compile("\t\t" + _HEX4 + " " + _HEX4 + _NAME)),
    (LineKind.CLASS,     re.compile("C " + _HEX2 + _NAME)),
    (LineKind.SUBCLASS,  re.compile("\t" + _HEX2 + _NAME)),
    (LineKind.PROG_IF,   re.compile("\t\t" + _HEX2 + _NAME)),
)
# fmt: on

_SKIP = ParsedLine(LineKind.SKIP)
_UNRECOGNIZED = ParsedLine(LineKind.UNRECOGNIZED)


def classify_line(line: str) -> ParsedLine:
    """
    Match one line (no terminator) against the six record grammars.

    Every line matches at most one grammar. Lines matching none, including
    trailer sections such as languages or HID usages, come back as
    UNRECOGNIZED; this never raises.
    """
    if not line or line.startswith("#"):
        return _SKIP
    for kind, pattern in _GRAMMAR:
        m = pattern.fullmatch(line)
        if m is not None:
            *ids, name = m.groups()
            return ParsedLine(kind, tuple(int(i, 16) for i in ids), name)
    return _UNRECOGNIZED


# ---------- Hierarchy builder ----------
@dataclass
class DeviceDraft:
    id: int
    name: str
    subsystems: List[SubsystemRow] = field(default_factory=list)


@dataclass
class VendorDraft:
    id: int
    name: str
    devices: List[DeviceDraft] = field(default_factory=list)
    lineno: int = 0


@dataclass
class SubclassDraft:
    id: int
    name: str
    prog_ifs: List[ProgIfRow] = field(default_factory=list)


@dataclass
class ClassDraft:
    id: int
    name: str
    subclasses: List[SubclassDraft] = field(default_factory=list)
    lineno: int = 0


@dataclass
class ParseResult:
    vendors: Dict[int, VendorDraft]
    classes: Dict[int, ClassDraft]
    lines_read: int
    stopped_at: Optional[int] = None  # line number of the first unrecognized line


class HierarchyBuilder:
    """
    Two independent state machines over one line stream:
    vendor -> device -> subsystem, and class -> subclass -> prog-if.

    A top-level record is finalized into its mapping when the next record of
    the same kind begins, or at the end of input. The first unrecognized line
    stops both tracks.
    """

    def __init__(self) -> None:
        self.vendors: Dict[int, VendorDraft] = {}
        self.classes: Dict[int, ClassDraft] = {}
        self.lineno = 0
        self.stopped_at: Optional[int] = None

        self._vendor: Optional[VendorDraft] = None
        self._device_id: Optional[int] = None
        self._class: Optional[ClassDraft] = None
        self._subclass_id: Optional[int] = None

    @property
    def halted(self) -> bool:
        return self.stopped_at is not None

    def feed(self, line: str) -> bool:
        """Consume one line. Returns False once the recognized region has ended."""
        if self.halted:
            return False
        self.lineno += 1

        rec = classify_line(line)
        kind = rec.kind
        if kind is LineKind.SKIP:
            pass
        elif kind is LineKind.VENDOR:
            self._finalize_vendor()
            self._vendor = VendorDraft(rec.id, rec.name, lineno=self.lineno)
            self._device_id = None
        elif kind is LineKind.DEVICE:
            vendor = self._require_vendor(line)
            vendor.devices.append(DeviceDraft(rec.id, rec.name))
            self._device_id = rec.id
        elif kind is LineKind.SUBSYSTEM:
            device = self._require_device(line)
            subvendor, subdevice = rec.ids
            device.subsystems.append((subvendor, subdevice, rec.name))
        elif kind is LineKind.CLASS:
            self._finalize_class()
            self._class = ClassDraft(rec.id, rec.name, lineno=self.lineno)
            self._subclass_id = None
        elif kind is LineKind.SUBCLASS:
            klass = self._require_class(line)
            klass.subclasses.append(SubclassDraft(rec.id, rec.name))
            self._subclass_id = rec.id
        elif kind is LineKind.PROG_IF:
            subclass = self._require_subclass(line)
            subclass.prog_ifs.append((rec.id, rec.name))
        else:
            # malformed line or unsupported trailer section; both end the region
            log.debug("recognized region ends at line %d", self.lineno)
            self.stopped_at = self.lineno
            return False
        return True

    def finish(self) -> ParseResult:
        self._finalize_vendor()
        self._finalize_class()
        return ParseResult(self.vendors, self.classes, self.lineno, self.stopped_at)

    # ----- parent checks -----
    def _require_vendor(self, line: str) -> VendorDraft:
        if self._vendor is None:
            raise MalformedDatabase("device without a vendor", self.lineno, line)
        return self._vendor

    def _require_device(self, line: str) -> DeviceDraft:
        if self._vendor is None:
            raise MalformedDatabase("subsystem without a vendor", self.lineno, line)
        # first match in encounter order, even when device ids repeat
        for device in self._vendor.devices:
            if device.id == self._device_id:
                return device
        raise MalformedDatabase("subsystem without a device", self.lineno, line)

    def _require_class(self, line: str) -> ClassDraft:
        if self._class is None:
            raise MalformedDatabase("subclass without a class", self.lineno, line)
        return self._class

    def _require_subclass(self, line: str) -> SubclassDraft:
        if self._class is None:
            raise MalformedDatabase("prog-if without a class", self.lineno, line)
        for subclass in self._class.subclasses:
            if subclass.id == self._subclass_id:
                return subclass
        raise MalformedDatabase("prog-if without a subclass", self.lineno, line)

    # ----- finalization -----
    def _finalize_vendor(self) -> None:
        vendor, self._vendor = self._vendor, None
        if vendor is None:
            return
        if vendor.id in self.vendors:
            raise MalformedDatabase(f"duplicate vendor {vendor.id:04x}", vendor.lineno)
        self.vendors[vendor.id] = vendor

    def _finalize_class(self) -> None:
        klass, self._class = self._class, None
        if klass is None:
            return
        if klass.id in self.classes:
            raise MalformedDatabase(f"duplicate class {klass.id:02x}", klass.lineno)
        self.classes[klass.id] = klass


def parse_lines(lines: Iterable[Union[str, bytes]]) -> ParseResult:
    """
    Run the hierarchy builder over a line stream. Lines may be text or bytes
    (decoded as UTF-8 with replacement); trailing line terminators are dropped.
    """
    builder = HierarchyBuilder()
    for raw in lines:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        if not builder.feed(raw.rstrip("\r\n")):
            break
    return builder.finish()


def parse_pci_ids(path: str) -> ParseResult:
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return parse_lines(f)
