# tests/test_table.py
from __future__ import annotations
import dataclasses
import io
import pytest

from pciids import (
    Device,
    IntegrityError,
    MalformedDatabase,
    Subclass,
    build_table,
    devices_of,
    dump_text,
    load_table,
    prog_ifs_of,
    subclasses_of,
    subsystems_of,
)


def test_vendor_lookup(sample_table):
    vendor = sample_table.lookup_vendor(0x14C3)
    assert vendor.name == "MEDIATEK Corp."
    assert vendor.id == 0x14C3


def test_vendor_devices_back_reference(sample_table):
    for vendor in sample_table.iter_vendors():
        assert vendor.devices
        for device in vendor.devices:
            assert device.vendor() == vendor
            assert device.vendor() is vendor
            assert device.name


def test_device_by_vendor_and_id(sample_table):
    device = Device.by_vendor_and_id(0x16AE, 0x000A, table=sample_table)
    assert device.name == "SafeXcel 1841"

    vid, pid = device.as_vid_pid()
    assert vid == device.vendor().id
    assert pid == device.id

    device2 = Device.by_vendor_and_id(vid, pid, table=sample_table)
    assert device == device2


def test_class_lookup(sample_table):
    klass = sample_table.lookup_class(0x08)
    assert klass.name == "Generic system peripheral"
    assert klass.id == 0x08


def test_class_subclasses_back_reference(sample_table):
    for klass in sample_table.iter_classes():
        for subclass in klass.subclasses:
            assert subclass.class_of() == klass
            assert subclass.name


def test_subclass_by_class_and_id(sample_table):
    subclass = Subclass.by_class_and_id(0x07, 0x00, table=sample_table)
    assert subclass.name == "Serial controller"
    assert subclass.class_of().id == 0x07

    cid, sid = subclass.as_cid_sid()
    assert Subclass.by_class_and_id(cid, sid, table=sample_table) == subclass


def test_lookup_misses_are_none(sample_table):
    assert sample_table.lookup_vendor(0x1234) is None
    assert sample_table.lookup_vendor(0x0000) is None
    assert sample_table.lookup_vendor(0xFFFF) is None
    assert sample_table.lookup_vendor(0x18086) is None
    assert sample_table.lookup_vendor(-1) is None
    assert sample_table.lookup_class(0xFF) is None
    assert sample_table.lookup_class(0x1F) is None
    assert sample_table.lookup_class(0x108) is None
    assert sample_table.lookup_device(0x8086, 0xFFFF) is None
    assert sample_table.lookup_device(0x1234, 0x1237) is None
    assert sample_table.lookup_subclass(0x07, 0x55) is None
    assert sample_table.lookup_subclass(0x55, 0x00) is None
    assert Device.by_vendor_and_id(0x16AE, 0xBEEF, table=sample_table) is None
    assert Subclass.by_class_and_id(0xFF, 0x00, table=sample_table) is None


def test_top_level_iteration(sample_table):
    ids = [v.id for v in sample_table.iter_vendors()]
    assert ids == [0x10DE, 0x14C3, 0x16AE, 0x17CB, 0x8086]
    # each call is a fresh pass
    assert [v.id for v in sample_table.iter_vendors()] == ids
    assert [c.id for c in sample_table.iter_classes()] == [0x00, 0x01, 0x07, 0x08, 0x0C]


def test_child_iteration_is_source_order_and_restartable(sample_table):
    nv = sample_table.lookup_vendor(0x10DE)
    assert [d.id for d in devices_of(nv)] == [0x0020, 0x1DB6, 0x1BA1]
    assert [d.id for d in devices_of(nv)] == [0x0020, 0x1DB6, 0x1BA1]

    tnt = nv.device(0x0020)
    subs = [(s.subvendor, s.subdevice) for s in subsystems_of(tnt)]
    assert subs == [(0x1043, 0x0200), (0x1048, 0x0C18), (0x1092, 0x0550), (0x1092, 0x8225)]
    assert list(subsystems_of(nv.device(0x1DB6))) == []

    storage = sample_table.lookup_class(0x01)
    assert [s.id for s in subclasses_of(storage)] == [0x00, 0x01, 0x06, 0x08]
    nvme = storage.subclass(0x08)
    assert [(p.id, p.name) for p in prog_ifs_of(nvme)] == [
        (0x01, "NVMHCI"),
        (0x02, "NVM Express"),
    ]


def test_first_match_over_repeated_ids():
    table = build_table(
        ["1234  Vendor", "\t0002  First", "\t0001  Other", "\t0002  Second"]
    )
    assert table.lookup_device(0x1234, 0x0002).name == "First"
    assert [d.name for d in table.lookup_vendor(0x1234).devices] == [
        "First",
        "Other",
        "Second",
    ]


def test_table_is_read_only(sample_table):
    with pytest.raises(TypeError):
        sample_table.vendors[0x1234] = None  # type: ignore[index]
    with pytest.raises(TypeError):
        del sample_table.classes[0x08]  # type: ignore[attr-defined]

    vendor = sample_table.lookup_vendor(0x8086)
    with pytest.raises(dataclasses.FrozenInstanceError):
        vendor.name = "Not Intel"  # type: ignore[misc]
    assert isinstance(vendor.devices, tuple)
    assert isinstance(vendor.devices[0].subsystems, tuple)


def test_records_are_hashable_and_compare_by_value(pci_ids_text, sample_table):
    other = load_table(str(pci_ids_text))
    d1 = sample_table.lookup_device(0x10DE, 0x0020)
    d2 = other.lookup_device(0x10DE, 0x0020)
    assert d1 == d2
    assert hash(d1) == hash(d2)
    assert {d1, d2} == {d1}


def test_build_is_deterministic(pci_ids_text):
    raw = pci_ids_text.read_bytes()
    t1 = build_table(io.BytesIO(raw))
    t2 = build_table(io.BytesIO(raw))
    assert t1 is not t2
    assert t1 == t2
    assert t1.fingerprint() == t2.fingerprint()
    assert list(t1.vendors) == list(t2.vendors)
    assert list(t1.classes) == list(t2.classes)


def test_different_input_changes_fingerprint(sample_table):
    other = build_table(["8086  Intel Corporation"])
    assert other != sample_table
    assert other.fingerprint() != sample_table.fingerprint()


def test_dump_text_round_trip(sample_table):
    buf = io.StringIO()
    dump_text(sample_table, buf)
    text = buf.getvalue()
    assert text.startswith("10de  NVIDIA Corporation\n\t0020  NV4 [Riva TNT]\n")
    assert "\t\t1043 0200  V3400 TNT\n" in text
    assert "\nC 0c  Serial bus controller\n\t03  USB controller\n\t\t00  UHCI\n" in text

    again = build_table(text.splitlines())
    assert again == sample_table
    assert again.fingerprint() == sample_table.fingerprint()


def test_empty_table():
    table = build_table([])
    assert list(table.iter_vendors()) == []
    assert list(table.iter_classes()) == []
    assert table.lookup_vendor(0x8086) is None
    assert repr(table) == "<PciIdTable vendors=0 classes=0>"


def test_malformed_input_publishes_no_table(tmp_path):
    p = tmp_path / "pci.ids"
    p.write_text("8086  Intel Corporation\n\t\t1043 0200  orphan\n", encoding="utf-8")
    with pytest.raises(MalformedDatabase):
        load_table(str(p))


def test_back_reference_miss_is_an_integrity_error(sample_table):
    stray = Device(0x9999, 0x0001, "Not in any table", _table=sample_table)
    with pytest.raises(IntegrityError):
        stray.vendor()
    stray_sub = Subclass(0x99, 0x00, "Not in any table", _table=sample_table)
    with pytest.raises(AssertionError):
        stray_sub.class_of()


def test_name_lookups(sample_table):
    db = sample_table
    assert db.get_vendor_name(0x8086) == "Intel Corporation"
    assert "440FX" in (db.get_device_name(0x8086, 0x1237) or "")
    assert db.describe_device_best_effort(0x10DE, 0x1BA1, 0x030000)

    # Subsystem lookups
    assert (
        db.get_subsystem_name(0x10DE, 0x1BA1, 0x1458, 0x1651)
        == "GeForce GTX 1070 Max-Q"
    )
    assert db.get_subsystem_name(0x10DE, 0x1BA1, 0x1043, 0x0020) is None
    assert db.get_subsystem_name(0x10DE, 0x0020, 0x1092, 0x8225) == "Viper V550"
    assert db.get_subsystem_name(0x10DE, 0x1234, 0x1234, 0x1234) is None
    assert db.get_subsystem_name(0x1234, 0x1234, 0x1234, 0x1234) is None

    # Class lookups, falling back to the less specific name
    assert db.get_class_name(0x08) == "Generic system peripheral"
    assert db.get_class_name(0x08, 0x00) == "PIC"
    assert db.get_class_name(0x08, 0x00, 0x10) == "IO-APIC"
    assert db.get_class_name(0x0C, 0x03, 0xBA) == "USB controller"
    assert db.get_class_name(0x0C, 0x03, 0x30) == "XHCI"
    assert db.get_class_name(0x07, 0x09) == "Communication controller"
    assert db.get_class_name(0xFF) is None
    assert db.get_class_name(0xFF, 0x00, 0x00) is None

    assert db.get_class_name_from_code(0x0C0330, 3) == "XHCI"
    assert db.get_class_name_from_code(0x0C0330, 2) == "USB controller"
    assert db.get_class_name_from_code(0x0C0330, 1) == "Serial bus controller"
    assert db.get_class_name_from_code(0x1F0000, 3) is None


def test_describe_device_best_effort(sample_table):
    db = sample_table
    assert (
        db.describe_device_best_effort(0x16AE, 0x000A, None)
        == "SafeNet Inc SafeXcel 1841"
    )
    assert (
        db.describe_device_best_effort(0x8086, 0x4321, 0x0C0330)
        == "Unknown Intel Corporation USB controller (0x4321)"
    )
    s = db.describe_device_best_effort(0x1234, 0x5678, None)
    assert s == "Unknown 0x1234 PCI device (0x5678)"
