# tests/conftest.py
from __future__ import annotations
from pathlib import Path
import pytest

from pciids import api
from pciids.table import PciIdTable, load_table

# Excerpt of the real pci.ids: header, vendor section, class section.
SAMPLE_PCI_IDS = """\
#
#\tList of PCI ID's
#
# Version: 2025.06.30
# Date:    2025-06-30 03:15:02
#

# Vendors, devices and subsystems. Please keep sorted.

# Syntax:
# vendor  vendor_name
#\tdevice  device_name\t\t\t\t<-- single tab
#\t\tsubvendor subdevice  subsystem_name\t<-- two tabs

10de  NVIDIA Corporation
\t0020  NV4 [Riva TNT]
\t\t1043 0200  V3400 TNT
\t\t1048 0c18  Erazor II SGRAM
\t\t1092 0550  Viper V550
\t\t1092 8225  Viper V550
\t1db6  GV100GL [Tesla V100 PCIe 32GB]
\t1ba1  GP104M [GeForce GTX 1070 Mobile]
\t\t1458 1651  GeForce GTX 1070 Max-Q
14c3  MEDIATEK Corp.
\t0608  MT7921K (RZ608) Wi-Fi 6E 80MHz
\t0616  MT7922 802.11ax PCI Express Wireless Network Adapter
\t7663  MT7663 802.11ac PCI Express Wireless Network Adapter
16ae  SafeNet Inc
\t000a  SafeXcel 1841
\t1141  SafeXcel-1141
\t1841  SafeXcel 1842
17cb  Qualcomm Technologies, Inc
\t0108  QCA8074
\t0301  MSM8998 PCIe Root Complex
\t1101  QCS405 PCIe Root Complex
8086  Intel Corporation
\t1237  440FX - 82441FX PMC
\t7000  82371SB PIIX3 ISA [Natoma/Triton II]

# List of known device classes, subclasses and programming interfaces

# Syntax:
# C class\tclass_name
#\tsubclass\tsubclass_name  \t\t<-- single tab
#\t\tprog-if  prog-if_name  \t<-- two tabs

C 00  Unclassified device
\t00  Non-VGA unclassified device
\t01  VGA compatible unclassified device
C 01  Mass storage controller
\t00  SCSI storage controller
\t01  IDE interface
\t\t00  ISA Compatibility mode-only controller
\t\t05  PCI native mode-only controller
\t06  SATA controller
\t\t00  Vendor specific
\t\t01  AHCI 1.0
\t08  Non-Volatile memory controller
\t\t01  NVMHCI
\t\t02  NVM Express
C 07  Communication controller
\t00  Serial controller
\t\t00  8250
\t\t01  16450
\t\t02  16550
\t01  Parallel controller
\t80  Communication controller
C 08  Generic system peripheral
\t00  PIC
\t\t00  8259
\t\t10  IO-APIC
\t05  SD Host controller
\t80  System peripheral
C 0c  Serial bus controller
\t03  USB controller
\t\t00  UHCI
\t\t30  XHCI
\t\tfe  USB Device
"""


@pytest.fixture
def pci_ids_text(tmp_path: Path) -> Path:
    p = tmp_path / "pci.ids"
    p.write_text(SAMPLE_PCI_IDS, encoding="utf-8")
    return p


@pytest.fixture
def sample_table(pci_ids_text: Path) -> PciIdTable:
    return load_table(str(pci_ids_text))


@pytest.fixture
def default_from_sample(monkeypatch, pci_ids_text: Path) -> Path:
    """Point the process-wide table at the sample database, starting unbuilt."""
    monkeypatch.setenv("PCIIDS_PATH", str(pci_ids_text))
    monkeypatch.setenv("PCIIDS_NO_SYSTEM", "1")
    monkeypatch.setenv("PCIIDS_NO_BUNDLED", "1")
    monkeypatch.setattr(api, "_default", None)
    return pci_ids_text
