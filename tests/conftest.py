# tests/conftest.py
from __future__ import annotations
from pathlib import Path
from typing import Optional
import pytest

MINIMAL_PCI_IDS = """\
#
#	List of PCI ID's (synthetic test copy)
#
#	Syntax:
#	vendor  vendor_name
#		device  device_name				<-- single tab
#			subvendor subdevice  subsystem_name	<-- two tabs

8086  Intel Corporation
\t1234  Test Device
\t\t8086 5678  Test Subsystem
\t1237  440FX - 82441FX PMC
\t2448  82801 Mobile PCI Bridge
\t5917  UHD Graphics 620
\t\t1028 0810  Latitude 7490
beef
\tbabe  Device Without Vendor Name
10de  NVIDIA Corporation
\t0020  NV4 [Riva TNT]
\t\t1043 0200  V3400 TNT
\t\t1092 8225  Viper V550
\t1db6  GV100GL [Tesla V100 PCIe 32GB]
\t1f91  TU117M [GeForce GTX 1650 Mobile / Max-Q]
\t1ba1  GP104M [GeForce GTX 1070 Mobile]
\t\t1458 1651  GeForce GTX 1070 Max-Q
\t\tbaad
12  Vendor With Short Id
\t4321  Orphaned By Short Vendor Id
1002  Advanced Micro Devices, Inc. [AMD/ATI]
\t731f  Navi 10 [Radeon RX 5600 OEM/5600 XT / 5700/5700 XT]
\t1234  AMD Device Sharing An Id
\t\t1002 5678  AMD Subsystem Sharing An Id
15b3  Mellanox Technologies
\tzz12  Bad Hex Device
\t\t15b3 0001  Orphaned By Bad Device
\t1017  MT27800 Family [ConnectX-5]

# List of known device classes, subclasses and programming interfaces

C 01  Mass storage controller
\t06  SATA controller
\t\t01  AHCI 1.0
C 02  Network controller
\t00  Ethernet controller
\t80  Network controller
C 03  Display controller
\t00  VGA compatible controller
\t\t00  VGA controller
\t\t01  8514 controller
\t02  3D controller
\t80  Display controller
C 0c  Serial bus controller
\t03  USB controller
\t\t00  UHCI
\t\t30  XHCI
\t\t40  USB4 Host Interface
C 06  Bridge
\t04  PCI bridge
"""


@pytest.fixture
def pci_ids_text(tmp_path: Path) -> Path:
    p = tmp_path / "pci.ids"
    p.write_text(MINIMAL_PCI_IDS, encoding="utf-8")
    return p


@pytest.fixture(autouse=True)
def _no_system_pci_ids(monkeypatch):
    # Keep the host's hwdata out of every test.
    monkeypatch.setenv("PCILENS_NO_SYSTEM", "1")
    monkeypatch.delenv("PCILENS_PCI_IDS", raising=False)
    monkeypatch.delenv("PCILENS_SYSFS", raising=False)


def write_hex_file(p: Path, value: int) -> None:
    p.write_text(f"0x{value:04x}\n", encoding="ascii")


def make_device_dir(
    real_root: Path,
    bdf: str,
    *,
    vendor: int,
    device: int,
    klass24: int,
    revision: int = 0x00,
    subvendor: int = 0x0000,
    subdevice: int = 0x0000,
    enable: Optional[str] = "1",
    d3cold_allowed: Optional[str] = None,
    numa_node: Optional[int] = None,
) -> Path:
    d = real_root / bdf
    d.mkdir(parents=True, exist_ok=True)
    write_hex_file(d / "vendor", vendor)
    write_hex_file(d / "device", device)
    # class file in sysfs is 24-bit hex; write as 0xHHHHHH
    (d / "class").write_text(f"0x{klass24:06x}\n", encoding="ascii")
    (d / "revision").write_text(f"0x{revision:02x}\n", encoding="ascii")
    write_hex_file(d / "subsystem_vendor", subvendor)
    write_hex_file(d / "subsystem_device", subdevice)
    if enable is not None:
        (d / "enable").write_text(f"{enable}\n")
    if d3cold_allowed is not None:
        (d / "d3cold_allowed").write_text(f"{d3cold_allowed}\n")
    if numa_node is not None:
        (d / "numa_node").write_text(f"{numa_node}\n")
    return d


def make_device_dir_badhex(real_root: Path, bdf: str) -> Path:
    d = real_root / bdf
    d.mkdir(parents=True, exist_ok=True)
    (d / "class").write_text("0x03\n")
    (d / "vendor").write_text("0xbogusvendor")
    (d / "device").write_text("0xbogusdevice")
    return d


@pytest.fixture
def fake_sysfs(tmp_path: Path):
    """
    Build a fake /sys/bus/pci/devices tree using symlinks that resolve to
    real directories elsewhere (imitating Linux' /sys symlink layout).
    """
    root = tmp_path / "devices_linkdir"
    real = tmp_path / "real"
    root.mkdir()
    real.mkdir()

    devices = {
        "0000:00:01.0": make_device_dir(
            real, "0000:00:01.0", vendor=0x8086, device=0x2448, klass24=0x060400,
            numa_node=-1,
        ),
        "0000:00:02.0": make_device_dir(
            real, "0000:00:02.0", vendor=0x8086, device=0x5917, klass24=0x030000,
            revision=0x07, subvendor=0x1028, subdevice=0x0810,
            d3cold_allowed="1", numa_node=0,
        ),
        "0000:01:00.0": make_device_dir(
            real, "0000:01:00.0", vendor=0x10DE, device=0x1F91, klass24=0x030200,
            revision=0xA1, d3cold_allowed="0",
        ),
        # disabled GPU
        "0000:02:00.0": make_device_dir(
            real, "0000:02:00.0", vendor=0x10DE, device=0x1DB6, klass24=0x030200,
            enable="0",
        ),
        "0000:03:00.0": make_device_dir(
            real, "0000:03:00.0", vendor=0x15B3, device=0x1017, klass24=0x020000,
            enable=None,
        ),
        "0000:04:00.0": make_device_dir(
            real, "0000:04:00.0", vendor=0xBEEF, device=0xBABE, klass24=0x020000
        ),
        "0000:05:00.0": make_device_dir_badhex(real, "0000:05:00.0"),
    }

    for bdf, real_dir in devices.items():
        (root / bdf).symlink_to(real_dir, target_is_directory=True)

    # Dummy to exercise non-bdf check
    (root / "dummy").mkdir()

    return root
