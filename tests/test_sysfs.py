# tests/test_sysfs.py
from __future__ import annotations
import logging
import pytest
from pcilens.backends.textdb import PciIdsFile
from pcilens.classes import DeviceClass
from pcilens.errors import DeviceNotFoundError, SysfsFormatError
from pcilens.sysfs import (
    PciAddress,
    SysfsEnumerator,
    decode_hex,
    short_device_name,
    short_vendor_name,
)


def test_pci_address_parse():
    a = PciAddress.parse("00:02.0")
    assert a == PciAddress(0, 0, 2, 0)
    assert str(a) == "0000:00:02.0"
    assert a.short == "00:02.0"
    assert PciAddress.parse("0001:65:1f.7") == PciAddress(1, 0x65, 0x1F, 7)
    with pytest.raises(ValueError):
        PciAddress.parse("dummy")


def test_decode_hex():
    assert decode_hex("0x8086\n", 4) == 0x8086
    assert decode_hex("0x07\n", 2) == 0x07
    with pytest.raises(SysfsFormatError):
        decode_hex("0x86\n", 4)
    with pytest.raises(SysfsFormatError):
        decode_hex("0xbogusvendor", 4)


@pytest.mark.parametrize("text", ["0x-808\n", "0x+808\n", "0x8_08\n", "0x 808\n"])
def test_decode_hex_rejects_signs_and_separators(text):
    with pytest.raises(SysfsFormatError):
        decode_hex(text, 4)


def test_signed_attribute_leaves_id_unset(tmp_path):
    d = tmp_path / "0000:06:00.0"
    d.mkdir()
    (d / "class").write_text("0x-10300\n")
    (d / "vendor").write_text("0x-808\n")
    (d / "device").write_text("0x1234\n")
    enum = SysfsEnumerator(root=str(tmp_path), ids_path=str(tmp_path / "none"))
    rec = enum.read_device(d, resolve_names=False)
    assert rec.class_code is None
    assert rec.class_name == ""
    assert rec.vendor_id is None and rec.vendor == ""
    assert rec.device_id == 0x1234


def test_fetch_all(fake_sysfs, pci_ids_text):
    enum = SysfsEnumerator(root=str(fake_sysfs), ids_path=str(pci_ids_text))
    devs = enum.fetch()
    assert [d.address for d in devs] == [
        "0000:00:01.0",
        "0000:00:02.0",
        "0000:01:00.0",
        "0000:02:00.0",
        "0000:03:00.0",
        "0000:04:00.0",
        "0000:05:00.0",
    ]
    assert all(d.names_resolved for d in devs)

    igpu = devs[1]
    assert igpu.class_code is not None and str(igpu.class_code) == "030000"
    assert igpu.class_name == "Display Controller"
    assert igpu.subclass_name == "VGA Compatible Controller"
    assert igpu.prog_if_name == "VGA Controller"
    assert igpu.vendor_name == "Intel Corporation"
    assert igpu.device_name == "UHD Graphics 620"
    assert igpu.subsystem_name == "Latitude 7490"
    assert igpu.revision == 0x07
    assert igpu.numa_node == 0
    assert igpu.enabled is True
    assert igpu.d3cold_allowed is True

    bridge = devs[0]
    assert bridge.subclass_name == "PCI Bridge"
    assert bridge.numa_node == -1
    assert bridge.subsystem_name == ""

    dgpu = devs[2]
    assert dgpu.d3cold_allowed is False
    assert dgpu.subclass_name == "3D Controller"

    assert devs[3].enabled is False
    assert devs[4].enabled is False  # no enable attribute


def test_corrupt_device_keeps_defaults(fake_sysfs, pci_ids_text):
    enum = SysfsEnumerator(root=str(fake_sysfs), ids_path=str(pci_ids_text))
    rec = enum.device("05:00.0")
    assert rec.class_code is None
    assert rec.class_name == ""
    assert rec.vendor_id is None and rec.device_id is None
    assert rec.vendor_name == "" and rec.device_name == ""
    assert rec.numa_node == -1


def test_address_normalization(fake_sysfs, pci_ids_text):
    enum = SysfsEnumerator(root=str(fake_sysfs), ids_path=str(pci_ids_text))
    short = enum.device("00:02.0")
    full = enum.device("0000:00:02.0")
    absolute = enum.device(str(fake_sysfs / "0000:00:02.0"))
    assert short == full == absolute
    assert short.address == "0000:00:02.0"

    with pytest.raises(DeviceNotFoundError):
        enum.device("00:1f.7")


def test_two_phase_construction(fake_sysfs, pci_ids_text):
    enum = SysfsEnumerator(root=str(fake_sysfs), ids_path=str(pci_ids_text))
    path = enum.resolve_path("01:00.0")

    raw = enum.read_device(path, resolve_names=False)
    assert raw.class_name == "Display Controller"
    assert raw.vendor_id == 0x10DE
    assert raw.vendor_name == "" and not raw.names_resolved

    (full,) = enum.resolve_names([raw])
    assert full.vendor_name == "NVIDIA Corporation"
    assert full.device_name == "TU117M [GeForce GTX 1650 Mobile / Max-Q]"
    assert full == enum.read_device(path)

    # resolving again yields the same strings
    assert enum.resolve_names([raw]) == [full]


def test_fetch_by_class(fake_sysfs, pci_ids_text):
    enum = SysfsEnumerator(root=str(fake_sysfs), ids_path=str(pci_ids_text))
    bridges = enum.fetch_by_class(DeviceClass.BRIDGE)
    assert [b.address for b in bridges] == ["0000:00:01.0"]
    assert bridges[0].device_name == "82801 Mobile PCI Bridge"

    display = enum.fetch_by_class(0x03)
    assert [d.address for d in display] == ["0000:00:02.0", "0000:01:00.0", "0000:02:00.0"]

    assert len(enum.fetch_by_class(DeviceClass.DISPLAY_CONTROLLER, maximum=1)) == 1
    assert enum.fetch_by_class(DeviceClass.PROCESSOR) == []


def test_fetch_by_class_scans_names_once_for_matches_only(
    fake_sysfs, pci_ids_text, monkeypatch
):
    enum = SysfsEnumerator(root=str(fake_sysfs), ids_path=str(pci_ids_text))
    batches = []
    orig = PciIdsFile.resolve_many

    def recording(self, queries):
        queries = list(queries)
        batches.append(queries)
        return orig(self, queries)

    monkeypatch.setattr(PciIdsFile, "resolve_many", recording)
    enum.fetch_by_class(DeviceClass.NETWORK_CONTROLLER)

    assert len(batches) == 1
    vendors = {q.vendor for q in batches[0] if type(q).__name__ == "VendorQuery"}
    assert vendors == {0x15B3, 0xBEEF}


def test_fetch_maximum(fake_sysfs, pci_ids_text):
    enum = SysfsEnumerator(root=str(fake_sysfs), ids_path=str(pci_ids_text))
    assert len(enum.fetch(maximum=2)) == 2
    assert len(enum.fetch(maximum=0)) == 7
    assert len(enum.fetch(maximum=100)) == 7


def test_fetch_gpus(fake_sysfs, pci_ids_text):
    enum = SysfsEnumerator(root=str(fake_sysfs), ids_path=str(pci_ids_text))
    assert enum.fetch_gpus() == [
        "Intel UHD Graphics 620",
        "NVIDIA GeForce GTX 1650 Mobile / Max-Q",
    ]
    assert enum.fetch_gpus(maximum=1) == ["Intel UHD Graphics 620"]


def test_without_pci_ids(fake_sysfs, tmp_path):
    enum = SysfsEnumerator(root=str(fake_sysfs), ids_path=str(tmp_path / "none"))
    devs = enum.fetch()
    assert len(devs) == 7
    assert all(d.vendor_name == "" for d in devs)
    assert devs[1].class_name == "Display Controller"
    assert enum.fetch_gpus() == ["8086 5917", "10de 1f91"]


def test_missing_sysfs_root(tmp_path, pci_ids_text, caplog):
    caplog.set_level(logging.WARNING, logger="pcilens.sysfs")
    enum = SysfsEnumerator(root=str(tmp_path / "nope"), ids_path=str(pci_ids_text))
    assert enum.fetch() == []
    assert "cannot list PCI devices" in caplog.text


def test_sysfs_root_from_environment(monkeypatch, fake_sysfs, pci_ids_text):
    monkeypatch.setenv("PCILENS_SYSFS", str(fake_sysfs))
    enum = SysfsEnumerator(ids_path=str(pci_ids_text))
    assert enum.root == fake_sysfs
    assert len(enum.fetch()) == 7


@pytest.mark.parametrize(
    "name, short",
    [
        ("NVIDIA Corporation", "NVIDIA"),
        ("Intel Corporation", "Intel"),
        ("Advanced Micro Devices, Inc. [AMD/ATI]", "AMD"),
        ("Mellanox Technologies", "Mellanox Technologies"),
    ],
)
def test_short_vendor_name(name, short):
    assert short_vendor_name(name) == short


def test_short_device_name():
    assert (
        short_device_name("TU117M [GeForce GTX 1650 Mobile / Max-Q]")
        == "GeForce GTX 1650 Mobile / Max-Q"
    )
    assert short_device_name("UHD Graphics 620") == "UHD Graphics 620"
