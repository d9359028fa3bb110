from __future__ import annotations
from typing import Optional
from .backends.discovery import discover_ids_path
from .backends.textdb import HexId, PciIdsFile
from .classes import class_name, prog_if_name, subclass_name


def open_db(path: Optional[str] = None) -> PciIdsFile:
    # A PciIdsFile over None is valid: every lookup is simply not found.
    return PciIdsFile(discover_ids_path(path))


def vendor_name(vendor_id: HexId, path: Optional[str] = None) -> str:
    return open_db(path).get_vendor_name(vendor_id) or ""


def device_name(
    device_id: HexId, vendor_id: Optional[HexId] = None, path: Optional[str] = None
) -> str:
    return open_db(path).get_device_name(device_id, vendor_id) or ""


def subsystem_name(
    subvendor_id: HexId, subdevice_id: HexId, path: Optional[str] = None
) -> str:
    return open_db(path).get_subsystem_name(subvendor_id, subdevice_id) or ""


__all__ = [
    "PciIdsFile",
    "class_name",
    "device_name",
    "open_db",
    "prog_if_name",
    "subclass_name",
    "subsystem_name",
    "vendor_name",
]
