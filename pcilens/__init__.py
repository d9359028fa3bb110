"""
pcilens: PCI device enumeration from sysfs with pci.ids name resolution.

Public API:
    - Class taxonomy (compiled in, no I/O):
        DeviceClass, class_name, subclass_name, prog_if_name
    - pci.ids lookups (one file scan per call, empty string when unknown):
        open_db, PciIdsFile, vendor_name, device_name, subsystem_name
    - Sysfs enumeration (Linux):
        SysfsEnumerator, PciAddress, DeviceRecord, ClassCode
"""

from __future__ import annotations

# Version from installed dist; falls back to dev string when run from source tree.
from importlib.metadata import PackageNotFoundError, version

try:  # pragma: no cover
    __version__ = version("pcilens")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0.dev0"

# Public API re-exports
from .api import (
    PciIdsFile,
    class_name,
    device_name,
    open_db,
    prog_if_name,
    subclass_name,
    subsystem_name,
    vendor_name,
)
from .classes import DeviceClass
from .device import ClassCode, DeviceRecord
from .errors import DeviceNotFoundError, PciLensError, SysfsFormatError
from .sysfs import PciAddress, SysfsEnumerator

__all__ = [
    "__version__",
    # taxonomy
    "DeviceClass",
    "class_name",
    "subclass_name",
    "prog_if_name",
    # pci.ids
    "PciIdsFile",
    "open_db",
    "vendor_name",
    "device_name",
    "subsystem_name",
    # sysfs
    "SysfsEnumerator",
    "PciAddress",
    "DeviceRecord",
    "ClassCode",
    # errors
    "PciLensError",
    "DeviceNotFoundError",
    "SysfsFormatError",
]
