# pcilens/device.py
from __future__ import annotations
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from .backends.textdb import HEX_DIGITS
from .classes import DeviceClass
from .errors import SysfsFormatError


def _hex(value: Optional[int], width: int) -> str:
    return "" if value is None else f"{value:0{width}x}"


@dataclass(frozen=True)
class ClassCode:
    base: int
    subclass: int
    prog_if: int

    @classmethod
    def from_int(cls, code24: int) -> "ClassCode":
        return cls((code24 >> 16) & 0xFF, (code24 >> 8) & 0xFF, code24 & 0xFF)

    @classmethod
    def parse(cls, text: str) -> "ClassCode":
        """
        Decode the sysfs `class` attribute, "0xCCSSPP". Only the first six
        hex digits are read; shorter or non-hex input raises SysfsFormatError.
        """
        s = text.strip()
        if s[:2].lower() == "0x":
            s = s[2:]
        digits = s[:6]
        if len(digits) < 6:
            raise SysfsFormatError(f"class code too short: {text!r}")
        # int(x, 16) would also take a sign or underscores
        if not HEX_DIGITS.issuperset(digits):
            raise SysfsFormatError(f"class code is not hex: {text!r}")
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    @property
    def code24(self) -> int:
        return (self.base << 16) | (self.subclass << 8) | self.prog_if

    @property
    def device_class(self) -> DeviceClass:
        return DeviceClass.from_code(self.base)

    def __str__(self) -> str:
        return f"{self.base:02x}{self.subclass:02x}{self.prog_if:02x}"


@dataclass(frozen=True)
class DeviceRecord:
    """
    Snapshot of one PCI function as read from sysfs.

    Ids are decoded integers (None when the attribute was missing or
    malformed). Class names are filled from the compiled-in taxonomy as soon
    as the class code is known; vendor/device/subsystem names stay empty
    until a pci.ids scan fills them, which `names_resolved` records.
    """

    path: Path
    address: str
    class_code: Optional[ClassCode] = None
    vendor_id: Optional[int] = None
    device_id: Optional[int] = None
    subsystem_vendor_id: Optional[int] = None
    subsystem_device_id: Optional[int] = None
    revision: Optional[int] = None
    numa_node: int = -1
    enabled: bool = False
    d3cold_allowed: bool = False
    class_name: str = ""
    subclass_name: str = ""
    prog_if_name: str = ""
    vendor_name: str = ""
    device_name: str = ""
    subsystem_name: str = ""
    names_resolved: bool = False

    # sysfs-style hex views
    @property
    def class_id(self) -> str:
        return "" if self.class_code is None else str(self.class_code)[:4]

    @property
    def vendor(self) -> str:
        return _hex(self.vendor_id, 4)

    @property
    def device(self) -> str:
        return _hex(self.device_id, 4)

    @property
    def subsystem_vendor(self) -> str:
        return _hex(self.subsystem_vendor_id, 4)

    @property
    def subsystem_device(self) -> str:
        return _hex(self.subsystem_device_id, 4)

    @property
    def revision_hex(self) -> str:
        return _hex(self.revision, 2)

    @property
    def device_class(self) -> DeviceClass:
        if self.class_code is None:
            return DeviceClass.UNCLASSIFIED
        return self.class_code.device_class

    def with_names(
        self, vendor_name: str = "", device_name: str = "", subsystem_name: str = ""
    ) -> "DeviceRecord":
        return replace(
            self,
            vendor_name=vendor_name,
            device_name=device_name,
            subsystem_name=subsystem_name,
            names_resolved=True,
        )

    def __str__(self) -> str:
        return self.address
