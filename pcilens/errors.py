"""Exceptions raised by pcilens.

Name lookups never raise; these only surface from address normalization and
from the strict sysfs decoders (which the enumerator catches and logs).
"""


class PciLensError(Exception):
    """Base exception for pcilens."""


class DeviceNotFoundError(PciLensError):
    """No sysfs directory matches the requested PCI address."""


class SysfsFormatError(PciLensError):
    """A sysfs attribute did not have the expected shape."""


__all__ = [
    "DeviceNotFoundError",
    "PciLensError",
    "SysfsFormatError",
]
