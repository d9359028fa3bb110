# pcilens/sysfs.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging
import os
import re

from .backends.discovery import discover_ids_path
from .backends.textdb import (
    HEX_DIGITS,
    DeviceQuery,
    PciIdsFile,
    Query,
    SubsystemQuery,
    VendorQuery,
)
from .classes import DeviceClass, prog_if_name, subclass_name
from .device import ClassCode, DeviceRecord
from .errors import DeviceNotFoundError, SysfsFormatError

log = logging.getLogger(__name__)

SYSFS_DEVICES_DEFAULT = "/sys/bus/pci/devices"
ENV_SYSFS = "PCILENS_SYSFS"

_BDF_RE = re.compile(
    r"^(?:(?P<domain>[0-9a-fA-F]{4}):)?(?P<bus>[0-9a-fA-F]{2}):"
    r"(?P<device>[0-9a-fA-F]{2})\.(?P<function>[0-7])$"
)
_BRACKETED = re.compile(r"\[([^\]]+)\]")
_CORPORATE_SUFFIXES = (
    " Corporation",
    " Corp.",
    ", Inc.",
    " Inc.",
    " Co., Ltd.",
    " Ltd.",
    " Limited",
)


@dataclass(frozen=True, slots=True)
class PciAddress:
    domain: int
    bus: int
    device: int
    function: int

    @classmethod
    def parse(cls, text: str) -> "PciAddress":
        """Accept `00:02.0` or `0000:00:02.0`; the domain defaults to 0000."""
        m = _BDF_RE.match(text.strip())
        if m is None:
            raise ValueError(f"not a PCI address: {text!r}")
        return cls(
            int(m.group("domain") or "0", 16),
            int(m.group("bus"), 16),
            int(m.group("device"), 16),
            int(m.group("function"), 16),
        )

    @property
    def short(self) -> str:
        return f"{self.bus:02x}:{self.device:02x}.{self.function}"

    def __str__(self) -> str:
        return f"{self.domain:04x}:{self.bus:02x}:{self.device:02x}.{self.function}"


# ---------- attribute decoding ----------
def decode_hex(text: str, digits: int) -> int:
    """
    Decode a sysfs hex attribute such as "0x8086\\n". At least `digits` hex
    digits must follow the optional 0x prefix; only that prefix is read.
    """
    s = text.strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    prefix = s[:digits]
    if len(prefix) < digits:
        raise SysfsFormatError(f"expected {digits} hex digits, got {text!r}")
    if not HEX_DIGITS.issuperset(prefix):
        raise SysfsFormatError(f"not hex: {text!r}")
    return int(prefix, 16)


def _read_attr(p: Path) -> Optional[str]:
    try:
        return p.read_text(encoding="ascii", errors="ignore")
    except OSError as e:
        log.debug("cannot read %s: %s", p, e)
        return None


def _read_hex(p: Path, digits: int) -> Optional[int]:
    s = _read_attr(p)
    if s is None:
        return None
    try:
        return decode_hex(s, digits)
    except SysfsFormatError as e:
        log.debug("%s: %s", p, e)
        return None


def _read_flag(p: Path) -> bool:
    # sysfs booleans: "0" is false, anything else readable is true
    s = _read_attr(p)
    if s is None:
        return False
    return s.strip() != "0"


def _read_numa_node(p: Path) -> int:
    s = _read_attr(p)
    if s is None:
        return -1
    try:
        return int(s.strip())
    except ValueError:
        log.debug("%s: bad numa_node %r", p, s)
        return -1


def _read_class_code(d: Path) -> Optional[ClassCode]:
    s = _read_attr(d / "class")
    if s is None:
        return None
    try:
        return ClassCode.parse(s)
    except SysfsFormatError as e:
        log.debug("%s: %s", d, e)
        return None


# ---------- name shortening for GPU listings ----------
def short_vendor_name(name: str) -> str:
    """`NVIDIA Corporation` -> `NVIDIA`, `Advanced Micro Devices, Inc. [AMD/ATI]` -> `AMD`."""
    m = _BRACKETED.search(name)
    if m:
        return m.group(1).split("/")[0].strip()
    for suffix in _CORPORATE_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)].strip()
    return name.strip()


def short_device_name(name: str) -> str:
    """`TU117M [GeForce GTX 1650 Mobile / Max-Q]` -> `GeForce GTX 1650 Mobile / Max-Q`."""
    m = _BRACKETED.search(name)
    return m.group(1).strip() if m else name.strip()


class SysfsEnumerator:
    def __init__(
        self,
        root: Optional[Union[str, Path]] = None,
        ids_path: Optional[str] = None,
    ):
        self.root = Path(root or os.getenv(ENV_SYSFS) or SYSFS_DEVICES_DEFAULT)
        self.db = PciIdsFile(discover_ids_path(ids_path))

    def device_dirs(self) -> List[Path]:
        try:
            entries = sorted(self.root.iterdir())
        except OSError as e:
            log.warning("cannot list PCI devices under %s: %s", self.root, e)
            return []
        out = []
        for d in entries:
            if _BDF_RE.match(d.name) is None:  # skip non-BDF entries
                continue
            out.append(d)
        return out

    def resolve_path(self, address: Union[str, Path]) -> Path:
        """
        Turn `00:02.0`, `0000:00:02.0` or a device directory into the device's
        sysfs directory.
        """
        given = Path(address)
        if given.is_dir():
            return given
        text = str(address)
        for candidate in (self.root / text, self.root / f"0000:{text}"):
            if candidate.is_dir():
                return candidate
        raise DeviceNotFoundError(f"no PCI device {text!r} under {self.root}")

    def read_device(self, path: Path, resolve_names: bool = True) -> DeviceRecord:
        rec = self._read_raw(Path(path))
        if resolve_names:
            rec = self.resolve_names([rec])[0]
        return rec

    def _read_raw(self, d: Path, class_code: Optional[ClassCode] = None) -> DeviceRecord:
        # Everything but vendor/device/subsystem names, which need a pci.ids scan.
        cc = class_code or _read_class_code(d)
        try:
            address = str(PciAddress.parse(d.name))
        except ValueError:
            address = d.name
        return DeviceRecord(
            path=d,
            address=address,
            class_code=cc,
            vendor_id=_read_hex(d / "vendor", 4),
            device_id=_read_hex(d / "device", 4),
            subsystem_vendor_id=_read_hex(d / "subsystem_vendor", 4),
            subsystem_device_id=_read_hex(d / "subsystem_device", 4),
            revision=_read_hex(d / "revision", 2),
            numa_node=_read_numa_node(d / "numa_node"),
            enabled=_read_flag(d / "enable"),
            d3cold_allowed=_read_flag(d / "d3cold_allowed"),
            class_name="" if cc is None else str(cc.device_class),
            subclass_name="" if cc is None else subclass_name(cc.base, cc.subclass),
            prog_if_name=""
            if cc is None
            else prog_if_name(cc.base, cc.subclass, cc.prog_if),
        )

    @staticmethod
    def _queries_for(rec: DeviceRecord) -> Dict[str, Optional[Query]]:
        ven, dev = rec.vendor_id, rec.device_id
        sv, sd = rec.subsystem_vendor_id, rec.subsystem_device_id
        return {
            "vendor_name": None if ven is None else VendorQuery(ven),
            "device_name": None if ven is None or dev is None else DeviceQuery(dev, ven),
            "subsystem_name": None
            if None in (ven, dev, sv, sd)
            else SubsystemQuery(sv, sd, ven, dev),
        }

    def resolve_names(self, records: List[DeviceRecord]) -> List[DeviceRecord]:
        """Fill vendor/device/subsystem names for all records with one pci.ids scan."""
        wanted = [self._queries_for(rec) for rec in records]
        batch = [q for qs in wanted for q in qs.values() if q is not None]
        found = self.db.resolve_many(batch)
        out = []
        for rec, qs in zip(records, wanted):
            names = {
                field: found.get(q, "") if q is not None else ""
                for field, q in qs.items()
            }
            out.append(rec.with_names(**names))
        return out

    def _collect(
        self,
        device_class: Optional[DeviceClass] = None,
        enabled_only: bool = False,
        maximum: Optional[int] = None,
    ) -> List[DeviceRecord]:
        picked: List[DeviceRecord] = []
        for d in self.device_dirs():
            cc = None
            if device_class is not None:
                # class first: it is a table lookup, names cost a file scan
                cc = _read_class_code(d)
                if cc is None or cc.device_class != device_class:
                    continue
            rec = self._read_raw(d, cc)
            if enabled_only and not rec.enabled:
                continue
            picked.append(rec)
            if maximum and len(picked) >= maximum:
                break
        return self.resolve_names(picked)

    # ----- public API -----
    def device(self, address: Union[str, Path]) -> DeviceRecord:
        return self.read_device(self.resolve_path(address))

    def fetch(self, maximum: Optional[int] = None) -> List[DeviceRecord]:
        """All devices in address order; `maximum` of None or 0 means no limit."""
        return self._collect(maximum=maximum)

    def fetch_by_class(
        self, device_class: Union[DeviceClass, int], maximum: Optional[int] = None
    ) -> List[DeviceRecord]:
        return self._collect(DeviceClass.from_code(int(device_class)), maximum=maximum)

    def fetch_gpus(self, maximum: Optional[int] = None) -> List[str]:
        """Enabled display controllers as short "<vendor> <device>" strings."""
        gpus = self._collect(
            DeviceClass.DISPLAY_CONTROLLER, enabled_only=True, maximum=maximum
        )
        out = []
        for rec in gpus:
            vendor = short_vendor_name(rec.vendor_name) or rec.vendor
            device = short_device_name(rec.device_name) or rec.device
            out.append(f"{vendor} {device}".strip())
        return out
