#!/usr/bin/python
#
# pcilens
# Streaming pci.ids text database scanner
#
# Licensed under the MIT license
#

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union
import logging

log = logging.getLogger(__name__)

HexId = Union[int, str]

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class Scope(Enum):
    SEEKING = "seeking"
    IN_CLASS = "class"
    IN_SUBCLASS = "subclass"
    IN_VENDOR = "vendor"
    IN_DEVICE = "device"


class EntryKind(Enum):
    CLASS = "class"
    SUBCLASS = "subclass"
    PROG_IF = "prog_if"
    VENDOR = "vendor"
    DEVICE = "device"
    SUBSYSTEM = "subsystem"


@dataclass(frozen=True)
class Entry:
    """
    One name-bearing line of pci.ids, with the ids of its enclosing scopes:
      CLASS (base,)          SUBCLASS (base, sub)       PROG_IF (base, sub, pi)
      VENDOR (ven,)          DEVICE (ven, dev)          SUBSYSTEM (ven, dev, sv, sd)
    """

    kind: EntryKind
    key: Tuple[int, ...]
    name: str


# ---------- Scanner ----------
def _split_entry(text: str, widths: Tuple[int, ...]) -> Optional[Tuple[Tuple[int, ...], str]]:
    # "8086  Intel Corporation" / "1043 0200  V3400 TNT"
    toks = text.split(None, len(widths))
    if len(toks) < len(widths):
        return None
    ids = []
    for tok, width in zip(toks, widths):
        if len(tok) != width or not HEX_DIGITS.issuperset(tok):
            return None
        ids.append(int(tok, 16))
    name = toks[len(widths)].strip() if len(toks) > len(widths) else ""
    return tuple(ids), name


def advance(
    scope: Scope, parent: Tuple[int, ...], depth: int, text: str
) -> Tuple[Scope, Tuple[int, ...], Optional[Entry]]:
    """
    One transition of the scope state machine.

    `parent` holds the ids of the innermost open scope: (base,), (base, sub),
    (ven,) or (ven, dev). Returns the new scope, the new parent ids and the
    entry the line defines (None for malformed or orphaned lines). A line
    that cannot be parsed still closes every scope at or below its depth.
    Lines indented with anything but tabs are skipped and leave the scope
    as it was.
    """
    if text[:1].isspace():
        return scope, parent, None

    if depth == 0:
        if text.startswith("C ") or text == "C":
            parsed = _split_entry(text[1:], (2,))
            if parsed is None:
                return Scope.SEEKING, (), None
            ids, name = parsed
            return Scope.IN_CLASS, ids, Entry(EntryKind.CLASS, ids, name)
        parsed = _split_entry(text, (4,))
        if parsed is None:
            return Scope.SEEKING, (), None
        ids, name = parsed
        return Scope.IN_VENDOR, ids, Entry(EntryKind.VENDOR, ids, name)

    if depth == 1:
        if scope in (Scope.IN_CLASS, Scope.IN_SUBCLASS):
            base = parent[:1]
            parsed = _split_entry(text, (2,))
            if parsed is None:
                return Scope.IN_CLASS, base, None
            key = base + parsed[0]
            return Scope.IN_SUBCLASS, key, Entry(EntryKind.SUBCLASS, key, parsed[1])
        if scope in (Scope.IN_VENDOR, Scope.IN_DEVICE):
            ven = parent[:1]
            parsed = _split_entry(text, (4,))
            if parsed is None:
                return Scope.IN_VENDOR, ven, None
            key = ven + parsed[0]
            return Scope.IN_DEVICE, key, Entry(EntryKind.DEVICE, key, parsed[1])
        return scope, parent, None

    if depth == 2:
        if scope is Scope.IN_SUBCLASS:
            parsed = _split_entry(text, (2,))
            if parsed is not None:
                return scope, parent, Entry(EntryKind.PROG_IF, parent + parsed[0], parsed[1])
        elif scope is Scope.IN_DEVICE:
            parsed = _split_entry(text, (4, 4))
            if parsed is not None:
                return scope, parent, Entry(EntryKind.SUBSYSTEM, parent + parsed[0], parsed[1])
        return scope, parent, None

    return scope, parent, None


def iter_entries(path: str) -> Iterator[Entry]:
    """Yield every entry of a pci.ids file in file order. Unreadable files yield nothing."""
    try:
        f = open(path, "r", encoding="utf-8", errors="replace")
    except OSError as e:
        log.debug("pci.ids not readable at %s: %s", path, e)
        return

    scope = Scope.SEEKING
    parent: Tuple[int, ...] = ()
    with f:
        try:
            for lineno, raw in enumerate(f, 1):
                line = raw.rstrip("\r\n")
                stripped = line.strip()
                if not stripped or stripped.startswith("#"):
                    continue
                depth = len(line) - len(line.lstrip("\t"))
                scope, parent, entry = advance(scope, parent, depth, line[depth:])
                if entry is None:
                    log.debug("%s:%d: skipping unusable line %r", path, lineno, line)
                    continue
                yield entry
        except OSError as e:
            log.debug("read of %s aborted: %s", path, e)


# ---------- Queries ----------
# Each query names the entry kind it wants, the positions of Entry.key it
# constrains, and the ids expected there.
Probe = Tuple[EntryKind, Tuple[int, ...], Tuple[int, ...]]


@dataclass(frozen=True)
class ClassQuery:
    base: int

    @property
    def probe(self) -> Probe:
        return EntryKind.CLASS, (0,), (self.base,)


@dataclass(frozen=True)
class SubclassQuery:
    base: int
    subclass: int

    @property
    def probe(self) -> Probe:
        return EntryKind.SUBCLASS, (0, 1), (self.base, self.subclass)


@dataclass(frozen=True)
class ProgIfQuery:
    base: int
    subclass: int
    prog_if: int

    @property
    def probe(self) -> Probe:
        return EntryKind.PROG_IF, (0, 1, 2), (self.base, self.subclass, self.prog_if)


@dataclass(frozen=True)
class VendorQuery:
    vendor: int

    @property
    def probe(self) -> Probe:
        return EntryKind.VENDOR, (0,), (self.vendor,)


@dataclass(frozen=True)
class DeviceQuery:
    device: int
    vendor: Optional[int] = None

    @property
    def probe(self) -> Probe:
        if self.vendor is None:
            return EntryKind.DEVICE, (1,), (self.device,)
        return EntryKind.DEVICE, (0, 1), (self.vendor, self.device)


@dataclass(frozen=True)
class SubsystemQuery:
    subvendor: int
    subdevice: int
    vendor: Optional[int] = None
    device: Optional[int] = None

    @property
    def probe(self) -> Probe:
        positions: List[int] = []
        ids: List[int] = []
        if self.vendor is not None:
            positions.append(0)
            ids.append(self.vendor)
        if self.device is not None:
            positions.append(1)
            ids.append(self.device)
        return (
            EntryKind.SUBSYSTEM,
            tuple(positions) + (2, 3),
            tuple(ids) + (self.subvendor, self.subdevice),
        )


Query = Union[ClassQuery, SubclassQuery, ProgIfQuery, VendorQuery, DeviceQuery, SubsystemQuery]


def parse_id(value: Optional[HexId], width: int) -> Optional[int]:
    """
    Normalize an id given as int or hex text ("8086", "0x8086") to an int of at
    most `width` hex digits. Anything else is None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 <= value < (1 << (4 * width)) else None
    s = str(value).strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    if not s or len(s) > width or not HEX_DIGITS.issuperset(s):
        return None
    return int(s, 16)


# ---------- Database ----------
class PciIdsFile:
    """
    A pci.ids text database addressed by path. Nothing is cached: every lookup
    re-scans the file from the top and stops at the first match. Use
    resolve_many() to answer a batch of queries in one pass.
    """

    def __init__(self, path: Optional[str]):
        self.path = str(path) if path is not None else None

    def __repr__(self) -> str:
        return f"PciIdsFile({self.path!r})"

    def entries(self) -> Iterator[Entry]:
        if self.path is None:
            return iter(())
        return iter_entries(self.path)

    def resolve_many(self, queries: Iterable[Query]) -> Dict[Query, str]:
        # pending[(kind, positions)][ids] -> queries waiting on that entry
        pending: Dict[Tuple[EntryKind, Tuple[int, ...]], Dict[Tuple[int, ...], List[Query]]] = {}
        remaining = 0
        for q in set(queries):
            kind, positions, ids = q.probe
            pending.setdefault((kind, positions), {}).setdefault(ids, []).append(q)
            remaining += 1

        results: Dict[Query, str] = {}
        if not remaining:
            return results

        scan = self.entries()
        try:
            for entry in scan:
                for (kind, positions), waiting in pending.items():
                    if kind is not entry.kind or not waiting:
                        continue
                    hits = waiting.pop(tuple(entry.key[i] for i in positions), None)
                    if not hits:
                        continue
                    for q in hits:
                        results[q] = entry.name
                    remaining -= len(hits)
                if remaining == 0:
                    break
        finally:
            close = getattr(scan, "close", None)
            if close is not None:
                close()
        return results

    def lookup(self, query: Query) -> Optional[str]:
        return self.resolve_many((query,)).get(query)

    # ----- public API -----
    def get_class_name(self, base: HexId) -> Optional[str]:
        b = parse_id(base, 2)
        return None if b is None else self.lookup(ClassQuery(b))

    def get_subclass_name(self, base: HexId, subclass: HexId) -> Optional[str]:
        b, s = parse_id(base, 2), parse_id(subclass, 2)
        if b is None or s is None:
            return None
        return self.lookup(SubclassQuery(b, s))

    def get_prog_if_name(self, base: HexId, subclass: HexId, prog_if: HexId) -> Optional[str]:
        b, s, p = parse_id(base, 2), parse_id(subclass, 2), parse_id(prog_if, 2)
        if b is None or s is None or p is None:
            return None
        return self.lookup(ProgIfQuery(b, s, p))

    def get_vendor_name(self, vendor_id: HexId) -> Optional[str]:
        v = parse_id(vendor_id, 4)
        return None if v is None else self.lookup(VendorQuery(v))

    def get_device_name(self, device_id: HexId, vendor_id: Optional[HexId] = None) -> Optional[str]:
        d = parse_id(device_id, 4)
        v = parse_id(vendor_id, 4)
        if d is None or (vendor_id is not None and v is None):
            return None
        return self.lookup(DeviceQuery(d, v))

    def get_subsystem_name(
        self,
        subvendor_id: HexId,
        subdevice_id: HexId,
        vendor_id: Optional[HexId] = None,
        device_id: Optional[HexId] = None,
    ) -> Optional[str]:
        sv, sd = parse_id(subvendor_id, 4), parse_id(subdevice_id, 4)
        v, d = parse_id(vendor_id, 4), parse_id(device_id, 4)
        if sv is None or sd is None:
            return None
        if (vendor_id is not None and v is None) or (device_id is not None and d is None):
            return None
        return self.lookup(SubsystemQuery(sv, sd, v, d))

    def close(self) -> None:
        # nothing to release; files are opened per scan
        pass
