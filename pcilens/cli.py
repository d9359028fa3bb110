#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import logging
from dataclasses import dataclass
from typing import Optional

import pcilens
from pcilens.classes import CLASS_NAMES, DeviceClass


@dataclass
class ProgramArgs:
    db_path: Optional[str]
    sysfs_path: Optional[str]
    device_class: Optional[DeviceClass] = None
    gpus: bool = False
    maximum: Optional[int] = None


def parse_device_class(text: str) -> DeviceClass:
    """Accept a hex class code (`03`, `0x03`), a member name or a display name."""
    key = text.strip()
    try:
        return DeviceClass(int(key, 16))
    except ValueError:
        pass
    norm = key.upper().replace(" ", "_").replace("-", "_")
    for member, name in CLASS_NAMES.items():
        if member.name == norm or name.lower() == key.lower():
            return member
    raise argparse.ArgumentTypeError(f"unknown device class: {text!r}")


def format_line(rec: pcilens.DeviceRecord) -> str:
    cc = rec.class_code
    cname = rec.subclass_name or "Unclassified"
    class16 = f"{cc.base:02x}{cc.subclass:02x}" if cc is not None else "????"

    ven, dev = rec.vendor or "????", rec.device or "????"
    vname, dname = rec.vendor_name, rec.device_name

    if vname and dname:
        rdesc = f"{vname} {dname}"
    elif vname:
        rdesc = f"{vname} Device {dev}"
    elif dname:
        rdesc = f"Vendor {ven} {dname}"
    else:
        rdesc = f"Device [{ven}:{dev}]"

    revdesc = ""
    if rec.revision:
        revdesc = f" (rev {rec.revision_hex})"

    return f"{rec.address} {cname} [{class16}]: {rdesc} [{ven}:{dev}]{revdesc}"


def run(args: ProgramArgs) -> None:
    sysfs = pcilens.SysfsEnumerator(args.sysfs_path, ids_path=args.db_path)

    if args.gpus:
        for gpu in sysfs.fetch_gpus(args.maximum):
            print(gpu)
        return

    if args.device_class is not None:
        devices = sysfs.fetch_by_class(args.device_class, args.maximum)
    else:
        devices = sysfs.fetch(args.maximum)

    for rec in devices:
        print(format_line(rec))


def main() -> None:  # pragma: no cover
    ap = argparse.ArgumentParser(
        description="List PCI devices from sysfs with names from pci.ids"
    )
    ap.add_argument("--db", dest="db_path", default=None, help="path to pci.ids")
    ap.add_argument(
        "--sysfs",
        dest="sysfs_path",
        default=None,
        help="path to /sys/bus/pci/devices",
    )
    ap.add_argument(
        "--class",
        dest="device_class",
        type=parse_device_class,
        default=None,
        help="only list devices of this class (hex code or name)",
    )
    ap.add_argument(
        "--gpus", action="store_true", help="list enabled GPUs by short name"
    )
    ap.add_argument(
        "--max", dest="maximum", type=int, default=None, help="stop after N devices"
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    ns = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    opts = vars(ns)
    opts.pop("verbose")
    run(ProgramArgs(**opts))


if __name__ == "__main__":  # pragma: no cover
    main()
