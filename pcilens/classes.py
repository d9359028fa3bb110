# pcilens/classes.py
"""
Compiled-in PCI class-code taxonomy.

The tables mirror the PCI-SIG class-code registry as published in the
"C" section of pci.ids. Lookups are total: an unknown class byte resolves to
``DeviceClass.UNCLASSIFIED`` and an unknown subclass or programming
interface falls back to the nearest defined ancestor.
"""

from __future__ import annotations
from enum import IntEnum
from typing import Dict, Optional, Tuple


class DeviceClass(IntEnum):
    UNCLASSIFIED = 0x00
    MASS_STORAGE_CONTROLLER = 0x01
    NETWORK_CONTROLLER = 0x02
    DISPLAY_CONTROLLER = 0x03
    MULTIMEDIA_CONTROLLER = 0x04
    MEMORY_CONTROLLER = 0x05
    BRIDGE = 0x06
    COMMUNICATION_CONTROLLER = 0x07
    GENERIC_SYSTEM_PERIPHERAL = 0x08
    INPUT_DEVICE_CONTROLLER = 0x09
    DOCKING_STATION = 0x0A
    PROCESSOR = 0x0B
    SERIAL_BUS_CONTROLLER = 0x0C
    WIRELESS_CONTROLLER = 0x0D
    INTELLIGENT_CONTROLLER = 0x0E
    SATELLITE_COMMUNICATIONS_CONTROLLER = 0x0F
    ENCRYPTION_CONTROLLER = 0x10
    SIGNAL_PROCESSING_CONTROLLER = 0x11
    PROCESSING_ACCELERATORS = 0x12
    NON_ESSENTIAL_INSTRUMENTATION = 0x13
    COPROCESSOR = 0x40
    UNASSIGNED = 0xFF

    @classmethod
    def from_code(cls, code: int) -> "DeviceClass":
        """Map a class byte to its category; unknown bytes are UNCLASSIFIED."""
        try:
            return cls(code & 0xFF)
        except ValueError:
            return cls.UNCLASSIFIED

    @property
    def display_name(self) -> str:
        return CLASS_NAMES[self]

    def subclasses(self) -> Dict[int, str]:
        base = int(self)
        return {sub: name for (c, sub), name in SUBCLASS_NAMES.items() if c == base}

    def __str__(self) -> str:
        return self.display_name


# fmt: off
CLASS_NAMES: Dict[DeviceClass, str] = {
    DeviceClass.UNCLASSIFIED:                        "Unclassified",
    DeviceClass.MASS_STORAGE_CONTROLLER:             "Mass Storage Controller",
    DeviceClass.NETWORK_CONTROLLER:                  "Network Controller",
    DeviceClass.DISPLAY_CONTROLLER:                  "Display Controller",
    DeviceClass.MULTIMEDIA_CONTROLLER:               "Multimedia Controller",
    DeviceClass.MEMORY_CONTROLLER:                   "Memory Controller",
    DeviceClass.BRIDGE:                              "Bridge",
    DeviceClass.COMMUNICATION_CONTROLLER:            "Communication Controller",
    DeviceClass.GENERIC_SYSTEM_PERIPHERAL:           "Generic System Peripheral",
    DeviceClass.INPUT_DEVICE_CONTROLLER:             "Input Device Controller",
    DeviceClass.DOCKING_STATION:                     "Docking Station",
    DeviceClass.PROCESSOR:                           "Processor",
    DeviceClass.SERIAL_BUS_CONTROLLER:               "Serial Bus Controller",
    DeviceClass.WIRELESS_CONTROLLER:                 "Wireless Controller",
    DeviceClass.INTELLIGENT_CONTROLLER:              "Intelligent Controller",
    DeviceClass.SATELLITE_COMMUNICATIONS_CONTROLLER: "Satellite Communications Controller",
    DeviceClass.ENCRYPTION_CONTROLLER:               "Encryption Controller",
    DeviceClass.SIGNAL_PROCESSING_CONTROLLER:        "Signal Processing Controller",
    DeviceClass.PROCESSING_ACCELERATORS:             "Processing Accelerators",
    DeviceClass.NON_ESSENTIAL_INSTRUMENTATION:       "Non-Essential Instrumentation",
    DeviceClass.COPROCESSOR:                         "Coprocessor",
    DeviceClass.UNASSIGNED:                          "Unassigned Class",
}

SUBCLASS_NAMES: Dict[Tuple[int, int], str] = {
    (0x00, 0x00): "Non-VGA Unclassified Device",
    (0x00, 0x01): "VGA Compatible Unclassified Device",
    (0x00, 0x05): "Image Coprocessor",

    (0x01, 0x00): "SCSI Storage Controller",
    (0x01, 0x01): "IDE Interface",
    (0x01, 0x02): "Floppy Disk Controller",
    (0x01, 0x03): "IPI Bus Controller",
    (0x01, 0x04): "RAID Bus Controller",
    (0x01, 0x05): "ATA Controller",
    (0x01, 0x06): "SATA Controller",
    (0x01, 0x07): "Serial Attached SCSI Controller",
    (0x01, 0x08): "Non-Volatile Memory Controller",
    (0x01, 0x09): "Universal Flash Storage Controller",
    (0x01, 0x80): "Mass Storage Controller",

    (0x02, 0x00): "Ethernet Controller",
    (0x02, 0x01): "Token Ring Network Controller",
    (0x02, 0x02): "FDDI Network Controller",
    (0x02, 0x03): "ATM Network Controller",
    (0x02, 0x04): "ISDN Controller",
    (0x02, 0x05): "WorldFip Controller",
    (0x02, 0x06): "PICMG Controller",
    (0x02, 0x07): "Infiniband Controller",
    (0x02, 0x08): "Fabric Controller",
    (0x02, 0x80): "Network Controller",

    (0x03, 0x00): "VGA Compatible Controller",
    (0x03, 0x01): "XGA Compatible Controller",
    (0x03, 0x02): "3D Controller",
    (0x03, 0x80): "Display Controller",

    (0x04, 0x00): "Multimedia Video Controller",
    (0x04, 0x01): "Multimedia Audio Controller",
    (0x04, 0x02): "Computer Telephony Device",
    (0x04, 0x03): "Audio Device",
    (0x04, 0x80): "Multimedia Controller",

    (0x05, 0x00): "RAM Memory",
    (0x05, 0x01): "FLASH Memory",
    (0x05, 0x02): "CXL",
    (0x05, 0x80): "Memory Controller",

    (0x06, 0x00): "Host Bridge",
    (0x06, 0x01): "ISA Bridge",
    (0x06, 0x02): "EISA Bridge",
    (0x06, 0x03): "MicroChannel Bridge",
    (0x06, 0x04): "PCI Bridge",
    (0x06, 0x05): "PCMCIA Bridge",
    (0x06, 0x06): "NuBus Bridge",
    (0x06, 0x07): "CardBus Bridge",
    (0x06, 0x08): "RACEway Bridge",
    (0x06, 0x09): "Semi-Transparent PCI-to-PCI Bridge",
    (0x06, 0x0A): "InfiniBand to PCI Host Bridge",
    (0x06, 0x80): "Bridge",

    (0x07, 0x00): "Serial Controller",
    (0x07, 0x01): "Parallel Controller",
    (0x07, 0x02): "Multiport Serial Controller",
    (0x07, 0x03): "Modem",
    (0x07, 0x04): "GPIB Controller",
    (0x07, 0x05): "Smart Card Controller",
    (0x07, 0x80): "Communication Controller",

    (0x08, 0x00): "PIC",
    (0x08, 0x01): "DMA Controller",
    (0x08, 0x02): "Timer",
    (0x08, 0x03): "RTC",
    (0x08, 0x04): "PCI Hot-Plug Controller",
    (0x08, 0x05): "SD Host Controller",
    (0x08, 0x06): "IOMMU",
    (0x08, 0x80): "System Peripheral",
    (0x08, 0x99): "Timing Card",

    (0x09, 0x00): "Keyboard Controller",
    (0x09, 0x01): "Digitizer Pen",
    (0x09, 0x02): "Mouse Controller",
    (0x09, 0x03): "Scanner Controller",
    (0x09, 0x04): "Gameport Controller",
    (0x09, 0x80): "Input Device Controller",

    (0x0A, 0x00): "Generic Docking Station",
    (0x0A, 0x80): "Docking Station",

    (0x0B, 0x00): "386",
    (0x0B, 0x01): "486",
    (0x0B, 0x02): "Pentium",
    (0x0B, 0x10): "Alpha",
    (0x0B, 0x20): "Power PC",
    (0x0B, 0x30): "MIPS",
    (0x0B, 0x40): "Co-processor",

    (0x0C, 0x00): "FireWire (IEEE 1394)",
    (0x0C, 0x01): "ACCESS Bus",
    (0x0C, 0x02): "SSA",
    (0x0C, 0x03): "USB Controller",
    (0x0C, 0x04): "Fibre Channel",
    (0x0C, 0x05): "SMBus",
    (0x0C, 0x06): "InfiniBand",
    (0x0C, 0x07): "IPMI Interface",
    (0x0C, 0x08): "SERCOS Interface",
    (0x0C, 0x09): "CANBUS",
    (0x0C, 0x80): "Serial Bus Controller",

    (0x0D, 0x00): "IRDA Controller",
    (0x0D, 0x01): "Consumer IR Controller",
    (0x0D, 0x10): "RF Controller",
    (0x0D, 0x11): "Bluetooth",
    (0x0D, 0x12): "Broadband",
    (0x0D, 0x20): "802.1a Controller",
    (0x0D, 0x21): "802.1b Controller",
    (0x0D, 0x80): "Wireless Controller",

    (0x0E, 0x00): "I2O",

    (0x0F, 0x01): "Satellite TV Controller",
    (0x0F, 0x02): "Satellite Audio Communication Controller",
    (0x0F, 0x03): "Satellite Voice Communication Controller",
    (0x0F, 0x04): "Satellite Data Communication Controller",

    (0x10, 0x00): "Network and Computing Encryption Device",
    (0x10, 0x10): "Entertainment Encryption Device",
    (0x10, 0x80): "Encryption Controller",

    (0x11, 0x00): "DPIO Module",
    (0x11, 0x01): "Performance Counters",
    (0x11, 0x10): "Communication Synchronizer",
    (0x11, 0x20): "Signal Processing Management",
    (0x11, 0x80): "Signal Processing Controller",

    (0x12, 0x00): "Processing Accelerators",
    (0x12, 0x01): "SNIA Smart Data Accelerator Interface (SDXI) Controller",
}

PROG_IF_NAMES: Dict[Tuple[int, int, int], str] = {
    (0x01, 0x01, 0x00): "ISA Compatibility Mode-Only Controller",
    (0x01, 0x01, 0x05): "PCI Native Mode-Only Controller",
    (0x01, 0x01, 0x0A): "ISA Compatibility Mode Controller, Supports Both Channels Switched to PCI Native Mode",
    (0x01, 0x01, 0x0F): "PCI Native Mode Controller, Supports Both Channels Switched to ISA Compatibility Mode",
    (0x01, 0x01, 0x80): "ISA Compatibility Mode-Only Controller, Supports Bus Mastering",
    (0x01, 0x01, 0x85): "PCI Native Mode-Only Controller, Supports Bus Mastering",
    (0x01, 0x01, 0x8A): "ISA Compatibility Mode Controller, Supports Both Channels Switched to PCI Native Mode, Supports Bus Mastering",
    (0x01, 0x01, 0x8F): "PCI Native Mode Controller, Supports Both Channels Switched to ISA Compatibility Mode, Supports Bus Mastering",
    (0x01, 0x05, 0x20): "ADMA Single Stepping",
    (0x01, 0x05, 0x30): "ADMA Continuous Operation",
    (0x01, 0x06, 0x00): "Vendor Specific",
    (0x01, 0x06, 0x01): "AHCI 1.0",
    (0x01, 0x06, 0x02): "Serial Storage Bus",
    (0x01, 0x07, 0x01): "Serial Storage Bus",
    (0x01, 0x08, 0x01): "NVMHCI",
    (0x01, 0x08, 0x02): "NVM Express",

    (0x03, 0x00, 0x00): "VGA Controller",
    (0x03, 0x00, 0x01): "8514 Controller",

    (0x06, 0x04, 0x00): "Normal Decode",
    (0x06, 0x04, 0x01): "Subtractive Decode",
    (0x06, 0x08, 0x00): "Transparent Mode",
    (0x06, 0x08, 0x01): "Endpoint Mode",
    (0x06, 0x09, 0x40): "Primary Bus Towards Host CPU",
    (0x06, 0x09, 0x80): "Secondary Bus Towards Host CPU",

    (0x07, 0x00, 0x00): "8250",
    (0x07, 0x00, 0x01): "16450",
    (0x07, 0x00, 0x02): "16550",
    (0x07, 0x00, 0x03): "16650",
    (0x07, 0x00, 0x04): "16750",
    (0x07, 0x00, 0x05): "16850",
    (0x07, 0x00, 0x06): "16950",
    (0x07, 0x01, 0x00): "SPP",
    (0x07, 0x01, 0x01): "BiDir",
    (0x07, 0x01, 0x02): "ECP",
    (0x07, 0x01, 0x03): "IEEE1284",
    (0x07, 0x01, 0xFE): "IEEE1284 Target",
    (0x07, 0x03, 0x00): "Generic",
    (0x07, 0x03, 0x01): "Hayes/16450",
    (0x07, 0x03, 0x02): "Hayes/16550",
    (0x07, 0x03, 0x03): "Hayes/16650",
    (0x07, 0x03, 0x04): "Hayes/16750",

    (0x08, 0x00, 0x00): "8259",
    (0x08, 0x00, 0x01): "ISA PIC",
    (0x08, 0x00, 0x02): "EISA PIC",
    (0x08, 0x00, 0x10): "IO-APIC",
    (0x08, 0x00, 0x20): "IO(X)-APIC",
    (0x08, 0x01, 0x00): "8237",
    (0x08, 0x01, 0x01): "ISA DMA",
    (0x08, 0x01, 0x02): "EISA DMA",
    (0x08, 0x02, 0x00): "8254",
    (0x08, 0x02, 0x01): "ISA Timer",
    (0x08, 0x02, 0x02): "EISA Timers",
    (0x08, 0x02, 0x03): "HPET",
    (0x08, 0x03, 0x00): "Generic",
    (0x08, 0x03, 0x01): "ISA RTC",

    (0x09, 0x04, 0x00): "Generic",
    (0x09, 0x04, 0x10): "Extended",

    (0x0C, 0x00, 0x00): "Generic",
    (0x0C, 0x00, 0x10): "OHCI",
    (0x0C, 0x03, 0x00): "UHCI",
    (0x0C, 0x03, 0x10): "OHCI",
    (0x0C, 0x03, 0x20): "EHCI",
    (0x0C, 0x03, 0x30): "XHCI",
    (0x0C, 0x03, 0x40): "USB4 Host Interface",
    (0x0C, 0x03, 0x80): "Unspecified",
    (0x0C, 0x03, 0xFE): "USB Device",
    (0x0C, 0x07, 0x00): "SMIC",
    (0x0C, 0x07, 0x01): "KCS",
    (0x0C, 0x07, 0x02): "BT (Block Transfer)",
}
# fmt: on


def class_name(base: int) -> str:
    return DeviceClass.from_code(base).display_name


def resolve_subclass(base: int, subclass: int) -> Optional[str]:
    return SUBCLASS_NAMES.get((base & 0xFF, subclass & 0xFF))


def subclass_name(base: int, subclass: int) -> str:
    """Subclass name, or the class name when the pair has no refinement."""
    return resolve_subclass(base, subclass) or class_name(base)


def resolve_prog_if(base: int, subclass: int, prog_if: int) -> Optional[str]:
    return PROG_IF_NAMES.get((base & 0xFF, subclass & 0xFF, prog_if & 0xFF))


def prog_if_name(base: int, subclass: int, prog_if: int) -> str:
    # most specific first: prog-if, subclass, class
    return resolve_prog_if(base, subclass, prog_if) or subclass_name(base, subclass)


__all__ = [
    "CLASS_NAMES",
    "DeviceClass",
    "PROG_IF_NAMES",
    "SUBCLASS_NAMES",
    "class_name",
    "prog_if_name",
    "resolve_prog_if",
    "resolve_subclass",
    "subclass_name",
]
