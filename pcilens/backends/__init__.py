"""
Internal backends package.

`discover_ids_path` and the pci.ids scanner live here; the public surface is
re-exported from `pcilens.api`.
"""

from __future__ import annotations

from .discovery import discover_ids_path
from .textdb import PciIdsFile

__all__ = ["PciIdsFile", "discover_ids_path"]
