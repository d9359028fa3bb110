from __future__ import annotations
from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

log = logging.getLogger(__name__)

ENV_PCI_IDS = "PCILENS_PCI_IDS"
ENV_NO_SYSTEM = "PCILENS_NO_SYSTEM"

SYSTEM_PCI_IDS = (
    "/usr/share/hwdata/pci.ids",
    "/usr/share/misc/pci.ids",
    "/usr/share/pci.ids",
)


@dataclass(frozen=True)
class Candidate:
    """Represents a potential pci.ids source in the discovery order."""

    kind: str  # "path", "env", "system"
    path: str

    def usable(self) -> bool:
        return Path(self.path).is_file()


def _resolve_candidates(
    *,
    explicit_path: Optional[str],
    env_path: Optional[str],
    system_paths: Iterable[str],
    allow_system: bool,
) -> List[Candidate]:
    """
    Build an ordered list of candidates. Pure function -> easy to unit test:
    - an explicit path is the only candidate when given
    - then the environment override, then the well-known system locations
    """
    if explicit_path:
        return [Candidate("path", str(explicit_path))]

    cands: List[Candidate] = []
    if env_path:
        cands.append(Candidate("env", env_path))
    if allow_system:
        cands.extend(Candidate("system", p) for p in system_paths)
    return cands


# -------- public entry --------


def discover_ids_path(path: Optional[str] = None) -> Optional[str]:
    """First usable pci.ids path, or None when there is none (never raises)."""
    cands = _resolve_candidates(
        explicit_path=path,
        env_path=os.getenv(ENV_PCI_IDS),
        system_paths=SYSTEM_PCI_IDS,
        allow_system=os.getenv(ENV_NO_SYSTEM) != "1",
    )
    for c in cands:
        if c.usable():
            log.debug("using %s pci.ids at %s", c.kind, c.path)
            return c.path
        log.debug("skipping %s pci.ids candidate %s: not a file", c.kind, c.path)

    log.debug("no pci.ids found; names will not be resolved")
    return None
