"""
Host capability detection for newmac.

The host is inspected once at startup. Optional steps declare the
capability they need and are skipped when the host lacks it.
"""

import logging
import platform
import shutil
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional

logger = logging.getLogger(__name__)


class Capability(Enum):
    """Things an optional step may require from the host."""
    MACOS = "macos"
    OSASCRIPT = "osascript"
    HDIUTIL = "hdiutil"


@dataclass(frozen=True)
class HostCapabilities:
    """What the current host can do."""
    system: str
    machine: str
    capabilities: FrozenSet[Capability] = field(default_factory=frozenset)

    def has(self, capability: Optional[Capability]) -> bool:
        return capability is None or capability in self.capabilities

    @property
    def is_macos(self) -> bool:
        return self.has(Capability.MACOS)


def detect_host() -> HostCapabilities:
    """Probe the running host."""
    system = platform.system()
    machine = platform.machine()

    found = set()
    if system == "Darwin":
        found.add(Capability.MACOS)
        if shutil.which("osascript"):
            found.add(Capability.OSASCRIPT)
        if shutil.which("hdiutil"):
            found.add(Capability.HDIUTIL)

    host = HostCapabilities(system=system, machine=machine, capabilities=frozenset(found))
    logger.debug(f"Host: {system} {machine}, capabilities: {sorted(c.value for c in found)}")
    return host
