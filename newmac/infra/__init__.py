"""
Infrastructure layer for newmac.

Contains abstractions for external systems:
- CommandRunner: subprocess execution with logging and dry-run
- HomebrewClient: the PackageManager implementation
- GitClient: git clone and inspection
- StowClient / KeygenClient / OsaScriptClient / DiskImageClient: other tools
- HttpClient: downloads
- HostCapabilities: what the current machine supports

These provide clean interfaces that can be mocked for testing.
"""

from .command import CmdResult, CommandRunner
from .git_client import GitClient
from .homebrew import HomebrewClient, PackageManager
from .host import Capability, HostCapabilities, detect_host
from .http_client import HttpClient
from .tools import DiskImageClient, KeygenClient, OsaScriptClient, StowClient

__all__ = [
    'CmdResult',
    'CommandRunner',
    'GitClient',
    'HomebrewClient',
    'PackageManager',
    'Capability',
    'HostCapabilities',
    'detect_host',
    'HttpClient',
    'DiskImageClient',
    'KeygenClient',
    'OsaScriptClient',
    'StowClient',
]
