"""
Domain layer for newmac.

Contains pure domain objects with no I/O or side effects:
- Profile / PackageKind: what is being provisioned
- BootstrapSettings: immutable settings for one run
- StepResult / RunSummary: what happened
"""

from .settings import BootstrapSettings, DmgApp, PackageKind, Profile, merge_package_lists
from .operation import RunSummary, StepResult, StepStatus

__all__ = [
    'BootstrapSettings',
    'DmgApp',
    'PackageKind',
    'Profile',
    'merge_package_lists',
    'RunSummary',
    'StepResult',
    'StepStatus',
]
