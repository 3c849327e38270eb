"""
newmac - Bootstrap a Mac from a declared work or home profile.

Quick Start:
    from newmac import BootstrapService, BootstrapSettings, Profile, load_config

    settings = BootstrapSettings.from_config(load_config(), Profile.HOME)
    service = BootstrapService.create(settings)

    for progress in service.run():
        print(progress)

    print(service.last_result.to_dict())

Steps (in order):
    homebrew, update, formulae, casks, cleanup*, ssh_key, repository,
    venv_dir*, symlinks, iterm_profile*, color_scheme*, dmg_apps*

    * non-fatal: failures are reported and the run continues
"""

__version__ = "0.3.0"

from .config import load_config
from .domain import BootstrapSettings, PackageKind, Profile, RunSummary, StepResult, StepStatus
from .services import BootstrapService

__all__ = [
    "__version__",
    "load_config",
    "BootstrapSettings",
    "PackageKind",
    "Profile",
    "RunSummary",
    "StepResult",
    "StepStatus",
    "BootstrapService",
]
