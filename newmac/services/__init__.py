"""
Service layer for newmac.

Contains the provisioning logic that orchestrates settings and infrastructure:
- PackageService: Homebrew bootstrap, package installs, cleanup
- WorkspaceService: SSH key, dotfiles repository, auxiliary directories
- LinkService: stow-managed symlinks
- PreferencesService / AppService: macOS-only extras
- BootstrapService: the ordered run

Services are the primary API for the CLI to use.
"""

from .app_service import AppService
from .bootstrap_service import BootstrapService, Step
from .link_service import LinkService
from .package_service import PackageService
from .preferences_service import PreferencesService
from .workspace_service import WorkspaceService

__all__ = [
    'AppService',
    'BootstrapService',
    'Step',
    'LinkService',
    'PackageService',
    'PreferencesService',
    'WorkspaceService',
]
