"""
Package service for newmac.

Bootstraps the package manager, installs the declared formulae and casks,
and cleans up old versions. Used by the bootstrap driver.
"""

import logging
from typing import Generator

from ..domain.operation import StepResult, StepStatus
from ..domain.settings import BootstrapSettings, PackageKind
from ..exit_codes import (
    CleanupError,
    DownloadError,
    PackageInstallError,
    PackageManagerError,
)
from ..infra.homebrew import PackageManager

logger = logging.getLogger(__name__)


class PackageService:
    """
    Service for package-manager operations.

    Every method is a generator: it yields progress messages and returns a
    StepResult. Failures are raised as CommandError subclasses; whether
    they abort the run is decided by the caller.

    Example:
        service = PackageService(settings, HomebrewClient(runner))
        for message in service.install_packages(PackageKind.FORMULA):
            print(message)
    """

    def __init__(self, settings: BootstrapSettings, manager: PackageManager):
        """
        Initialize PackageService.

        Args:
            settings: Settings for this run
            manager: Package manager implementation
        """
        self.settings = settings
        self.manager = manager

    def _done(self) -> StepStatus:
        return StepStatus.DRY_RUN if self.settings.dry_run else StepStatus.SUCCESS

    def ensure_package_manager(self) -> Generator[str, None, StepResult]:
        """Install Homebrew if it is not already available."""
        if self.manager.is_available():
            yield "Homebrew is already installed."
            return StepResult("homebrew", StepStatus.SKIPPED, "already_present")

        yield "Homebrew not found. Installing Homebrew..."

        if self.settings.dry_run:
            self.manager.activate(self.settings.shell_profile)
            return StepResult("homebrew", StepStatus.DRY_RUN, "would_install")

        try:
            installed = self.manager.install_self()
        except DownloadError as e:
            raise PackageManagerError(f"Failed to install Homebrew: {e}") from e
        if not installed:
            raise PackageManagerError("Failed to install Homebrew.")

        try:
            self.manager.activate(self.settings.shell_profile)
        except OSError as e:
            raise PackageManagerError(f"Failed to activate Homebrew: {e}") from e

        return StepResult(
            "homebrew", StepStatus.SUCCESS, "installed",
            metadata={'shell_profile': str(self.settings.shell_profile)},
        )

    def update(self) -> Generator[str, None, StepResult]:
        """Run `brew update`."""
        yield "Updating Homebrew..."
        if not self.manager.update():
            raise PackageManagerError("Failed to update Homebrew.")
        return StepResult("update", self._done(), "updated")

    def install_packages(self, kind: PackageKind) -> Generator[str, None, StepResult]:
        """
        Install every missing package of one kind, in declaration order.

        The first failed install raises PackageInstallError; the remaining
        packages are not attempted.
        """
        packages = self.settings.packages(kind)
        step = kind.plural
        installed = []
        present = []

        yield f"Installing Homebrew {step}..."
        for name in packages:
            if self.manager.is_installed(name, kind):
                present.append(name)
                yield f"{name} is already installed."
                continue

            yield f"Installing {name}..."
            result = self.manager.install(name, kind)
            if not result.ok:
                raise PackageInstallError(name, f"Failed to install {name}.")
            installed.append(name)

        if not installed:
            status = StepStatus.SKIPPED
            action = "already_present"
        else:
            status = self._done()
            action = "installed"

        return StepResult(
            step, status, action,
            message=f"{len(installed)} installed, {len(present)} already present",
            metadata={'installed': installed},
        )

    def cleanup(self) -> Generator[str, None, StepResult]:
        """Run `brew cleanup`."""
        yield "Cleaning up outdated Homebrew versions..."
        if not self.manager.cleanup():
            raise CleanupError("Failed to cleanup Homebrew.")
        return StepResult("cleanup", self._done(), "cleaned")
