"""
App service for newmac.

Installs applications that are only distributed as disk images:
download, mount, copy the bundle into /Applications, unmount, delete.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Generator, List, Optional

from ..domain.operation import StepResult, StepStatus
from ..domain.settings import BootstrapSettings, DmgApp
from ..exit_codes import AppInstallError, DownloadError
from ..infra.http_client import HttpClient
from ..infra.tools import DiskImageClient

logger = logging.getLogger(__name__)

APPLICATIONS_DIR = Path("/Applications")
VOLUMES_DIR = Path("/Volumes")


class AppService:
    """
    Service for .dmg application installs.

    An app is considered installed when `/Applications/<name>.app` exists.
    A failing app does not stop the others; failures are raised together
    once every app has been attempted.
    """

    def __init__(
        self,
        settings: BootstrapSettings,
        hdiutil: DiskImageClient,
        http: HttpClient,
        applications_dir: Path = APPLICATIONS_DIR,
        volumes_dir: Path = VOLUMES_DIR,
        download_dir: Optional[Path] = None,
    ):
        self.settings = settings
        self.hdiutil = hdiutil
        self.http = http
        self.applications_dir = Path(applications_dir)
        self.volumes_dir = Path(volumes_dir)
        self.download_dir = Path(download_dir or tempfile.gettempdir())

    def is_installed(self, app: DmgApp) -> bool:
        return (self.applications_dir / f"{app.name}.app").exists()

    def install_dmg_apps(self) -> Generator[str, None, StepResult]:
        """Install every configured app that is not already present."""
        installed: List[str] = []
        failures: List[str] = []

        if not self.settings.dmg_apps:
            yield "No disk-image apps configured."
            return StepResult("dmg_apps", StepStatus.SKIPPED, "not_configured")

        for app in self.settings.dmg_apps:
            if self.is_installed(app):
                yield f"{app.name} is already installed."
                continue
            try:
                yield from self.install_dmg(app)
                installed.append(app.name)
            except AppInstallError as e:
                logger.warning(str(e))
                failures.append(app.name)

        if failures:
            raise AppInstallError(
                ", ".join(failures),
                f"Failed to install: {', '.join(failures)}",
            )

        if not installed:
            return StepResult("dmg_apps", StepStatus.SKIPPED, "already_present")

        status = StepStatus.DRY_RUN if self.settings.dry_run else StepStatus.SUCCESS
        return StepResult("dmg_apps", status, "installed", metadata={'installed': installed})

    def install_dmg(self, app: DmgApp) -> Generator[str, None, None]:
        """Download, mount, copy and clean up one disk image."""
        dmg_file = self.download_dir / f"{app.name}.dmg"
        mount_point = self.volumes_dir / app.name

        yield f"Downloading {app.name} from {app.url}..."
        if self.settings.dry_run:
            logger.info(f"[Dry Run] Would install {app.name} into {self.applications_dir}")
            return

        try:
            self.http.download(app.url, dmg_file)
        except DownloadError as e:
            raise AppInstallError(app.name, str(e)) from e

        try:
            yield "Mounting DMG..."
            if not self.hdiutil.attach(dmg_file, mount_point).ok:
                raise AppInstallError(app.name, f"Could not mount {dmg_file}")

            try:
                yield f"Copying {app.name} to Applications folder..."
                self._copy_bundles(app, mount_point)
            finally:
                logger.info("Unmounting DMG...")
                if not self.hdiutil.detach(mount_point).ok:
                    logger.warning(f"Could not unmount {mount_point}")
        finally:
            logger.info("Cleaning up...")
            dmg_file.unlink(missing_ok=True)

    def _copy_bundles(self, app: DmgApp, mount_point: Path) -> None:
        bundles = sorted(mount_point.glob("*.app"))
        if not bundles:
            raise AppInstallError(app.name, f"No .app bundle found in {mount_point}")
        for bundle in bundles:
            dest = self.applications_dir / bundle.name
            try:
                shutil.copytree(bundle, dest, symlinks=True, dirs_exist_ok=True)
            except OSError as e:
                raise AppInstallError(app.name, f"Could not copy {bundle.name}: {e}") from e
