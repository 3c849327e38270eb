"""
Bootstrap service for newmac.

Runs the provisioning steps in order:

    homebrew -> update -> formulae -> casks -> cleanup -> ssh_key
    -> repository -> venv_dir -> symlinks -> iterm_profile
    -> color_scheme -> dmg_apps

A fatal step that fails stops the run and its error propagates. A
non-fatal step that fails is recorded and the run continues. Steps that
need a host capability the machine lacks are skipped.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generator, List, Optional

from ..domain.operation import RunSummary, StepResult, StepStatus
from ..domain.settings import BootstrapSettings, PackageKind
from ..exit_codes import CommandError
from ..infra.command import CommandRunner
from ..infra.git_client import GitClient
from ..infra.homebrew import HomebrewClient, PackageManager
from ..infra.host import Capability, HostCapabilities, detect_host
from ..infra.http_client import HttpClient
from ..infra.tools import DiskImageClient, KeygenClient, OsaScriptClient, StowClient
from .app_service import AppService
from .link_service import LinkService, describe_path
from .package_service import PackageService
from .preferences_service import PreferencesService
from .workspace_service import WorkspaceService

logger = logging.getLogger(__name__)

StepAction = Callable[[], Generator[str, None, StepResult]]


@dataclass(frozen=True)
class Step:
    """A single idempotent bootstrap step."""
    name: str
    action: StepAction
    fatal: bool = True
    requires: tuple = ()


class BootstrapService:
    """
    Drives a full bootstrap run.

    Example:
        service = BootstrapService.create(settings)

        for progress in service.run():
            print(progress)

        summary = service.last_result
        print(f"{summary.successful} steps done, {summary.failed} failed")
    """

    def __init__(
        self,
        settings: BootstrapSettings,
        host: HostCapabilities,
        packages: PackageService,
        workspace: WorkspaceService,
        links: LinkService,
        preferences: PreferencesService,
        apps: AppService,
    ):
        self.settings = settings
        self.host = host
        self.packages = packages
        self.workspace = workspace
        self.links = links
        self.preferences = preferences
        self.apps = apps
        self.last_result: Optional[RunSummary] = None

    @classmethod
    def create(
        cls,
        settings: BootstrapSettings,
        host: Optional[HostCapabilities] = None,
        runner: Optional[CommandRunner] = None,
        manager: Optional[PackageManager] = None,
        http: Optional[HttpClient] = None,
    ) -> 'BootstrapService':
        """Wire the services to real clients."""
        host = host or detect_host()
        runner = runner or CommandRunner(dry_run=settings.dry_run)
        http = http or HttpClient()
        manager = manager or HomebrewClient(runner, http, machine=host.machine)

        return cls(
            settings=settings,
            host=host,
            packages=PackageService(settings, manager),
            workspace=WorkspaceService(settings, GitClient(runner), KeygenClient(runner)),
            links=LinkService(settings, StowClient(runner)),
            preferences=PreferencesService(settings, OsaScriptClient(runner), http),
            apps=AppService(settings, DiskImageClient(runner), http),
        )

    def build_steps(self) -> List[Step]:
        """The ordered step list for this run."""
        return [
            Step("homebrew", self.packages.ensure_package_manager),
            Step("update", self.packages.update),
            Step("formulae", lambda: self.packages.install_packages(PackageKind.FORMULA)),
            Step("casks", lambda: self.packages.install_packages(PackageKind.CASK)),
            Step("cleanup", self.packages.cleanup, fatal=False),
            Step("ssh_key", self.workspace.ensure_ssh_key),
            Step("repository", self.workspace.ensure_repository),
            Step("venv_dir", self.workspace.ensure_venv_dir, fatal=False),
            Step("symlinks", self.links.ensure_symlinks),
            Step("iterm_profile", self.preferences.import_iterm_profile, fatal=False,
                 requires=(Capability.MACOS, Capability.OSASCRIPT)),
            Step("color_scheme", self.preferences.download_color_scheme, fatal=False,
                 requires=(Capability.MACOS,)),
            Step("dmg_apps", self.apps.install_dmg_apps, fatal=False,
                 requires=(Capability.MACOS, Capability.HDIUTIL)),
        ]

    def run(self, steps: Optional[List[Step]] = None) -> Generator[str, None, RunSummary]:
        """
        Run every step in order.

        Yields:
            Progress messages

        Returns:
            RunSummary (also stored on last_result)

        Raises:
            CommandError, OSError: from the first fatal step that fails
        """
        summary = RunSummary(profile=self.settings.profile.value, dry_run=self.settings.dry_run)
        self.last_result = summary

        for step in steps if steps is not None else self.build_steps():
            missing = [c.value for c in step.requires if not self.host.has(c)]
            if missing:
                yield f"Skipping {step.name} (host lacks {', '.join(missing)})"
                summary.add_detail(StepResult(
                    step.name, StepStatus.SKIPPED, "capability_missing",
                    metadata={'missing': missing},
                ))
                continue

            logger.debug(f"Running step {step.name}")
            try:
                result = yield from step.action()
            except (CommandError, OSError) as e:
                summary.add_detail(StepResult(
                    step.name, StepStatus.FAILED, "failed",
                    error=str(e), fatal=step.fatal,
                ))
                if step.fatal:
                    raise
                logger.warning(str(e))
                continue

            result.step = step.name
            summary.add_detail(result)

        return summary

    def status(self) -> List[Dict[str, Any]]:
        """Describe every managed path without changing anything."""
        rows = [
            describe_path(self.settings.ssh_key_path, 'ssh_key'),
            describe_path(self.settings.repo_dir, 'repository'),
            describe_path(self.settings.venv_dir, 'venv_dir'),
        ]
        rows.extend(self.links.symlink_status())
        return rows
