"""
Workspace service for newmac.

Ensures the user's key material, dotfiles repository and auxiliary
directories exist. Each operation checks first and only acts when the
thing is missing; nothing is ever overwritten or updated in place.
"""

import logging
import os
from pathlib import Path
from typing import Generator

from ..domain.operation import StepResult, StepStatus
from ..domain.settings import BootstrapSettings
from ..exit_codes import CloneError, DirectoryError, KeygenError
from ..infra.git_client import GitClient
from ..infra.tools import KeygenClient

logger = logging.getLogger(__name__)


class WorkspaceService:
    """
    Service for SSH key, repository and directory setup.

    Example:
        service = WorkspaceService(settings, GitClient(runner), KeygenClient(runner))
        for message in service.ensure_repository():
            print(message)
    """

    def __init__(self, settings: BootstrapSettings, git: GitClient, keygen: KeygenClient):
        self.settings = settings
        self.git = git
        self.keygen = keygen

    def _done(self) -> StepStatus:
        return StepStatus.DRY_RUN if self.settings.dry_run else StepStatus.SUCCESS

    def ensure_ssh_key(self) -> Generator[str, None, StepResult]:
        """Generate the SSH key pair unless the private key file exists."""
        key_path = self.settings.ssh_key_path
        label = self.settings.ssh_key_type.upper()

        if key_path.is_file():
            yield f"{label} SSH key already exists at {key_path}."
            return StepResult("ssh_key", StepStatus.SKIPPED, "already_present",
                              metadata={'path': str(key_path)})

        if key_path.exists():
            raise KeygenError(f"{key_path} exists but is not a file")

        yield f"Creating {label} SSH key..."

        if not self.settings.dry_run:
            try:
                key_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            except OSError as e:
                raise KeygenError(f"Could not create {key_path.parent}: {e}") from e

        result = self.keygen.generate(key_path, self.settings.ssh_key_type, self.settings.key_comment)
        if not result.ok:
            raise KeygenError(f"Failed to create SSH key at {key_path}.")

        yield f"SSH key created at {key_path}."
        return StepResult("ssh_key", self._done(), "generated",
                          metadata={'path': str(key_path), 'comment': self.settings.key_comment})

    def ensure_repository(self) -> Generator[str, None, StepResult]:
        """Clone the dotfiles repository unless its directory exists."""
        repo_dir = self.settings.repo_dir

        if repo_dir.is_dir():
            yield f"Config repository already exists at {repo_dir}."
            return StepResult("repository", StepStatus.SKIPPED, "already_present",
                              metadata={'path': str(repo_dir)})

        yield "Config directory not found. Cloning repository..."
        result = self.git.clone(self.settings.repo_url, repo_dir)
        if not result.ok:
            raise CloneError(f"Failed to clone {self.settings.repo_url} into {repo_dir}.")

        return StepResult("repository", self._done(), "cloned",
                          metadata={'path': str(repo_dir), 'url': self.settings.repo_url})

    def ensure_directory(self, step: str, path: Path) -> Generator[str, None, StepResult]:
        """Create a directory (and parents) if it does not exist."""
        if path.is_dir():
            yield f"Directory already exists at {path}."
            return StepResult(step, StepStatus.SKIPPED, "already_present",
                              metadata={'path': str(path)})

        yield f"Creating directory {path}..."
        if not self.settings.dry_run:
            try:
                os.makedirs(path, exist_ok=True)
            except OSError as e:
                raise DirectoryError(f"Could not create {path}: {e}") from e

        return StepResult(step, self._done(), "created", metadata={'path': str(path)})

    def ensure_venv_dir(self) -> Generator[str, None, StepResult]:
        """Create the root directory for Python virtual environments."""
        return self.ensure_directory("venv_dir", self.settings.venv_dir)
