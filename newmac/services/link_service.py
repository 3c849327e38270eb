"""
Link service for newmac.

Links stow packages from the dotfiles repository into the configuration
directory, one package at a time, and reports the state of every
managed path.
"""

import logging
import stat
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from ..domain.operation import StepResult, StepStatus
from ..domain.settings import BootstrapSettings
from ..exit_codes import DirectoryError, SymlinkError
from ..infra.tools import StowClient

logger = logging.getLogger(__name__)


@dataclass
class LinkResult:
    """Result of a symlink pass."""
    linked: List[str] = field(default_factory=list)
    already_linked: List[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        """True when some, but not all, links existed before the pass."""
        return bool(self.linked) and bool(self.already_linked)


def describe_path(path: Path, kind: str, name: Optional[str] = None) -> Dict[str, Any]:
    """
    Describe a managed path without following symlinks.

    Returns owner, permissions and modification time when the path exists.
    """
    row: Dict[str, Any] = {
        'name': name or path.name,
        'kind': kind,
        'path': str(path),
    }

    try:
        st = path.lstat()
    except FileNotFoundError:
        row['present'] = False
        return row

    row['present'] = True
    row['symlink'] = stat.S_ISLNK(st.st_mode)
    row['mode'] = stat.filemode(st.st_mode)
    row['modified'] = datetime.fromtimestamp(st.st_mtime).isoformat(timespec='seconds')
    try:
        row['owner'] = path.owner()
    except (KeyError, NotImplementedError):
        row['owner'] = str(st.st_uid)
    if row['symlink']:
        row['target'] = str(path.readlink())
    return row


class LinkService:
    """
    Service for stow-managed symlinks.

    Each declared name maps to `config_dir / name`. A name whose path is
    already a symlink is left alone; every other name is stowed on its
    own, so a partially linked set is completed rather than skipped.

    Example:
        service = LinkService(settings, StowClient(runner))
        for progress in service.ensure_symlinks():
            print(progress)

        print(service.last_result.linked)
    """

    def __init__(self, settings: BootstrapSettings, stow: StowClient):
        self.settings = settings
        self.stow = stow
        self.last_result: Optional[LinkResult] = None

    def link_path(self, name: str) -> Path:
        return self.settings.config_dir / name

    def is_linked(self, name: str) -> bool:
        return self.link_path(name).is_symlink()

    def ensure_symlinks(self) -> Generator[str, None, StepResult]:
        """
        Stow every declared package whose link is missing.

        Raises:
            DirectoryError: the repository directory is missing
            SymlinkError: stow failed; later names are not attempted
        """
        result = LinkResult()
        self.last_result = result
        repo_dir = self.settings.repo_dir

        if not repo_dir.is_dir():
            if not self.settings.dry_run:
                raise DirectoryError(f"Dotfiles repository not found at {repo_dir}")
            # Dry runs never clone, so the checkout is not there to inspect
            for name in self.settings.symlinks:
                logger.info(f"[Dry Run] Would stow {name}")
                result.linked.append(name)
            yield f"Would link {len(result.linked)} package(s) from {repo_dir}"
            return StepResult("symlinks", StepStatus.DRY_RUN, "would_link",
                              metadata={'linked': result.linked})

        for name in self.settings.symlinks:
            if self.is_linked(name):
                result.already_linked.append(name)
                yield f"Symlink for {name} already exists."
                continue

            yield f"Creating symlink for {name} in {self.settings.config_dir}"
            outcome = self.stow.stow(name, repo_dir, self.settings.stow_target)
            if not outcome.ok:
                raise SymlinkError(name, f"Failed to stow {name}.")
            result.linked.append(name)

        if result.partial:
            logger.info(
                f"Completed a partially linked set: {', '.join(result.linked)} "
                f"were missing"
            )

        if not result.linked:
            return StepResult("symlinks", StepStatus.SKIPPED, "already_present",
                              metadata={'linked': []})

        status = StepStatus.DRY_RUN if self.settings.dry_run else StepStatus.SUCCESS
        return StepResult("symlinks", status, "linked", metadata={'linked': result.linked})

    def symlink_status(self) -> List[Dict[str, Any]]:
        """Describe every declared symlink (read-only)."""
        return [describe_path(self.link_path(name), 'symlink', name)
                for name in self.settings.symlinks]
