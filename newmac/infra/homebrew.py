"""
Homebrew client infrastructure for newmac.

Provides the package-manager capability interface (query / install /
cleanup) and its Homebrew implementation. Services only talk to the
PackageManager protocol, so tests can substitute a recording fake.
"""

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol

from ..domain.settings import PackageKind
from .command import CmdResult, CommandRunner
from .http_client import HttpClient

logger = logging.getLogger(__name__)

INSTALL_SCRIPT_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

INTEL_PREFIX = Path("/usr/local")
APPLE_SILICON_PREFIX = Path("/opt/homebrew")

_EXPORT_RE = re.compile(r'^\s*export\s+([A-Za-z_][A-Za-z0-9_]*)="(.*)";?\s*$')
_APPEND_RE = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\+:\$\1\}')
_DEFAULT_RE = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*):-\}')


class PackageManager(Protocol):
    """What the package service needs from a package manager."""

    def is_available(self) -> bool:
        ...

    def install_self(self) -> bool:
        ...

    def activate(self, shell_profile: Path) -> None:
        ...

    def update(self) -> bool:
        ...

    def is_installed(self, name: str, kind: PackageKind) -> bool:
        ...

    def install(self, name: str, kind: PackageKind) -> CmdResult:
        ...

    def cleanup(self) -> bool:
        ...


def prefix_for_machine(machine: str) -> Path:
    """Homebrew's default prefix for a CPU architecture."""
    return INTEL_PREFIX if machine == "x86_64" else APPLE_SILICON_PREFIX


def parse_shellenv(output: str, environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Turn `brew shellenv` output into environment variables.

    Only `export NAME="value"` lines are applied. The `${VAR+:$VAR}` and
    `${VAR:-}` forms Homebrew uses are expanded against ``environ``.
    """
    environ = dict(os.environ if environ is None else environ)
    exports: Dict[str, str] = {}

    for line in output.splitlines():
        match = _EXPORT_RE.match(line)
        if not match:
            continue
        name, value = match.groups()
        value = _APPEND_RE.sub(
            lambda m: f":{environ[m.group(1)]}" if m.group(1) in environ else "", value
        )
        value = _DEFAULT_RE.sub(lambda m: environ.get(m.group(1), ""), value)
        exports[name] = value
        environ[name] = value

    return exports


class HomebrewClient:
    """
    Homebrew implementation of PackageManager.

    Example:
        brew = HomebrewClient(CommandRunner(), HttpClient(), machine="arm64")
        if not brew.is_installed("ripgrep", PackageKind.FORMULA):
            brew.install("ripgrep", PackageKind.FORMULA)
    """

    def __init__(
        self,
        runner: CommandRunner,
        http: Optional[HttpClient] = None,
        machine: str = "arm64",
    ):
        """
        Initialize HomebrewClient.

        Args:
            runner: Command runner used for every brew invocation
            http: HTTP client used to fetch the installer script
            machine: CPU architecture, selects the install prefix
        """
        self.runner = runner
        self.http = http or HttpClient()
        self.prefix = prefix_for_machine(machine)

    @property
    def executable(self) -> Optional[str]:
        """Path to brew, from PATH or the default prefix."""
        found = shutil.which("brew")
        if found:
            return found
        candidate = self.prefix / "bin" / "brew"
        if candidate.exists():
            return str(candidate)
        return None

    def _brew(self) -> str:
        return self.executable or "brew"

    def is_available(self) -> bool:
        return self.executable is not None

    def install_self(self) -> bool:
        """Run the official non-interactive installer."""
        script = self.http.fetch_text(INSTALL_SCRIPT_URL)
        result = self.runner.run(
            ["/bin/bash", "-c", script],
            env={"NONINTERACTIVE": "1"},
        )
        return result.ok

    def shellenv_line(self) -> str:
        """The line that activates Homebrew in a login shell."""
        return f'eval "$({self.prefix / "bin" / "brew"} shellenv)"'

    def persist_shellenv(self, shell_profile: Path) -> bool:
        """
        Append the activation line to the shell profile.

        Returns:
            True if the line was appended, False if it was already there
        """
        line = self.shellenv_line()
        shell_profile = Path(shell_profile)

        if shell_profile.exists() and line in shell_profile.read_text().splitlines():
            logger.debug(f"{shell_profile} already activates Homebrew")
            return False

        if self.runner.dry_run:
            logger.info(f"[Dry Run] Would append to {shell_profile}: {line}")
            return True

        shell_profile.parent.mkdir(parents=True, exist_ok=True)
        existing = shell_profile.read_text() if shell_profile.exists() else ""
        with open(shell_profile, 'a') as f:
            if existing and not existing.endswith('\n'):
                f.write('\n')
            f.write(line + '\n')
        logger.info(f"Added Homebrew activation to {shell_profile}")
        return True

    def activate(self, shell_profile: Path) -> None:
        """Persist the activation line, then apply `brew shellenv` to this process."""
        self.persist_shellenv(shell_profile)

        if self.runner.dry_run:
            return

        brew = str(self.prefix / "bin" / "brew")
        result = self.runner.run([brew, "shellenv"], mutating=False)
        if not result.ok:
            raise OSError(f"brew shellenv failed: {result.stderr.strip()}")
        os.environ.update(parse_shellenv(result.stdout))

    def update(self) -> bool:
        return self.runner.run([self._brew(), "update"]).ok

    def installed(self, kind: PackageKind) -> set:
        """Names of installed formulae or casks."""
        result = self.runner.run([self._brew(), "list", f"--{kind.value}", "-1"], mutating=False)
        if not result.ok:
            return set()
        return set(result.lines())

    def is_installed(self, name: str, kind: PackageKind) -> bool:
        """Exact-match a package name against the installed listing."""
        names = self.installed(kind)
        # Tapped names ("owner/tap/name") are listed by their short name
        return name in names or name.rsplit("/", 1)[-1] in names

    def install(self, name: str, kind: PackageKind) -> CmdResult:
        argv = [self._brew(), "install"]
        if kind is PackageKind.CASK:
            argv.append("--cask")
        argv.append(name)
        return self.runner.run(argv)

    def cleanup(self) -> bool:
        return self.runner.run([self._brew(), "cleanup"]).ok
