"""
Clients for the remaining command-line tools: stow, ssh-keygen,
osascript and hdiutil.
"""

import logging
from pathlib import Path

from .command import CmdResult, CommandRunner

logger = logging.getLogger(__name__)


class StowClient:
    """Links one package directory of a stow tree into a target directory."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def stow(self, package: str, stow_dir: Path, target: Path) -> CmdResult:
        return self.runner.run(
            ["stow", "--dir", str(stow_dir), "--target", str(target), package],
            cwd=str(stow_dir),
        )


class KeygenClient:
    """Generates SSH key pairs with ssh-keygen."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def generate(self, path: Path, key_type: str, comment: str) -> CmdResult:
        """Create a key pair at path / path.pub with an empty passphrase."""
        return self.runner.run(
            ["ssh-keygen", "-t", key_type, "-f", str(path), "-N", "", "-C", comment]
        )


def _applescript_string(value: str) -> str:
    return '"' + value.replace('\\', '\\\\').replace('"', '\\"') + '"'


class OsaScriptClient:
    """Talks to macOS applications through osascript."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def run_script(self, script: str) -> CmdResult:
        return self.runner.run(["osascript", "-"], input_text=script)

    def open_in_iterm(self, profile_path: Path) -> CmdResult:
        """Ask iTerm2 to open (and so import) a dynamic profile JSON file."""
        command = "open " + _quote_shell(str(profile_path))
        script = (
            'tell application "iTerm2"\n'
            f'  do shell script {_applescript_string(command)}\n'
            'end tell\n'
        )
        return self.run_script(script)


def _quote_shell(value: str) -> str:
    return "'" + value.replace("'", "'\\''") + "'"


class DiskImageClient:
    """Mounts and unmounts .dmg files with hdiutil."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def attach(self, image: Path, mount_point: Path) -> CmdResult:
        return self.runner.run(
            ["hdiutil", "attach", str(image), "-nobrowse", "-mountpoint", str(mount_point)]
        )

    def detach(self, mount_point: Path) -> CmdResult:
        return self.runner.run(["hdiutil", "detach", str(mount_point)])
