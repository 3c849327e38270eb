"""
Command runner infrastructure for newmac.

Every external tool (brew, git, stow, ssh-keygen, osascript, hdiutil) is
launched through a CommandRunner so that:
- every command is logged before it runs (visible with --verbose)
- dry runs log without executing
- tests can substitute a recording fake
"""

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    """Outcome of one external command."""
    argv: tuple
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self):
        """Non-empty, stripped stdout lines."""
        return [line.strip() for line in self.stdout.splitlines() if line.strip()]


def format_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(a)) for a in argv)


class CommandRunner:
    """
    Runs external commands and captures their output.

    No timeout is applied: a hung command blocks the run.

    Example:
        runner = CommandRunner()
        result = runner.run(["brew", "list", "--formula", "-1"])
        if result.ok:
            print(result.lines())
    """

    def __init__(self, dry_run: bool = False):
        """
        Initialize CommandRunner.

        Args:
            dry_run: Log commands without executing them
        """
        self.dry_run = dry_run

    def run(
        self,
        argv: Sequence[str],
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        input_text: Optional[str] = None,
        mutating: bool = True,
    ) -> CmdResult:
        """
        Run a command.

        Args:
            argv: Command and arguments
            cwd: Working directory
            env: Extra environment variables, layered over os.environ
            input_text: Text passed on stdin
            mutating: False for read-only queries, which still run in dry-run mode

        Returns:
            CmdResult; a missing executable is reported as returncode 127
        """
        argv = tuple(str(a) for a in argv)
        cmd_str = format_argv(argv)

        if self.dry_run and mutating:
            logger.info(f"[Dry Run] Would run: {cmd_str}")
            return CmdResult(argv=argv, returncode=0)

        where = f" (in {cwd})" if cwd else ""
        logger.debug(f"Running: {cmd_str}{where}")

        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                env=dict(os.environ, **(env or {})),
                input=input_text,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.error(f"Command not found: {argv[0]}")
            return CmdResult(argv=argv, returncode=127, stderr=f"{argv[0]}: command not found")
        except PermissionError as e:
            logger.error(f"Command not executable: {argv[0]} - {e}")
            return CmdResult(argv=argv, returncode=126, stderr=str(e))

        if result.stdout and result.stdout.strip():
            logger.debug(result.stdout.strip())

        if result.returncode != 0:
            logger.debug(f"Command exited with {result.returncode}: {cmd_str}")
            if result.stderr and result.stderr.strip():
                logger.error(result.stderr.strip())

        return CmdResult(
            argv=argv,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
