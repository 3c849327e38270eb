"""
Git client infrastructure for newmac.

Only cloning is needed: an existing checkout is never updated.
"""

import logging

from .command import CmdResult, CommandRunner

logger = logging.getLogger(__name__)


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient(CommandRunner())
        result = client.clone("git@github.com:me/dots.git", Path.home() / "dots")
        if not result.ok:
            print(result.stderr)
    """

    def __init__(self, runner: CommandRunner):
        """
        Initialize GitClient.

        Args:
            runner: Command runner used for every git invocation
        """
        self.runner = runner

    def clone(self, url: str, target) -> CmdResult:
        """
        Clone a repository into target.

        Args:
            url: Remote URL
            target: Destination directory (must not exist)

        Returns:
            CmdResult of `git clone`
        """
        return self.runner.run(["git", "clone", url, str(target)])
