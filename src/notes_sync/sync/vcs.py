"""Version control collaborators for the notes directory."""

import shlex
import subprocess
from pathlib import Path

from notes_sync.domain.interfaces.vcs import IVersionControl
from notes_sync.exceptions import VersionControlError
from notes_sync.utils.logging import get_logger

logger = get_logger(__name__)


class GitVersionControl(IVersionControl):
    """Shell out to git, scoped to the notes directory.

    Args:
        tool_command: Interactive review tool started by
            ``open_interactive_tool`` (for example ``lazygit``)
    """

    def __init__(self, tool_command: str = "lazygit"):
        self.tool_command = tool_command

    def _git(self, directory: Path, *args: str) -> str:
        cmd = ["git", "-C", str(directory), *args]
        logger.debug("git_command", cmd=" ".join(cmd))
        try:
            result = subprocess.run(cmd, check=True, capture_output=True, text=True)
        except FileNotFoundError as e:
            msg = "git executable not found"
            raise VersionControlError(
                msg,
                suggestion="Install git, or disable the check with --no-git-check.",
            ) from e
        except subprocess.CalledProcessError as exc:
            msg = f"git {args[0]} failed in {directory}: {exc.stderr.strip()}"
            raise VersionControlError(
                msg,
                suggestion="Make sure notes_dir is inside a git repository.",
                context={"path": str(directory), "returncode": exc.returncode},
            ) from exc
        return result.stdout

    def has_uncommitted_changes(self, directory: Path) -> bool:
        return bool(self._git(directory, "status", "--porcelain", "--", ".").strip())

    def short_status(self, directory: Path) -> str:
        return self._git(directory, "status", "--short", "--", ".").rstrip()

    def commit_all(self, directory: Path, message: str) -> None:
        self._git(directory, "add", "-A", "--", ".")
        self._git(directory, "commit", "-m", message)
        logger.info("notes_committed", path=str(directory), message=message)

    def open_interactive_tool(self, directory: Path) -> None:
        cmd = shlex.split(self.tool_command)
        logger.info("opening_review_tool", cmd=self.tool_command, path=str(directory))
        try:
            subprocess.run(cmd, cwd=directory, check=False)
        except FileNotFoundError as e:
            msg = f"Review tool not found: {cmd[0]}"
            raise VersionControlError(
                msg, suggestion="Set vcs_tool in the config to an installed program."
            ) from e


class NoVersionControl(IVersionControl):
    """Stand-in used when git checks are disabled: the tree is always clean."""

    detects_changes = False

    def has_uncommitted_changes(self, directory: Path) -> bool:
        return False

    def short_status(self, directory: Path) -> str:
        return ""

    def commit_all(self, directory: Path, message: str) -> None:
        logger.debug("commit_skipped_no_vcs", path=str(directory))

    def open_interactive_tool(self, directory: Path) -> None:
        logger.debug("review_tool_skipped_no_vcs", path=str(directory))
