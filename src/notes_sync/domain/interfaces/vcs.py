"""Interface for version control of the notes directory."""

from abc import ABC, abstractmethod
from pathlib import Path


class IVersionControl(ABC):
    """Safety net around the notes directory.

    Lets a human review and commit working-tree changes before the sync
    overwrites or pushes them. Output is never parsed beyond a clean/dirty
    answer and a display string.
    """

    # False when the tree cannot report edits, so reviews must pause explicitly
    detects_changes: bool = True

    @abstractmethod
    def has_uncommitted_changes(self, directory: Path) -> bool:
        """Check whether ``directory`` has changes not yet committed."""
        pass

    @abstractmethod
    def short_status(self, directory: Path) -> str:
        """Human-readable summary of the pending changes."""
        pass

    @abstractmethod
    def commit_all(self, directory: Path, message: str) -> None:
        """Stage and commit every change under ``directory``."""
        pass

    @abstractmethod
    def open_interactive_tool(self, directory: Path) -> None:
        """Run the external review tool and block until it exits."""
        pass
