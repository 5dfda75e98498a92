"""Interface for interactive decisions."""

from abc import ABC, abstractmethod
from collections.abc import Sequence


class IDecisionSource(ABC):
    """Source of yes/no and multiple-choice answers.

    The sync orchestrator never moves past a decision point without a
    concrete answer from here.
    """

    @abstractmethod
    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question."""
        pass

    @abstractmethod
    def pick_one(self, prompt: str, options: Sequence[str]) -> str:
        """Ask the user to choose one of ``options``.

        Returns:
            A member of ``options``
        """
        pass
