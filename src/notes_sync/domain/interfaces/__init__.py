"""Domain interfaces package."""

from .decision_source import IDecisionSource
from .remote_notes import IRemoteNotes
from .vcs import IVersionControl

__all__ = [
    "IDecisionSource",
    "IRemoteNotes",
    "IVersionControl",
]
