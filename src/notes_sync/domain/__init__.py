"""Domain layer for the notes sync service.

Holds the contracts of the external collaborators the sync engine talks
to: the remote note store, the source of user decisions, and version
control for the notes directory.
"""

from .interfaces import IDecisionSource, IRemoteNotes, IVersionControl

__all__ = [
    "IDecisionSource",
    "IRemoteNotes",
    "IVersionControl",
]
