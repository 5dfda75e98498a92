"""Test fixtures package."""

from .mock_decision_source import ScriptedDecisionSource
from .mock_remote_notes import MockRemoteNotes
from .mock_vcs import FakeVersionControl
from .note_files import write_raw, write_tracked

__all__ = [
    "FakeVersionControl",
    "MockRemoteNotes",
    "ScriptedDecisionSource",
    "write_raw",
    "write_tracked",
]
