"""Centralized exception hierarchy for notes-sync.

All custom exceptions inherit from NotesSyncError, so the CLI can catch
every sync-related failure with a single except clause.

Exception Hierarchy:
    NotesSyncError (base)
     ConfigurationError - Configuration loading/validation errors
     LocalStoreError - Local notes directory errors
        NotesDirectoryError - The notes directory cannot be listed
     RemoteStoreError - Remote note service failures
     VersionControlError - Git/external tool invocation failures
     DecisionError - Invalid answer from a decision source
     SyncAborted - The user chose to exit the sync

Parse problems in a single note file are not exceptions: they are logged
and the file is left out of the current sweep.

Usage Examples:
    try:
        orchestrator.run()
    except RemoteStoreError as e:
        logger.error("sync_failed", **e.to_dict())
"""

from typing import Any


class NotesSyncError(Exception):
    """Base exception for all sync-related errors.

    Attributes:
        message: Human-readable error message
        suggestion: Optional suggestion for resolving the error
        context: Additional context for debugging (paths, ids, operations)
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with the suggestion if available."""
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "message": self.message,
            "suggestion": self.suggestion,
            "context": self.context,
            "type": type(self).__name__,
        }


class ConfigurationError(NotesSyncError):
    """Configuration loading or validation errors.

    Raised when:
    - Config file is malformed
    - The notes directory is not configured or does not exist
    """


class LocalStoreError(NotesSyncError):
    """Errors reading or writing the local notes directory."""


class NotesDirectoryError(LocalStoreError):
    """The notes directory itself cannot be listed.

    Nothing downstream can be trusted without a listing, so this always
    ends the run.
    """


class RemoteStoreError(NotesSyncError):
    """Remote note service failures.

    Raised when:
    - The service cannot be reached
    - A create/update/list call returns an error status
    - The response payload is malformed
    """


class VersionControlError(NotesSyncError):
    """Git or external review tool invocation failures."""


class DecisionError(NotesSyncError):
    """A decision source returned an answer outside the offered options."""


class SyncAborted(NotesSyncError):
    """The user chose to exit at a decision point.

    Attributes:
        state: Name of the orchestrator state where the run stopped
    """

    def __init__(self, state: str, message: str | None = None):
        self.state = state
        super().__init__(
            message or f"Sync aborted by user during {state}",
            context={"state": state},
        )
