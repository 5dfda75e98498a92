"""Interface for the remote note store."""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Literal

from notes_sync.models import CreatableNote, NoteMetadata, NoteRecord


class IRemoteNotes(ABC):
    """Interface for the remote note service.

    The service owns note ids: they are assigned by ``create_note`` and never
    invented by the client. Implementations are expected to give a single
    client read-after-write consistency.

    The handle is passed explicitly to whoever needs it; the top-level run
    owns the ``connect``/``disconnect`` lifecycle, usually through ``with``.
    """

    @abstractmethod
    def connect(self) -> None:
        """Open the connection to the service."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the connection. Safe to call more than once."""
        pass

    @abstractmethod
    def get_all_notes(self) -> list[NoteRecord]:
        """Fetch every note including its content."""
        pass

    @abstractmethod
    def get_all_notes_metadata(self) -> list[NoteMetadata]:
        """Fetch every note without content, for lighter listings."""
        pass

    @abstractmethod
    def get_note_by_id(self, note_id: str) -> NoteRecord | None:
        """Fetch one note.

        Returns:
            The note, or None when the id is unknown
        """
        pass

    @abstractmethod
    def create_note(self, note: CreatableNote) -> NoteRecord:
        """Create a note and return it with its newly assigned id."""
        pass

    @abstractmethod
    def update_note(self, note_id: str, note: NoteRecord) -> None:
        """Replace the stored note ``note_id`` with ``note``."""
        pass

    def __enter__(self) -> "IRemoteNotes":
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> Literal[False]:
        self.disconnect()
        return False
