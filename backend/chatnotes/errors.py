"""Error taxonomy for reconciliation.

Archive-level errors abandon one archive; conversation-level errors are
caught at the conversation boundary and recorded as failed report entries.
"""


class ChatNotesError(Exception):
    """Base class for all reconciliation errors."""

    def __init__(self, message: str, details: str | None = None) -> None:
        self.details = details
        super().__init__(message if details is None else f"{message}: {details}")


class MalformedArchive(ChatNotesError):
    """The archive is not a zip, or its conversation index is missing or unparseable."""


class FolderCreationFailed(ChatNotesError):
    """The target folder for a note could not be created."""


class NoteWriteFailed(ChatNotesError):
    """Writing a note to storage failed."""


class NoteMissing(ChatNotesError):
    """A catalogued path no longer resolves to a note."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__("Note not found", path)


class UnknownError(ChatNotesError):
    """Wraps an unexpected exception caught at a conversation or archive boundary."""

    @classmethod
    def wrap(cls, exc: BaseException) -> "UnknownError":
        return cls(type(exc).__name__, str(exc) or None)


class StateFileError(ChatNotesError):
    """The persisted state document exists but cannot be read."""
