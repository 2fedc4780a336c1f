"""Abstract note storage interface consumed by the reconciliation engine."""

from abc import ABC, abstractmethod


class NoteStorage(ABC):
    """Host storage: vault-relative, forward-slash paths."""

    @abstractmethod
    async def read_text(self, path: str) -> str | None:
        """Return the file's text, or None if no file exists at `path`."""
        ...

    @abstractmethod
    async def write_text(self, path: str, text: str) -> None:
        """Create or overwrite the file at `path`."""
        ...

    @abstractmethod
    async def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    async def ensure_folder(self, path: str) -> None:
        """Create the folder (and parents) if needed. Raises OSError on failure."""
        ...
