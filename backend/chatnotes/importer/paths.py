"""Path Resolver: deterministic, collision-free note paths."""

import logging
import re

from chatnotes.catalog.store import Catalog
from chatnotes.errors import FolderCreationFailed
from chatnotes.models import ImportSettings
from chatnotes.storage.base import NoteStorage
from chatnotes.utils.timefmt import to_datetime

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"
MAX_NAME_LENGTH = 100
NOTE_EXTENSION = ".md"

# Characters that are unsafe in file names or break wiki links.
_UNSAFE = re.compile(r'[<>:"/\\|?*#^\[\]\x00-\x1f\x7f]')
_WHITESPACE = re.compile(r"\s+")


def sanitize_title(title: str | None) -> str:
    """Turn a conversation title into a filesystem-safe file stem."""
    name = _UNSAFE.sub(" ", title or "")
    name = _WHITESPACE.sub(" ", name).strip().strip(".").strip()
    if len(name) > MAX_NAME_LENGTH:
        name = name[:MAX_NAME_LENGTH].rstrip(" .")
    return name or UNTITLED


def date_prefix(create_time: float, date_format: str) -> str:
    dt = to_datetime(create_time)
    if date_format == "YYYYMMDD":
        return dt.strftime("%Y%m%d")
    return dt.strftime("%Y-%m-%d")


def folder_for(create_time: float, base_folder: str) -> str:
    dt = to_datetime(create_time)
    return f"{base_folder.rstrip('/')}/{dt.year:04d}/{dt.month:02d}"


class PathResolver:
    """Resolves note paths for one batch.

    Paths handed out earlier in the same batch count as taken even before
    the note is written, so the same (title, create_time) pair resolves to
    ``Title.md`` then ``Title (1).md``. Catalogued paths are taken too, even
    when their note was deleted, so two conversations never share a path.
    """

    def __init__(self, storage: NoteStorage, settings: ImportSettings, catalog: Catalog) -> None:
        self._storage = storage
        self._settings = settings
        self._catalog = catalog
        self._claimed: set[str] = set()

    async def resolve(self, title: str | None, create_time: float) -> str:
        folder = folder_for(create_time, self._settings.archive_folder)
        try:
            await self._storage.ensure_folder(folder)
        except OSError as e:
            raise FolderCreationFailed(f"Failed to create folder '{folder}'", str(e)) from e

        stem = sanitize_title(title)
        if self._settings.add_date_prefix:
            stem = f"{date_prefix(create_time, self._settings.date_format)} - {stem}"

        candidate = f"{folder}/{stem}{NOTE_EXTENSION}"
        counter = 1
        while await self._is_taken(candidate):
            candidate = f"{folder}/{stem} ({counter}){NOTE_EXTENSION}"
            counter += 1

        self._claimed.add(candidate)
        if counter > 1:
            logger.debug("Resolved name collision for %r -> %s", title, candidate)
        return candidate

    def release(self, path: str) -> None:
        """Forget a claimed path whose note was never written."""
        self._claimed.discard(path)

    async def _is_taken(self, path: str) -> bool:
        if path in self._claimed or path in self._catalog.paths():
            return True
        return await self._storage.exists(path)
