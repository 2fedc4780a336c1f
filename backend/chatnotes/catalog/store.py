"""Catalog of imported conversations and the JSON state document that holds it."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from chatnotes.errors import StateFileError
from chatnotes.models import (
    CatalogEntry,
    ImportedArchiveRecord,
    ImportSettings,
    StateDocument,
)

logger = logging.getLogger(__name__)


class Catalog:
    """conversation id -> CatalogEntry. Single owner, no locking."""

    def __init__(self, entries: dict[str, CatalogEntry] | None = None) -> None:
        self._entries: dict[str, CatalogEntry] = dict(entries or {})

    def get(self, conversation_id: str) -> CatalogEntry | None:
        return self._entries.get(conversation_id)

    def put(self, conversation_id: str, entry: CatalogEntry) -> None:
        self._entries[conversation_id] = entry

    def remove(self, conversation_id: str) -> CatalogEntry | None:
        return self._entries.pop(conversation_id, None)

    def find_by_path(self, path: str) -> CatalogEntry | None:
        for entry in self._entries.values():
            if entry.path == path:
                return entry
        return None

    def paths(self) -> set[str]:
        return {entry.path for entry in self._entries.values()}

    def entries(self) -> list[CatalogEntry]:
        return list(self._entries.values())

    def as_dict(self) -> dict[str, CatalogEntry]:
        return dict(self._entries)

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class ImportState:
    """Everything that outlives a single batch."""

    settings: ImportSettings = field(default_factory=ImportSettings)
    imported_archives: dict[str, ImportedArchiveRecord] = field(default_factory=dict)
    catalog: Catalog = field(default_factory=Catalog)

    @classmethod
    def from_document(cls, doc: StateDocument) -> "ImportState":
        return cls(
            settings=doc.settings,
            imported_archives=dict(doc.imported_archives),
            catalog=Catalog(doc.conversation_catalog),
        )

    def to_document(self) -> StateDocument:
        return StateDocument(
            settings=self.settings,
            imported_archives=self.imported_archives,
            conversation_catalog=self.catalog.as_dict(),
        )


class StateStore:
    """Loads and persists ImportState as one JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> ImportState:
        """Read the state document. A missing or empty file yields default state."""
        if not await aiofiles.os.path.exists(self._path):
            logger.info("No state file at %s, starting with an empty catalog", self._path)
            return ImportState()

        async with aiofiles.open(self._path, encoding="utf-8") as f:
            raw = await f.read()
        if not raw.strip():
            return ImportState()

        try:
            doc = StateDocument.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            raise StateFileError(f"Cannot read state file {self._path}", str(e)) from e

        state = ImportState.from_document(doc)
        logger.info(
            "Loaded state: %d catalogued conversation(s), %d imported archive(s)",
            len(state.catalog),
            len(state.imported_archives),
        )
        return state

    async def persist(self, state: ImportState) -> None:
        """Write the state document atomically (temp file, then rename)."""
        payload = state.to_document().model_dump_json(by_alias=True, indent=2)
        await aiofiles.os.makedirs(self._path.parent, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(payload)
        await aiofiles.os.replace(tmp_path, self._path)
        logger.debug("Persisted state to %s", self._path)
