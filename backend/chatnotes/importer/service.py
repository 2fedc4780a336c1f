"""ReconcileService: the batch driver around the reconciliation engine."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from chatnotes.catalog.store import ImportState, StateStore
from chatnotes.errors import ChatNotesError, UnknownError
from chatnotes.importer.archive import ArchiveReader
from chatnotes.importer.engine import ConversationReconciler
from chatnotes.importer.extractor import extract
from chatnotes.importer.parsers.echoes import parse_standalone
from chatnotes.importer.paths import PathResolver
from chatnotes.importer.report import ActivityReport, write_report
from chatnotes.importer.schemas import BatchOutcome, BatchStatus
from chatnotes.models import CatalogEntry, ImportedArchiveRecord, ImportSettings
from chatnotes.storage.base import NoteStorage
from chatnotes.utils.hashing import digest

logger = logging.getLogger(__name__)

# Called with (display_name, previous record) when an archive was seen before.
ConfirmReimport = Callable[[str, ImportedArchiveRecord], Awaitable[bool]]


@dataclass
class ArchiveUpload:
    content: bytes
    display_name: str
    order_key: str = ""  # must sort like the export timestamp, e.g. the export file name


class ReconcileService:
    """Owns the import state and serializes every batch that touches it."""

    def __init__(self, storage: NoteStorage, state_store: StateStore) -> None:
        self._storage = storage
        self._state_store = state_store
        self._state: ImportState | None = None
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def load(self) -> ImportState:
        """Load persisted state once; later calls return the in-memory copy."""
        if self._state is None:
            self._state = await self._state_store.load()
        return self._state

    async def reconcile_archive(
        self,
        content: bytes,
        display_name: str,
        *,
        confirm_reimport: ConfirmReimport | None = None,
    ) -> BatchOutcome:
        """Reconcile every conversation in one exported archive."""
        async with self._lock:
            return await self._reconcile_archive(content, display_name, confirm_reimport)

    async def reconcile_archives(
        self,
        uploads: list[ArchiveUpload],
        *,
        confirm_reimport: ConfirmReimport | None = None,
    ) -> list[BatchOutcome]:
        """Reconcile several archives in order, oldest export first.

        A failed archive does not stop the ones after it.
        """
        ordered = sorted(uploads, key=lambda u: u.order_key)
        outcomes: list[BatchOutcome] = []
        async with self._lock:
            for upload in ordered:
                logger.info("Processing file: %s", upload.display_name)
                outcomes.append(await self._reconcile_archive(
                    upload.content, upload.display_name, confirm_reimport,
                ))
                logger.info("Completed processing: %s", upload.display_name)
        return outcomes

    async def reconcile_single_note(self, text: str, display_name: str) -> BatchOutcome:
        """Import a standalone markdown export that carries its own metadata."""
        async with self._lock:
            state = await self.load()
            report = ActivityReport(source_name=display_name)
            status: BatchStatus = "completed"
            try:
                note = parse_standalone(text, _strip_extension(display_name))
                reconciler = self._reconciler(state, report)
                await reconciler.reconcile_standalone(note)
                await self._state_store.persist(state)
            except Exception as e:
                status = "failed"
                self._record_batch_error(report, "Error processing note", e)
            return await self._finish(report, state.settings, status)

    async def forget_note(self, path: str) -> CatalogEntry | None:
        """Drop the catalog entry of a note an external actor deleted."""
        async with self._lock:
            state = await self.load()
            entry = state.catalog.find_by_path(path)
            if entry is None:
                return None
            state.catalog.remove(entry.conversation_id)
            await self._state_store.persist(state)
            logger.info("Removed catalog entry %s for deleted note %s", entry.conversation_id, path)
            return entry

    async def reset(self) -> None:
        """Clear imported archives, the catalog and settings."""
        async with self._lock:
            self._state = ImportState()
            await self._state_store.persist(self._state)
            logger.info("All import catalogs have been reset")

    async def get_settings(self) -> ImportSettings:
        return (await self.load()).settings

    async def update_settings(self, settings: ImportSettings) -> ImportSettings:
        async with self._lock:
            state = await self.load()
            state.settings = settings
            await self._state_store.persist(state)
            return settings

    async def list_catalog(self) -> list[CatalogEntry]:
        return (await self.load()).catalog.entries()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _reconcile_archive(
        self,
        content: bytes,
        display_name: str,
        confirm_reimport: ConfirmReimport | None,
    ) -> BatchOutcome:
        state = await self.load()
        report = ActivityReport(source_name=display_name)
        archive_digest: str | None = None
        already_imported = False
        status: BatchStatus = "completed"

        try:
            archive_digest = digest(content)
            previous = state.imported_archives.get(archive_digest)
            if previous is not None:
                already_imported = True
                logger.info(
                    "%s was already imported on %s as %s",
                    display_name, previous.date, previous.file_name,
                )
                if confirm_reimport is not None and not await confirm_reimport(display_name, previous):
                    logger.info("Re-import of %s cancelled", display_name)
                    return BatchOutcome.from_report(
                        report,
                        status="cancelled",
                        report_path=None,
                        archive_digest=archive_digest,
                        already_imported=True,
                    )

            with ArchiveReader(content) as reader:
                conversations = extract(reader)

            reconciler = self._reconciler(state, report)
            for conversation in conversations:
                await reconciler.reconcile(conversation)
                if state.settings.incremental_save:
                    await self._state_store.persist(state)

            state.imported_archives[archive_digest] = ImportedArchiveRecord(
                file_name=display_name,
                date=datetime.now(UTC).isoformat(),
            )
            await self._state_store.persist(state)
        except Exception as e:
            status = "failed"
            self._record_batch_error(report, "Error processing archive", e)

        return await self._finish(
            report,
            state.settings,
            status,
            archive_digest=archive_digest,
            already_imported=already_imported,
        )

    def _reconciler(self, state: ImportState, report: ActivityReport) -> ConversationReconciler:
        resolver = PathResolver(self._storage, state.settings, state.catalog)
        return ConversationReconciler(self._storage, state.catalog, resolver, report)

    @staticmethod
    def _record_batch_error(report: ActivityReport, message: str, exc: Exception) -> None:
        if isinstance(exc, ChatNotesError):
            logger.error("%s %s: %s", message, report.source_name, exc)
            error: ChatNotesError = exc
        else:
            logger.exception("%s %s", message, report.source_name)
            error = UnknownError.wrap(exc)
        report.add_error(message, str(error))

    async def _finish(
        self,
        report: ActivityReport,
        settings: ImportSettings,
        status: BatchStatus,
        *,
        archive_digest: str | None = None,
        already_imported: bool = False,
    ) -> BatchOutcome:
        report_path = await write_report(self._storage, report, settings.archive_folder)
        outcome = BatchOutcome.from_report(
            report,
            status=status,
            report_path=report_path,
            archive_digest=archive_digest,
            already_imported=already_imported,
        )
        logger.info(
            "%s: %d created, %d updated, %d skipped, %d failed",
            report.source_name, outcome.created, outcome.updated, outcome.skipped, outcome.failed,
        )
        return outcome


def _strip_extension(name: str) -> str:
    return name[:-3] if name.lower().endswith(".md") else name
