"""Reconciliation Engine: decides create / update / skip for one conversation.

The engine works against the catalog's in-memory state, which earlier
conversations of the same run have already mutated. It is never run
concurrently with itself; the batch driver owns that guarantee.
"""

import logging
from typing import Literal

from chatnotes.catalog.store import Catalog
from chatnotes.errors import ChatNotesError, NoteMissing, NoteWriteFailed, UnknownError
from chatnotes.importer.models import Conversation
from chatnotes.importer.parsers.echoes import PROVIDER as STANDALONE_PROVIDER
from chatnotes.importer.parsers.echoes import StandaloneNote
from chatnotes.importer.paths import PathResolver
from chatnotes.importer.report import ActivityReport, ReportEntry
from chatnotes.models import CatalogEntry
from chatnotes.notes.merge import merge_conversation
from chatnotes.notes.renderer import render_note, render_standalone
from chatnotes.storage.base import NoteStorage
from chatnotes.utils.timefmt import format_report_stamp

logger = logging.getLogger(__name__)

Outcome = Literal["created", "updated", "skipped", "failed"]

REASON_NO_UPDATES = "No updates"
REASON_NO_CHANGES = "No changes needed"


class ConversationReconciler:
    """Applies one batch's conversations to the catalog and the vault."""

    def __init__(
        self,
        storage: NoteStorage,
        catalog: Catalog,
        resolver: PathResolver,
        report: ActivityReport,
    ) -> None:
        self._storage = storage
        self._catalog = catalog
        self._resolver = resolver
        self._report = report

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def reconcile(self, conversation: Conversation) -> Outcome:
        """Reconcile one conversation. Never raises; failures become report entries."""
        self._report.processed += 1
        entry: CatalogEntry | None = None
        path: str | None = None
        try:
            entry = self._catalog.get(conversation.id)
            if entry is None:
                path = await self._resolver.resolve(conversation.title, conversation.create_time)
                return await self._create(conversation, path)

            path = entry.path
            if entry.update_time >= conversation.update_time:
                self._report.add_skipped(self._entry(
                    conversation, path, reason=REASON_NO_UPDATES,
                ))
                return "skipped"
            return await self._update(conversation, entry)
        except Exception as e:
            if entry is None and path is not None:
                self._resolver.release(path)
            return self._fail(
                conversation.display_title,
                path,
                conversation.create_time,
                conversation.update_time,
                e,
            )

    async def reconcile_standalone(self, note: StandaloneNote) -> Outcome:
        """Reconcile a single pre-rendered note carrying its own metadata."""
        self._report.processed += 1
        entry: CatalogEntry | None = None
        path: str | None = None
        try:
            if note.conversation_id:
                entry = self._catalog.get(note.conversation_id)
            text = render_standalone(
                title=note.title,
                body=note.conversation,
                provider=STANDALONE_PROVIDER,
                create_time=note.create_time,
                update_time=note.update_time,
                conversation_id=note.conversation_id,
                url=note.url,
            )
            report_entry = ReportEntry(
                title=note.title,
                path="",
                created=format_report_stamp(note.create_time),
                updated=format_report_stamp(note.update_time),
            )

            if entry is None:
                path = await self._resolver.resolve(note.title, note.create_time)
                await self._write(path, text)
                report_entry.path = path
                self._report.add_created(report_entry)
                if note.conversation_id:
                    self._catalog.put(note.conversation_id, CatalogEntry(
                        conversation_id=note.conversation_id,
                        path=path,
                        update_time=note.update_time,
                        provider=STANDALONE_PROVIDER,
                    ))
                return "created"

            path = report_entry.path = entry.path
            if entry.update_time >= note.update_time:
                report_entry.reason = REASON_NO_UPDATES
                self._report.add_skipped(report_entry)
                return "skipped"

            existing = await self._storage.read_text(entry.path)
            if existing is None:
                raise NoteMissing(entry.path)
            outcome: Outcome = "skipped"
            if existing != text:
                await self._write(entry.path, text)
                self._report.add_updated(report_entry)
                outcome = "updated"
            else:
                report_entry.reason = REASON_NO_CHANGES
                self._report.add_skipped(report_entry)
            self._catalog.put(entry.conversation_id, entry.model_copy(
                update={"update_time": note.update_time},
            ))
            return outcome
        except Exception as e:
            if entry is None and path is not None:
                self._resolver.release(path)
            return self._fail(note.title, path, note.create_time, note.update_time, e)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _create(self, conversation: Conversation, path: str) -> Outcome:
        await self._write(path, render_note(conversation))
        self._catalog.put(conversation.id, CatalogEntry(
            conversation_id=conversation.id,
            path=path,
            update_time=conversation.update_time,
            provider=conversation.provider,
        ))
        self._report.add_created(self._entry(conversation, path))
        logger.info("Created %s", path)
        return "created"

    async def _update(self, conversation: Conversation, entry: CatalogEntry) -> Outcome:
        existing = await self._storage.read_text(entry.path)
        if existing is None:
            raise NoteMissing(entry.path)

        merged = merge_conversation(existing, conversation)
        if merged.text != existing:
            await self._write(entry.path, merged.text)
            self._report.messages_added += len(merged.added)
            self._report.add_updated(self._entry(
                conversation, entry.path, message_count=len(merged.added),
            ))
            logger.info("Updated %s with %d new message(s)", entry.path, len(merged.added))
            outcome: Outcome = "updated"
        else:
            self._report.add_skipped(self._entry(
                conversation, entry.path, reason=REASON_NO_CHANGES,
            ))
            outcome = "skipped"

        # The revision has been observed whether or not the note changed.
        self._catalog.put(conversation.id, entry.model_copy(
            update={"update_time": conversation.update_time},
        ))
        return outcome

    async def _write(self, path: str, text: str) -> None:
        try:
            await self._storage.write_text(path, text)
        except Exception as e:
            raise NoteWriteFailed(f"Error writing '{path}'", str(e)) from e

    def _fail(
        self,
        title: str,
        path: str | None,
        create_time: float,
        update_time: float,
        exc: Exception,
    ) -> Outcome:
        error = exc if isinstance(exc, ChatNotesError) else UnknownError.wrap(exc)
        if isinstance(exc, ChatNotesError):
            logger.error("Failed to reconcile %r: %s", title, error)
        else:
            logger.exception("Unexpected error reconciling %r", title)
        self._report.add_failed(ReportEntry(
            title=title,
            path=path or "",
            created=format_report_stamp(create_time),
            updated=format_report_stamp(update_time),
            error=str(error),
        ))
        return "failed"

    @staticmethod
    def _entry(
        conversation: Conversation,
        path: str,
        *,
        message_count: int | None = None,
        reason: str | None = None,
    ) -> ReportEntry:
        return ReportEntry(
            title=conversation.display_title,
            path=path,
            created=format_report_stamp(conversation.create_time),
            updated=format_report_stamp(conversation.update_time),
            message_count=(
                message_count if message_count is not None
                else len(conversation.valid_messages())
            ),
            reason=reason,
        )
