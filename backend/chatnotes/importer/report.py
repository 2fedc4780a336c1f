"""Activity Report: per-batch outcome accumulator and its markdown rendering."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from chatnotes.notes.header import NoteHeader
from chatnotes.storage.base import NoteStorage
from chatnotes.utils.timefmt import format_report_stamp, format_timestamp, now

logger = logging.getLogger(__name__)

REPORTS_FOLDER = "Reports"

LEGEND = "✨ Created | 🔄 Updated | ⏭️ Skipped | 🚫 Failed | ⚠️ Global Errors"


@dataclass
class ReportEntry:
    title: str
    path: str
    created: str
    updated: str
    message_count: int | None = None
    reason: str | None = None
    error: str | None = None


@dataclass
class GlobalError:
    message: str
    details: str


@dataclass
class ActivityReport:
    """Outcome accumulator for one batch (one archive or one single-note import)."""

    source_name: str
    created: list[ReportEntry] = field(default_factory=list)
    updated: list[ReportEntry] = field(default_factory=list)
    skipped: list[ReportEntry] = field(default_factory=list)
    failed: list[ReportEntry] = field(default_factory=list)
    global_errors: list[GlobalError] = field(default_factory=list)
    processed: int = 0
    messages_added: int = 0

    def add_created(self, entry: ReportEntry) -> None:
        self.created.append(entry)

    def add_updated(self, entry: ReportEntry) -> None:
        self.updated.append(entry)

    def add_skipped(self, entry: ReportEntry) -> None:
        self.skipped.append(entry)

    def add_failed(self, entry: ReportEntry) -> None:
        self.failed.append(entry)

    def add_error(self, message: str, details: str) -> None:
        self.global_errors.append(GlobalError(message=message, details=details))

    def has_errors(self) -> bool:
        return bool(self.failed or self.global_errors)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, generated_at: float | None = None) -> str:
        stamp = format_report_stamp(generated_at if generated_at is not None else now())
        header = NoteHeader.from_pairs([
            ("importdate", stamp),
            ("archive", self.source_name),
            ("totalSuccessfulImports", str(len(self.created))),
            ("totalUpdatedImports", str(len(self.updated))),
            ("totalSkippedImports", str(len(self.skipped))),
            ("totalFailedImports", str(len(self.failed))),
        ])
        parts = [
            header.render(),
            "\n# Chat import report\n\n",
            self._render_summary(),
            "## Legend\n",
            LEGEND + "\n\n",
        ]
        if self.created:
            parts.append(_table("Created notes", "✨", self.created, "Messages", _messages))
        if self.updated:
            parts.append(_table("Updated notes", "🔄", self.updated, "Added messages", _messages))
        if self.skipped:
            parts.append(_table("Skipped notes", "⏭️", self.skipped, "Reason", lambda e: e.reason))
        if self.failed:
            parts.append(_table("Failed imports", "🚫", self.failed, "Error", lambda e: e.error))
        if self.global_errors:
            parts.append(_error_table(self.global_errors))
        return "".join(parts)

    def _render_summary(self) -> str:
        def label(text: str, count: int) -> str:
            return f"[[#{text}]]" if count > 0 else text

        return (
            "## Summary\n"
            f"- Processed: {self.source_name}\n"
            f"- {label('Created notes', len(self.created))}: "
            f"{len(self.created)} out of {self.processed} conversations\n"
            f"- {label('Updated notes', len(self.updated))}: "
            f"{len(self.updated)} with a total of {self.messages_added} new messages\n"
            f"- {label('Skipped notes', len(self.skipped))}: "
            f"{len(self.skipped)} out of {self.processed} conversations\n"
            f"- {label('Failed imports', len(self.failed))}: {len(self.failed)}\n"
            f"- {label('Global errors', len(self.global_errors))}: {len(self.global_errors)}\n\n"
        )


def _messages(entry: ReportEntry) -> str | None:
    return str(entry.message_count) if entry.message_count is not None else None


def _cell(value: str | None) -> str:
    if not value:
        return "-"
    return " ".join(value.split()).replace("|", "\\|")


def _table(
    title: str,
    emoji: str,
    entries: list[ReportEntry],
    last_header: str,
    last_value: Callable[[ReportEntry], str | None],
) -> str:
    headers = ["Title", "Created", "Updated", last_header]
    lines = [
        f"## {title}",
        "",
        "| | " + " | ".join(headers) + " |",
        "|---" + "|:---:" * len(headers) + "|",
    ]
    for entry in entries:
        link = f"[[{entry.path}\\|{_cell(entry.title)}]]" if entry.path else _cell(entry.title)
        row = [link, _cell(entry.created), _cell(entry.updated), _cell(last_value(entry))]
        lines.append(f"| {emoji} | " + " | ".join(row) + " |")
    return "\n".join(lines) + "\n\n\n"


def _error_table(errors: list[GlobalError]) -> str:
    lines = ["## Global errors", "", "| | Error | Details |", "|---|:---|:---|"]
    for err in errors:
        lines.append(f"| ⚠️ | {_cell(err.message)} | {_cell(err.details)} |")
    return "\n".join(lines) + "\n\n\n"


async def write_report(
    storage: NoteStorage,
    report: ActivityReport,
    archive_folder: str,
    *,
    generated_at: float | None = None,
) -> str | None:
    """Render and write the report. Returns its path, or None if it could not be saved.

    Never raises: a report failure must not fail the import it describes.
    """
    generated_at = generated_at if generated_at is not None else now()
    folder = f"{archive_folder.rstrip('/')}/{REPORTS_FOLDER}"
    prefix = format_timestamp(generated_at, "prefix")
    try:
        await storage.ensure_folder(folder)
        path = f"{folder}/{prefix} - import report.md"
        counter = 1
        while await storage.exists(path):
            path = f"{folder}/{prefix}-{counter} - import report.md"
            counter += 1
        await storage.write_text(path, report.render(generated_at))
    except Exception:
        logger.exception("Failed to write import report to %s", folder)
        return None
    logger.info("Import report written to %s", path)
    return path
