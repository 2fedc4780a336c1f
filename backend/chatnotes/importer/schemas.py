"""Pydantic schemas for the import API."""

from typing import Literal

from pydantic import BaseModel

from chatnotes.importer.report import ActivityReport

BatchStatus = Literal["completed", "failed", "cancelled"]

NOTICE_OK = "Import completed. Report created in the archive folder."
NOTICE_ERRORS = "An error occurred during import. Please check the report for details."
NOTICE_REPORT_FAILED = "Failed to create the import report. Check the logs for details."
NOTICE_CANCELLED = "Import cancelled."


class BatchOutcome(BaseModel):
    source_name: str
    status: BatchStatus
    archive_digest: str | None = None
    already_imported: bool = False
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    messages_added: int = 0
    global_errors: list[str] = []
    report_path: str | None = None
    notice: str

    @classmethod
    def from_report(
        cls,
        report: ActivityReport,
        *,
        status: BatchStatus,
        report_path: str | None,
        archive_digest: str | None = None,
        already_imported: bool = False,
    ) -> "BatchOutcome":
        if status == "cancelled":
            notice = NOTICE_CANCELLED
        elif report_path is None:
            notice = NOTICE_REPORT_FAILED
        elif report.has_errors():
            notice = NOTICE_ERRORS
        else:
            notice = NOTICE_OK
        return cls(
            source_name=report.source_name,
            status=status,
            archive_digest=archive_digest,
            already_imported=already_imported,
            processed=report.processed,
            created=len(report.created),
            updated=len(report.updated),
            skipped=len(report.skipped),
            failed=len(report.failed),
            messages_added=report.messages_added,
            global_errors=[f"{e.message}: {e.details}" for e in report.global_errors],
            report_path=report_path,
            notice=notice,
        )
