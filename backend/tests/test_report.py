"""Tests for the activity report."""

from chatnotes.importer.report import ActivityReport, ReportEntry, write_report
from chatnotes.notes.header import split_note
from tests.fixtures import InMemoryStorage

TS = 1700000000.0


def _entry(title="Trip", path="Chats/2023/11/Trip.md", **kwargs):
    return ReportEntry(
        title=title,
        path=path,
        created="2023-11-14 22:13:20",
        updated="2023-11-14 22:13:20",
        **kwargs,
    )


def _report():
    report = ActivityReport(source_name="export.zip")
    report.processed = 4
    report.messages_added = 2
    report.add_created(_entry(message_count=3))
    report.add_updated(_entry("Other", "Chats/2023/11/Other.md", message_count=2))
    report.add_skipped(_entry("Old", "Chats/2023/11/Old.md", reason="No updates"))
    report.add_failed(_entry("Broken", "", error="Note not found: x.md"))
    return report


class TestActivityReport:
    def test_has_errors(self):
        report = ActivityReport(source_name="a.zip")
        assert not report.has_errors()
        report.add_error("Error processing archive", "bad")
        assert report.has_errors()

    def test_header_counts(self):
        header, _ = split_note(_report().render(TS))
        assert header.get("importdate") == "2023-11-14 22:13:20"
        assert header.get("archive") == "export.zip"
        assert header.get("totalSuccessfulImports") == "1"
        assert header.get("totalUpdatedImports") == "1"
        assert header.get("totalSkippedImports") == "1"
        assert header.get("totalFailedImports") == "1"

    def test_summary(self):
        text = _report().render(TS)
        assert "- Processed: export.zip\n" in text
        assert "- [[#Created notes]]: 1 out of 4 conversations\n" in text
        assert "- [[#Updated notes]]: 1 with a total of 2 new messages\n" in text
        assert "- Global errors: 0\n" in text

    def test_tables(self):
        text = _report().render(TS)
        assert "| ✨ | [[Chats/2023/11/Trip.md\\|Trip]] | 2023-11-14 22:13:20 | 2023-11-14 22:13:20 | 3 |" in text
        assert "| 🔄 | [[Chats/2023/11/Other.md\\|Other]] |" in text
        assert "| No updates |" in text
        assert "| 🚫 | Broken | " in text
        assert "| Note not found: x.md |" in text
        assert "## Global errors" not in text

    def test_empty_sections_omitted(self):
        text = ActivityReport(source_name="a.zip").render(TS)
        assert "## Created notes" not in text
        assert "## Failed imports" not in text
        assert "- Created notes: 0 out of 0 conversations\n" in text

    def test_global_errors_and_pipes_escaped(self):
        report = ActivityReport(source_name="a.zip")
        report.add_error("Error processing archive", "a | b")
        text = report.render(TS)
        assert "| ⚠️ | Error processing archive | a \\| b |" in text


class TestWriteReport:
    async def test_written_under_reports_folder(self):
        storage = InMemoryStorage()
        path = await write_report(storage, _report(), "Chats", generated_at=TS)
        assert path == "Chats/Reports/20231114 - import report.md"
        assert storage.files[path].startswith("---\nimportdate: 2023-11-14 22:13:20\n")

    async def test_existing_report_not_overwritten(self):
        storage = InMemoryStorage()
        first = await write_report(storage, _report(), "Chats", generated_at=TS)
        second = await write_report(storage, _report(), "Chats", generated_at=TS)
        third = await write_report(storage, _report(), "Chats", generated_at=TS)
        assert first != second != third
        assert second == "Chats/Reports/20231114-1 - import report.md"
        assert third == "Chats/Reports/20231114-2 - import report.md"

    async def test_failure_returns_none(self):
        storage = InMemoryStorage()
        storage.fail_folders.add("Chats/Reports")
        assert await write_report(storage, _report(), "Chats", generated_at=TS) is None
        assert storage.files == {}
