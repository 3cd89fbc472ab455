"""
Tests for the dashboard, backup and Excel report services.
"""

import datetime
import json
import zipfile
import pytest
import pytest_asyncio

from internship_tracker.domain.models import EntryDraft, ENTRIES_KEY, TASKS_KEY
from internship_tracker.services import (
    TimeLedger,
    ProjectBoard,
    DashboardService,
    BackupService,
    ExcelReportService,
)


TODAY = datetime.date(2024, 1, 10)


@pytest_asyncio.fixture
async def populated(json_gateway):
    """Ledger and board with two sessions, two projects and three tasks"""
    ledger = TimeLedger(json_gateway)
    board = ProjectBoard(json_gateway)

    await ledger.add_entry(EntryDraft(date=datetime.date(2024, 1, 1), time_in="09:00", time_out="17:00",
                                      project="Research", description="User interviews"))
    await ledger.add_entry(EntryDraft(date=datetime.date(2024, 1, 3), time_in="09:00", time_out="13:00"))

    research = await board.add_project("Research")
    handoff = await board.add_project("Handoff")
    first = await board.add_task(research.id, "Interview users", datetime.date(2024, 1, 20))
    await board.add_task(research.id, "Synthesize notes", datetime.date(2024, 1, 25))
    await board.add_task(handoff.id, "Write docs", datetime.date(2024, 2, 1))
    await board.toggle_task(first.id)
    await board.complete_project(handoff.id)
    return ledger, board


class TestDashboard:

    @pytest.mark.asyncio
    async def test_summary_values(self, populated):
        ledger, board = populated
        summary = DashboardService(ledger, board).build(today=TODAY)

        assert summary.hours_completed == "12.0"
        assert summary.hours_remaining == "528.0"
        assert summary.progress == "2.2%"
        assert summary.progress_label == "12.0 / 540 hrs"
        assert summary.estimated_completion == "Apr 07, 2024"

    @pytest.mark.asyncio
    async def test_entry_rows_in_display_order(self, populated):
        ledger, board = populated
        summary = DashboardService(ledger, board).build(today=TODAY)

        assert [row.date for row in summary.entries] == ["Jan 03, 2024", "Jan 01, 2024"]
        assert summary.entries[0].hours == "4.00h"
        assert summary.entries[1].time_range == "09:00 - 17:00"
        assert summary.entries[1].project == "Research"

    @pytest.mark.asyncio
    async def test_project_cards(self, populated):
        ledger, board = populated
        summary = DashboardService(ledger, board).build(today=TODAY)

        assert [c.name for c in summary.in_progress] == ["Research"]
        assert summary.in_progress[0].task_summary == "2 task(s) • 1 completed"
        assert [c.name for c in summary.completed] == ["Handoff"]
        assert summary.completed[0].task_summary == "1 task(s) • 0 completed"

    def test_empty_dashboard(self, json_gateway):
        summary = DashboardService(TimeLedger(json_gateway), ProjectBoard(json_gateway)).build(today=TODAY)

        assert summary.hours_completed == "0.0"
        assert summary.progress == "0.0%"
        assert summary.estimated_completion is None
        assert summary.entries == []


class TestBackups:

    @pytest.mark.asyncio
    async def test_create_and_restore_backup(self, populated, tmp_path, json_gateway):
        ledger, board = populated
        service = BackupService(ledger, board)
        backup_file = service.create_backup(str(tmp_path / "backups"))

        data = json.loads(backup_file.read_text(encoding="utf-8"))
        assert data["version"] == "1.0"
        assert len(data["data"]["entries"]) == 2
        assert data["data"]["tasks"][0]["projectId"] == board.projects[0].id

        original_entries = list(ledger.entries)
        original_projects = [p.model_copy() for p in board.projects]
        original_tasks = list(board.tasks)
        await ledger.reset()
        await board.delete_project(board.projects[0].id)

        restored = await service.restore_backup(backup_file)

        assert restored == {"entries": 2, "projects": 2, "tasks": 3}
        assert ledger.entries == original_entries
        assert board.projects == original_projects
        assert board.tasks == original_tasks
        assert len(await json_gateway.load(ENTRIES_KEY)) == 2
        assert len(await json_gateway.load(TASKS_KEY)) == 3

    @pytest.mark.asyncio
    async def test_restore_skips_invalid_and_orphaned_records(self, json_gateway, tmp_path):
        backup_file = tmp_path / "manual.json"
        backup_file.write_text(json.dumps({
            "version": "1.0",
            "data": {
                "entries": [
                    {"id": 1, "date": "2024-01-01", "timeIn": "09:00", "timeOut": "17:00"},
                    {"id": 2, "date": "yesterday", "timeIn": "09:00", "timeOut": "17:00"},
                ],
                "projects": [
                    {"id": 10, "name": "Research", "status": "in-progress", "createdAt": "2024-01-01T08:00:00"},
                ],
                "tasks": [
                    {"id": 20, "projectId": 10, "task": "Interview", "deadline": "2024-01-20", "completed": False},
                    {"id": 21, "projectId": 99, "task": "Orphan", "deadline": "2024-01-20", "completed": False},
                ],
            }
        }), encoding="utf-8")
        ledger = TimeLedger(json_gateway)
        board = ProjectBoard(json_gateway)

        restored = await BackupService(ledger, board).restore_backup(backup_file)

        assert restored == {"entries": 1, "projects": 1, "tasks": 1}
        assert [t.id for t in board.tasks] == [20]

    @pytest.mark.asyncio
    async def test_restore_rejects_bad_files(self, json_gateway, tmp_path):
        service = BackupService(TimeLedger(json_gateway), ProjectBoard(json_gateway))

        with pytest.raises(FileNotFoundError):
            await service.restore_backup(tmp_path / "missing.json")

        not_json = tmp_path / "broken.json"
        not_json.write_text("{", encoding="utf-8")
        with pytest.raises(ValueError):
            await service.restore_backup(not_json)

        wrong_shape = tmp_path / "wrong.json"
        wrong_shape.write_text('{"entries": []}', encoding="utf-8")
        with pytest.raises(ValueError):
            await service.restore_backup(wrong_shape)

        null_data = tmp_path / "null_data.json"
        null_data.write_text('{"version": "1.0", "data": null}', encoding="utf-8")
        with pytest.raises(ValueError):
            await service.restore_backup(null_data)

    def test_list_and_cleanup_backups(self, json_gateway, tmp_path):
        service = BackupService(TimeLedger(json_gateway), ProjectBoard(json_gateway))
        for stamp in ["2024-01-01_090000", "2024-01-02_090000", "2024-01-03_090000"]:
            (tmp_path / f"internship_backup_{stamp}.json").write_text("{}", encoding="utf-8")
        (tmp_path / "internship_backup_garbage.json").write_text("{}", encoding="utf-8")

        backups = service.list_backups(str(tmp_path))
        assert [b["filename"] for b in backups] == [
            "internship_backup_2024-01-03_090000.json",
            "internship_backup_2024-01-02_090000.json",
            "internship_backup_2024-01-01_090000.json",
        ]
        assert backups[0]["size_human"] == "2.0 B"

        assert service.cleanup_old_backups(str(tmp_path), keep_count=1) == 2
        assert [b["filename"] for b in service.list_backups(str(tmp_path))] == [
            "internship_backup_2024-01-03_090000.json"
        ]


class TestExcelReport:

    @pytest.mark.asyncio
    async def test_report_has_all_sheets(self, populated, tmp_path):
        ledger, board = populated
        output = tmp_path / "report.xlsx"

        result = ExcelReportService(ledger, board).generate_report(output, today=TODAY)

        assert result == str(output)
        with zipfile.ZipFile(output) as archive:
            workbook_xml = archive.read("xl/workbook.xml").decode("utf-8")
            shared = archive.read("xl/sharedStrings.xml").decode("utf-8")
            names = archive.namelist()
        for sheet in ("Entries", "Summary", "Projects"):
            assert f'name="{sheet}"' in workbook_xml
        assert "User interviews" in shared
        assert "Handoff" in shared
        assert any(name.startswith("xl/charts/") for name in names)

    def test_report_for_empty_tracker(self, json_gateway, tmp_path):
        output = tmp_path / "empty.xlsx"

        ExcelReportService(TimeLedger(json_gateway), ProjectBoard(json_gateway)).generate_report(output)

        with zipfile.ZipFile(output) as archive:
            assert not any(name.startswith("xl/charts/") for name in archive.namelist())

    @pytest.mark.asyncio
    async def test_free_text_stays_text(self, json_gateway, tmp_path):
        ledger = TimeLedger(json_gateway)
        board = ProjectBoard(json_gateway)
        await ledger.add_entry(EntryDraft(date=datetime.date(2024, 1, 1), time_in="09:00", time_out="17:00",
                                          project="=SUM(A1)", description="=fix login page"))
        await board.add_project("=HYPERLINK(\"http://example.com\")")
        output = tmp_path / "text.xlsx"

        ExcelReportService(ledger, board).generate_report(output, today=TODAY)

        with zipfile.ZipFile(output) as archive:
            sheets = [archive.read(f"xl/worksheets/sheet{n}.xml").decode("utf-8") for n in (1, 2, 3)]
            shared = archive.read("xl/sharedStrings.xml").decode("utf-8")
        assert not any("<f>" in sheet for sheet in sheets)
        assert "=fix login page" in shared
        assert "=SUM(A1)" in shared
