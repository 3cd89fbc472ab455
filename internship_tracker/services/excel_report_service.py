"""
Excel Report Service using XlsxWriter.
Generates an Excel workbook with the time log, a progress summary and the
project checklist.
"""

import datetime
from pathlib import Path
from typing import Optional, Union
import logging

import xlsxwriter

from internship_tracker.domain.models import ProjectStatus
from internship_tracker.services.time_ledger import TimeLedger
from internship_tracker.services.project_board import ProjectBoard

logger = logging.getLogger(__name__)

NO_PROJECT_LABEL = "(no project)"


class ExcelReportService:
    """
    Generates .xlsx reports with:
    - Tab 1: Entries (most recent first, hours per session)
    - Tab 2: Summary (KPIs + hours per project chart)
    - Tab 3: Projects (status and task counts)
    """

    def __init__(self, ledger: TimeLedger, board: ProjectBoard):
        self.ledger = ledger
        self.board = board

    def generate_report(self, output_path: Union[str, Path],
                        today: Optional[datetime.date] = None) -> str:
        """
        Generate the Excel report and save it to output_path.
        Returns the path as string.
        """
        output_path = str(output_path)
        workbook = xlsxwriter.Workbook(output_path)

        fmt_header = workbook.add_format({
            'bold': True, 'bg_color': '#4472C4', 'font_color': 'white', 'border': 1
        })
        fmt_date = workbook.add_format({'num_format': 'yyyy-mm-dd', 'border': 1})
        fmt_hours = workbook.add_format({'num_format': '0.00', 'border': 1})
        fmt_text = workbook.add_format({'border': 1})

        ws_entries = workbook.add_worksheet("Entries")
        self._create_entries_sheet(ws_entries, fmt_header, fmt_date, fmt_hours, fmt_text)

        ws_summary = workbook.add_worksheet("Summary")
        self._create_summary_sheet(workbook, ws_summary, today)

        ws_projects = workbook.add_worksheet("Projects")
        self._create_projects_sheet(ws_projects, fmt_header, fmt_date, fmt_text)

        workbook.close()
        logger.info(f"Excel report written to {output_path}")
        return output_path

    def _create_entries_sheet(self, worksheet, fmt_header, fmt_date, fmt_hours, fmt_text):
        headers = ["Date", "Time In", "Time Out", "Hours", "Project", "Description"]
        for col, title in enumerate(headers):
            worksheet.write(0, col, title, fmt_header)

        worksheet.set_column('A:A', 12)
        worksheet.set_column('B:C', 10)
        worksheet.set_column('D:D', 8)
        worksheet.set_column('E:E', 20)
        worksheet.set_column('F:F', 50)
        worksheet.freeze_panes(1, 0)

        row = 0
        for entry in self.ledger.sorted_for_display():
            row += 1
            worksheet.write_datetime(row, 0, datetime.datetime.combine(entry.date, datetime.time()), fmt_date)
            worksheet.write_string(row, 1, entry.time_in, fmt_text)
            worksheet.write_string(row, 2, entry.time_out, fmt_text)
            worksheet.write_number(row, 3, self.ledger.entry_hours(entry), fmt_hours)
            worksheet.write_string(row, 4, entry.project, fmt_text)
            worksheet.write_string(row, 5, entry.description, fmt_text)

        if row:
            worksheet.autofilter(0, 0, row, len(headers) - 1)

    def _create_summary_sheet(self, workbook, worksheet, today):
        """KPI cards and an hours-per-project chart"""
        worksheet.hide_gridlines(2)
        worksheet.set_column('A:A', 2)
        worksheet.set_column('B:C', 24)

        title_fmt = workbook.add_format({
            'bold': True, 'font_size': 20, 'font_color': '#203764'
        })
        label_fmt = workbook.add_format({
            'bold': True, 'font_color': '#666666', 'bg_color': '#F2F2F2', 'border': 1
        })
        value_fmt = workbook.add_format({
            'bold': True, 'font_color': '#203764', 'border': 1, 'num_format': '#,##0.0'
        })
        percent_fmt = workbook.add_format({
            'bold': True, 'font_color': '#203764', 'border': 1, 'num_format': '0.0%'
        })
        date_fmt = workbook.add_format({
            'bold': True, 'font_color': '#203764', 'border': 1, 'num_format': 'mmm d, yyyy'
        })

        worksheet.write('B2', "Internship Progress", title_fmt)

        completion = self.ledger.estimated_completion_date(today)
        worksheet.write('B4', "Goal (hours)", label_fmt)
        worksheet.write_number('C4', self.ledger.goal_hours, value_fmt)
        worksheet.write('B5', "Hours Completed", label_fmt)
        worksheet.write_number('C5', self.ledger.total_hours(), value_fmt)
        worksheet.write('B6', "Hours Remaining", label_fmt)
        worksheet.write_number('C6', self.ledger.remaining_hours(), value_fmt)
        worksheet.write('B7', "Progress", label_fmt)
        worksheet.write_number('C7', self.ledger.progress_percent() / 100, percent_fmt)
        worksheet.write('B8', "Estimated Completion", label_fmt)
        if completion:
            worksheet.write_datetime('C8', datetime.datetime.combine(completion, datetime.time()), date_fmt)
        else:
            worksheet.write('C8', "-", value_fmt)

        by_project = self.ledger.hours_by_project()
        if not by_project:
            return

        # Chart data lives below the cards
        worksheet.write('B11', "Project", label_fmt)
        worksheet.write('C11', "Hours", label_fmt)
        row = 10
        for label, hours in sorted(by_project.items(), key=lambda item: item[1], reverse=True):
            row += 1
            worksheet.write_string(row, 1, label or NO_PROJECT_LABEL)
            worksheet.write_number(row, 2, hours, value_fmt)

        chart = workbook.add_chart({'type': 'bar'})
        chart.add_series({
            'name': 'Hours',
            'categories': ['Summary', 11, 1, row, 1],
            'values': ['Summary', 11, 2, row, 2],
            'fill': {'color': '#4472C4'},
        })
        chart.set_title({'name': 'Hours per Project'})
        chart.set_legend({'none': True})
        worksheet.insert_chart('E4', chart)

    def _create_projects_sheet(self, worksheet, fmt_header, fmt_date, fmt_text):
        headers = ["Project", "Status", "Tasks", "Completed", "Next Deadline"]
        for col, title in enumerate(headers):
            worksheet.write(0, col, title, fmt_header)
        worksheet.set_column('A:A', 30)
        worksheet.set_column('B:E', 14)

        row = 0
        for status in (ProjectStatus.IN_PROGRESS, ProjectStatus.COMPLETED):
            for project in self.board.projects_by_status(status):
                row += 1
                total, done = self.board.task_counts(project.id)
                open_deadlines = [t.deadline for t in self.board.tasks_for_project(project.id) if not t.completed]

                worksheet.write_string(row, 0, project.name, fmt_text)
                worksheet.write_string(row, 1, project.status.value, fmt_text)
                worksheet.write_number(row, 2, total, fmt_text)
                worksheet.write_number(row, 3, done, fmt_text)
                if open_deadlines:
                    next_deadline = datetime.datetime.combine(min(open_deadlines), datetime.time())
                    worksheet.write_datetime(row, 4, next_deadline, fmt_date)
                else:
                    worksheet.write_blank(row, 4, None, fmt_text)
