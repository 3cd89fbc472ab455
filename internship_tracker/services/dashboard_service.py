"""
Dashboard Service - display values for the presentation layer.

Turns ledger and board state into the strings a page shows: rounded hour
figures, the progress label, formatted dates and per-project task counts.
"""

import datetime
from typing import List, Optional
from pydantic import BaseModel

from internship_tracker.domain.models import Entry, Project, ProjectStatus
from internship_tracker.services.time_ledger import TimeLedger
from internship_tracker.services.project_board import ProjectBoard


class EntryRow(BaseModel):
    id: int
    date: str
    time_range: str
    hours: str
    project: str
    description: str


class ProjectCard(BaseModel):
    id: int
    name: str
    status: ProjectStatus
    task_summary: str


class DashboardSummary(BaseModel):
    hours_completed: str
    hours_remaining: str
    progress: str
    progress_label: str
    progress_percent: float
    estimated_completion: Optional[str] = None
    entries: List[EntryRow] = []
    in_progress: List[ProjectCard] = []
    completed: List[ProjectCard] = []


def format_hours(hours: float, decimals: int = 1) -> str:
    return f"{hours:.{decimals}f}"


def format_date(value: datetime.date, date_format: str = "%b %d, %Y") -> str:
    return value.strftime(date_format)


class DashboardService:
    """Builds the dashboard view model from the engine state"""

    def __init__(self, ledger: TimeLedger, board: ProjectBoard, date_format: str = "%b %d, %Y"):
        self.ledger = ledger
        self.board = board
        self.date_format = date_format

    def entry_row(self, entry: Entry) -> EntryRow:
        return EntryRow(
            id=entry.id,
            date=format_date(entry.date, self.date_format),
            time_range=f"{entry.time_in} - {entry.time_out}",
            hours=f"{format_hours(self.ledger.entry_hours(entry), 2)}h",
            project=entry.project,
            description=entry.description,
        )

    def project_card(self, project: Project) -> ProjectCard:
        total, done = self.board.task_counts(project.id)
        return ProjectCard(
            id=project.id,
            name=project.name,
            status=project.status,
            task_summary=f"{total} task(s) • {done} completed",
        )

    def build(self, today: Optional[datetime.date] = None) -> DashboardSummary:
        total = self.ledger.total_hours()
        percent = self.ledger.progress_percent()
        completion = self.ledger.estimated_completion_date(today)

        return DashboardSummary(
            hours_completed=format_hours(total),
            hours_remaining=format_hours(self.ledger.remaining_hours()),
            progress=f"{format_hours(percent)}%",
            progress_label=f"{format_hours(total)} / {self.ledger.goal_hours:g} hrs",
            progress_percent=percent,
            estimated_completion=format_date(completion, self.date_format) if completion else None,
            entries=[self.entry_row(e) for e in self.ledger.sorted_for_display()],
            in_progress=[self.project_card(p) for p in self.board.projects_by_status(ProjectStatus.IN_PROGRESS)],
            completed=[self.project_card(p) for p in self.board.projects_by_status(ProjectStatus.COMPLETED)],
        )
