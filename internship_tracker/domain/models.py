"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
Snapshots are loaded back from storage as plain JSON. Pydantic validates them
on the way in and serializes them (with the camelCase field names the stored
snapshots use) on the way out.
"""

import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


GOAL_HOURS = 540.0

# Snapshot keys, one per collection
ENTRIES_KEY = "internship-entries"
TASKS_KEY = "internship-todos"
PROJECTS_KEY = "internship-projects"


class ProjectStatus(str, Enum):
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class SnapshotModel(BaseModel):
    """Base for records stored in a snapshot"""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    def to_record(self) -> dict:
        """Flat mapping written to the snapshot store"""
        return self.model_dump(mode="json", by_alias=True)


class Entry(SnapshotModel):
    """
    One logged work session.

    Times are kept as the "HH:MM" text the user typed. A malformed value is
    not rejected here; it simply contributes zero hours.
    """
    id: int
    date: datetime.date
    time_in: str = Field(..., alias="timeIn")
    time_out: str = Field(..., alias="timeOut")
    project: str = ""
    description: str = ""


class Project(SnapshotModel):
    """A named unit of work holding zero or more tasks"""
    id: int
    name: str = Field(..., min_length=1)
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.now, alias="createdAt")


class Task(SnapshotModel):
    """A to-do item with a deadline, always attached to a project"""
    id: int
    project_id: int = Field(..., alias="projectId")
    task: str = Field(..., min_length=1)
    deadline: datetime.date
    completed: bool = False


class EntryDraft(BaseModel):
    """
    Form state for a new or edited entry.

    Owned by the presentation layer and handed to the ledger on submit.
    """
    date: Optional[datetime.date] = None
    time_in: Optional[str] = None
    time_out: Optional[str] = None
    project: str = ""
    description: str = ""

    def is_complete(self) -> bool:
        return bool(self.date and _filled(self.time_in) and _filled(self.time_out))


class TaskDraft(BaseModel):
    """Form state for a new or edited task"""
    project_id: Optional[int] = None
    task: Optional[str] = None
    deadline: Optional[datetime.date] = None
    completed: bool = False

    def is_complete(self) -> bool:
        return bool(self.project_id is not None and _filled(self.task) and self.deadline)


class TrackerPreferences(BaseModel):
    """
    User preferences.

    This allows users to customize behavior without touching code.
    """
    model_config = ConfigDict(from_attributes=True)

    goal_hours: float = Field(default=GOAL_HOURS, gt=0, description="Target internship hours")
    date_format: str = Field(default="%b %d, %Y", description="strftime format for displayed dates")

    # Backup settings
    backup_directory: Optional[str] = Field(default=None, description="Custom backup directory path")
    backup_retention_count: int = Field(default=5, ge=1, description="Number of backup files to keep")


def _filled(value: Optional[str]) -> bool:
    return bool(value and value.strip())
