"""Domain layer - Pure business entities and logic"""

from .models import (
    Entry,
    EntryDraft,
    Project,
    ProjectStatus,
    Task,
    TaskDraft,
    TrackerPreferences,
    GOAL_HOURS,
    ENTRIES_KEY,
    TASKS_KEY,
    PROJECTS_KEY,
)
from .ids import IdGenerator

__all__ = [
    "Entry",
    "EntryDraft",
    "Project",
    "ProjectStatus",
    "Task",
    "TaskDraft",
    "TrackerPreferences",
    "GOAL_HOURS",
    "ENTRIES_KEY",
    "TASKS_KEY",
    "PROJECTS_KEY",
    "IdGenerator",
]
