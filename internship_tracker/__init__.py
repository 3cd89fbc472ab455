"""
Internship Tracker - hours and task tracking engine.

Records daily work sessions against a fixed hour goal, projects a completion
date and keeps a project/task checklist, persisted as key-value snapshots.
"""

from .tracker import InternshipTracker

__all__ = ["InternshipTracker"]
