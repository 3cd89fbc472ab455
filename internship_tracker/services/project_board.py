"""
Project Board - projects and their task checklists.

Every task belongs to exactly one project. Deleting a project deletes its
tasks in the same call; nothing else cleans them up.
"""

import datetime
import logging
from typing import Iterable, List, Optional, Tuple

from internship_tracker.domain.ids import IdGenerator
from internship_tracker.domain.models import (
    Project,
    ProjectStatus,
    Task,
    TaskDraft,
    PROJECTS_KEY,
    TASKS_KEY,
)
from internship_tracker.infra.gateway import PersistenceGateway, load_collection, save_collection

logger = logging.getLogger(__name__)


class ProjectBoard:
    """
    Owns the project and task collections.

    Both collections are persisted independently, each right after it changes.
    """

    def __init__(self, gateway: PersistenceGateway, id_generator: Optional[IdGenerator] = None):
        self.gateway = gateway
        self.ids = id_generator or IdGenerator()
        self.projects: List[Project] = []
        self.tasks: List[Task] = []
        self._loaded = False

    async def load(self) -> bool:
        """Adopt the stored projects and tasks (first call only)"""
        if self._loaded:
            return False
        self._loaded = True

        projects = await load_collection(self.gateway, PROJECTS_KEY, Project)
        tasks = await load_collection(self.gateway, TASKS_KEY, Task)
        if projects is not None:
            self.projects = projects
        if tasks is not None:
            self.tasks = tasks
        self.ids.observe(p.id for p in self.projects)
        self.ids.observe(t.id for t in self.tasks)
        logger.info(f"Loaded {len(self.projects)} projects and {len(self.tasks)} tasks")
        return projects is not None or tasks is not None

    async def _persist_projects(self) -> bool:
        return await save_collection(self.gateway, PROJECTS_KEY, self.projects)

    async def _persist_tasks(self) -> bool:
        return await save_collection(self.gateway, TASKS_KEY, self.tasks)

    # Projects

    def get_project(self, project_id: int) -> Optional[Project]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    async def add_project(self, name: Optional[str]) -> Optional[Project]:
        """Create an in-progress project; blank names are ignored"""
        if not name or not name.strip():
            return None

        project = Project(
            id=self.ids.next_id(),
            name=name.strip(),
            status=ProjectStatus.IN_PROGRESS,
            created_at=datetime.datetime.now(),
        )
        self.projects.append(project)
        await self._persist_projects()
        return project

    async def set_project_status(self, project_id: int, status: ProjectStatus) -> bool:
        project = self.get_project(project_id)
        if project is None:
            return False
        project.status = ProjectStatus(status)
        await self._persist_projects()
        return True

    async def complete_project(self, project_id: int) -> bool:
        return await self.set_project_status(project_id, ProjectStatus.COMPLETED)

    async def reopen_project(self, project_id: int) -> bool:
        return await self.set_project_status(project_id, ProjectStatus.IN_PROGRESS)

    async def delete_project(self, project_id: int) -> bool:
        """Remove a project together with all of its tasks"""
        if self.get_project(project_id) is None:
            return False

        self.projects = [p for p in self.projects if p.id != project_id]
        remaining_tasks = [t for t in self.tasks if t.project_id != project_id]
        removed = len(self.tasks) - len(remaining_tasks)
        self.tasks = remaining_tasks

        await self._persist_projects()
        await self._persist_tasks()
        logger.debug(f"Deleted project {project_id} and {removed} task(s)")
        return True

    def projects_by_status(self, status: ProjectStatus) -> List[Project]:
        return [p for p in self.projects if p.status == status]

    # Tasks

    def get_task(self, task_id: int) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    async def add_task(self, project_id: Optional[int], task: Optional[str],
                       deadline: Optional[datetime.date]) -> Optional[Task]:
        """
        Add a task to a project.

        Returns None unless project, task text and deadline are all given and
        the project exists.
        """
        draft = TaskDraft(project_id=project_id, task=task, deadline=deadline)
        if not draft.is_complete() or self.get_project(project_id) is None:
            return None

        new_task = Task(
            id=self.ids.next_id(),
            project_id=project_id,
            task=task.strip(),
            deadline=deadline,
            completed=False,
        )
        self.tasks.append(new_task)
        await self._persist_tasks()
        return new_task

    async def toggle_task(self, task_id: int) -> bool:
        task = self.get_task(task_id)
        if task is None:
            return False
        task.completed = not task.completed
        await self._persist_tasks()
        return True

    async def update_task(self, task_id: int, draft: TaskDraft) -> bool:
        """Replace a task with the edited draft, keeping its id"""
        if not draft.is_complete() or self.get_project(draft.project_id) is None:
            return False
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                self.tasks[index] = Task(
                    id=task_id,
                    project_id=draft.project_id,
                    task=draft.task.strip(),
                    deadline=draft.deadline,
                    completed=draft.completed,
                )
                await self._persist_tasks()
                return True
        return False

    async def delete_task(self, task_id: int) -> bool:
        if self.get_task(task_id) is None:
            return False
        self.tasks = [t for t in self.tasks if t.id != task_id]
        await self._persist_tasks()
        return True

    def tasks_for_project(self, project_id: int) -> List[Task]:
        return [t for t in self.tasks if t.project_id == project_id]

    def task_counts(self, project_id: int) -> Tuple[int, int]:
        """(total, completed) tasks of a project"""
        tasks = self.tasks_for_project(project_id)
        return len(tasks), sum(1 for t in tasks if t.completed)

    async def replace_all(self, projects: Iterable[Project], tasks: Iterable[Task]) -> None:
        """Swap in new collections (used by backup restore)"""
        self.projects = list(projects)
        self.tasks = list(tasks)
        self.ids.observe(p.id for p in self.projects)
        self.ids.observe(t.id for t in self.tasks)
        await self._persist_projects()
        await self._persist_tasks()
