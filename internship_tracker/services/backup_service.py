"""
Backup Service - Handles export and import of all tracker data.

Architecture Decision: Why JSON for backups?
- Human-readable format for easy inspection and manual edits
- Same record layout as the stored snapshots
- Easy to restore partial data
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, List
import logging

from pydantic import ValidationError

from internship_tracker.domain.models import Entry, Project, Task
from internship_tracker.services.time_ledger import TimeLedger
from internship_tracker.services.project_board import ProjectBoard

logger = logging.getLogger(__name__)


class BackupService:
    """
    Handles backup (export) and restore (import) of entries, projects and tasks.

    Backup naming convention: internship_backup_YYYY-MM-DD_HHMMSS.json
    """

    BACKUP_PREFIX = "internship_backup_"
    BACKUP_EXTENSION = ".json"
    FORMAT_VERSION = "1.0"

    def __init__(self, ledger: TimeLedger, board: ProjectBoard):
        self.ledger = ledger
        self.board = board

    def _get_default_backup_dir(self) -> Path:
        """Get the default backup directory based on OS"""
        if os.name == 'nt':  # Windows
            base = Path(os.getenv('APPDATA')) / 'InternshipTracker'
        else:  # Linux/Mac
            base = Path.home() / '.local' / 'share' / 'internshiptracker'

        backup_dir = base / 'backups'
        backup_dir.mkdir(parents=True, exist_ok=True)
        return backup_dir

    def _get_backup_dir(self, custom_dir: Optional[str] = None) -> Path:
        """Get the backup directory, using custom or default"""
        if custom_dir and str(custom_dir).strip():
            backup_dir = Path(custom_dir)
            backup_dir.mkdir(parents=True, exist_ok=True)
            return backup_dir
        return self._get_default_backup_dir()

    def _generate_backup_filename(self) -> str:
        """Generate a timestamped backup filename"""
        timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
        return f"{self.BACKUP_PREFIX}{timestamp}{self.BACKUP_EXTENSION}"

    def _parse_backup_date(self, filename: str) -> Optional[datetime]:
        """Extract datetime from backup filename"""
        try:
            date_part = filename.replace(self.BACKUP_PREFIX, "").replace(self.BACKUP_EXTENSION, "")
            return datetime.strptime(date_part, "%Y-%m-%d_%H%M%S")
        except ValueError:
            return None

    def create_backup(self, backup_dir: Optional[str] = None) -> Path:
        """
        Write every collection to a new backup file.

        Args:
            backup_dir: Optional custom backup directory

        Returns:
            Path to the created backup file
        """
        backup_file = self._get_backup_dir(backup_dir) / self._generate_backup_filename()

        backup_data = {
            "version": self.FORMAT_VERSION,
            "created_at": datetime.now().isoformat(),
            "app_name": "InternshipTracker",
            "data": {
                "entries": [e.to_record() for e in self.ledger.entries],
                "projects": [p.to_record() for p in self.board.projects],
                "tasks": [t.to_record() for t in self.board.tasks],
            }
        }

        with open(backup_file, 'w', encoding='utf-8') as f:
            json.dump(backup_data, f, indent=2, ensure_ascii=False)

        logger.info(f"Backup created: {backup_file}")
        return backup_file

    async def restore_backup(self, backup_file: Path) -> Dict[str, int]:
        """
        Restore data from a backup file.

        This performs a full replace: current entries, projects and tasks are
        discarded. Invalid records are skipped, as are tasks whose project is
        not part of the backup.

        Args:
            backup_file: Path to the backup file

        Returns:
            Dictionary with counts of restored items
        """
        backup_file = Path(backup_file)
        if not backup_file.exists():
            raise FileNotFoundError(f"Backup file not found: {backup_file}")

        with open(backup_file, 'r', encoding='utf-8') as f:
            try:
                backup_data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid backup file: {e}") from e

        # Validate backup format
        if not isinstance(backup_data, dict) or "version" not in backup_data or "data" not in backup_data:
            raise ValueError("Invalid backup file format")
        if not isinstance(backup_data["data"], dict):
            raise ValueError("Invalid backup file: data section is not an object")

        data = backup_data["data"]
        entries = self._validate_all(Entry, data.get("entries", []), "entry")
        projects = self._validate_all(Project, data.get("projects", []), "project")

        project_ids = {p.id for p in projects}
        tasks = []
        for task in self._validate_all(Task, data.get("tasks", []), "task"):
            if task.project_id not in project_ids:
                logger.warning(f"Skipping task {task.id}: project {task.project_id} not in backup")
                continue
            tasks.append(task)

        await self.ledger.replace_all(entries)
        await self.board.replace_all(projects, tasks)

        restored = {
            "entries": len(entries),
            "projects": len(projects),
            "tasks": len(tasks)
        }
        logger.info(f"Backup restored: {restored}")
        return restored

    def _validate_all(self, model, records: List[Dict[str, Any]], label: str) -> list:
        items = []
        for record in records:
            try:
                items.append(model.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Failed to restore {label}: {record.get('id') if isinstance(record, dict) else record}: {e}")
        return items

    def list_backups(self, backup_dir: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List all available backups in the backup directory.

        Returns:
            List of backup info dictionaries sorted by date (newest first)
        """
        backup_path = self._get_backup_dir(backup_dir)
        backups = []

        for file in backup_path.glob(f"{self.BACKUP_PREFIX}*{self.BACKUP_EXTENSION}"):
            backup_date = self._parse_backup_date(file.name)
            if backup_date:
                file_size = file.stat().st_size
                backups.append({
                    "filename": file.name,
                    "path": str(file),
                    "date": backup_date,
                    "size_bytes": file_size,
                    "size_human": self._format_size(file_size)
                })

        backups.sort(key=lambda x: x["date"], reverse=True)
        return backups

    def _format_size(self, size_bytes: int) -> str:
        """Format file size in human-readable format"""
        for unit in ['B', 'KB', 'MB', 'GB']:
            if size_bytes < 1024:
                return f"{size_bytes:.1f} {unit}"
            size_bytes /= 1024
        return f"{size_bytes:.1f} TB"

    def cleanup_old_backups(self, backup_dir: Optional[str] = None, keep_count: int = 5) -> int:
        """
        Remove old backups, keeping only the most recent ones.

        Returns:
            Number of removed backup files
        """
        backups = self.list_backups(backup_dir)
        removed = 0

        for backup in backups[keep_count:]:
            try:
                Path(backup["path"]).unlink()
                removed += 1
                logger.info(f"Removed old backup: {backup['filename']}")
            except OSError as e:
                logger.warning(f"Failed to remove backup {backup['filename']}: {e}")
        return removed
