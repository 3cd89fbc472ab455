"""
Internship Tracker - application wiring.

Architecture Decision: Presentation Layer boundary
A page or window creates one InternshipTracker, awaits start() once and then
calls the ledger and board directly. Business logic stays in the services.
"""

import logging
from typing import Optional

from internship_tracker.infra.config import Settings, get_settings, configure_logging
from internship_tracker.infra.db import init_db
from internship_tracker.infra.gateway import PersistenceGateway, create_gateway
from internship_tracker.services import (
    TimeLedger,
    ProjectBoard,
    DashboardService,
    BackupService,
    ExcelReportService,
)

logger = logging.getLogger(__name__)


class InternshipTracker:
    """
    Main application class coordinating storage and services.
    """

    def __init__(self, settings: Optional[Settings] = None,
                 gateway: Optional[PersistenceGateway] = None):
        self.settings = settings or get_settings()
        self._custom_gateway = gateway is not None
        self.gateway = gateway or create_gateway(self.settings)

        prefs = self.settings.preferences
        self.ledger = TimeLedger(self.gateway, goal_hours=prefs.goal_hours)
        self.board = ProjectBoard(self.gateway)
        self.dashboard = DashboardService(self.ledger, self.board, date_format=prefs.date_format)
        self.backups = BackupService(self.ledger, self.board)
        self.reports = ExcelReportService(self.ledger, self.board)

    async def start(self):
        """Prepare storage and load every collection once"""
        configure_logging(self.settings.log_level)
        if not self._custom_gateway and self.settings.storage_backend == "sqlite":
            await init_db(self.settings.get_db_url())

        await self.ledger.load()
        await self.board.load()
        logger.info(
            f"Tracker ready: {len(self.ledger.entries)} entries, "
            f"{len(self.board.projects)} projects, {len(self.board.tasks)} tasks"
        )
        return self

    def backup(self):
        """Create a backup in the configured directory and apply retention"""
        prefs = self.settings.preferences
        backup_file = self.backups.create_backup(prefs.backup_directory)
        self.backups.cleanup_old_backups(prefs.backup_directory, prefs.backup_retention_count)
        return backup_file
