"""Services layer - Business logic"""

from .time_ledger import TimeLedger, compute_duration
from .project_board import ProjectBoard
from .dashboard_service import DashboardService
from .backup_service import BackupService
from .excel_report_service import ExcelReportService

__all__ = [
    "TimeLedger",
    "compute_duration",
    "ProjectBoard",
    "DashboardService",
    "BackupService",
    "ExcelReportService",
]
