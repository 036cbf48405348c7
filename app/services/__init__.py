"""
app/services package marker.
"""

from app.services.attendance_alert_service import (
    AlertRunSummary,
    AttendanceAlertService,
    get_attendance_alert_service,
)
from app.services.attendance_import_service import (
    AttendanceImportService,
    get_attendance_import_service,
)
from app.services.holiday_import_service import HolidayImportService, get_holiday_import_service
from app.services.marks_import_service import MarksImportService, get_marks_import_service
from app.services.section_upload import ImportPermissionError, ImportTargetNotFoundError
from app.services.user_import_service import UserImportService, get_user_import_service

__all__ = [
    "AlertRunSummary",
    "AttendanceAlertService",
    "get_attendance_alert_service",
    "AttendanceImportService",
    "get_attendance_import_service",
    "HolidayImportService",
    "get_holiday_import_service",
    "ImportPermissionError",
    "ImportTargetNotFoundError",
    "MarksImportService",
    "get_marks_import_service",
    "UserImportService",
    "get_user_import_service",
]
