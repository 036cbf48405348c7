"""
app/repositories package marker.
"""

from app.repositories.attendance_repository import AttendanceRepository
from app.repositories.holiday_repository import HolidayRepository
from app.repositories.mark_repository import MarkRepository
from app.repositories.message_log_repository import MessageLogRepository
from app.repositories.reference_repository import ReferenceRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    "AttendanceRepository",
    "HolidayRepository",
    "MarkRepository",
    "MessageLogRepository",
    "ReferenceRepository",
    "UserRepository",
]
