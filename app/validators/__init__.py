"""
app/validators package marker.
"""

from app.validators.attendance_row_validator import AttendanceRowValidator, MarksRowValidator
from app.validators.holiday_row_validator import HolidayRowValidator
from app.validators.user_row_validator import UserRowValidator

__all__ = [
    "AttendanceRowValidator",
    "HolidayRowValidator",
    "MarksRowValidator",
    "UserRowValidator",
]
