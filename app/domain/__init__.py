"""
app/domain package marker.
"""

from app.domain.bulk_import import (
    BatchResult,
    ImportRow,
    NotificationRequest,
    RowVerdict,
    WriteFailure,
    WriteSuccess,
    WrittenRecord,
)
from app.domain.college_import import (
    AttendanceEntry,
    MarkEntry,
    NewHoliday,
    NewUser,
    RosterSnapshot,
    UserReferenceSnapshot,
)

__all__ = [
    "AttendanceEntry",
    "BatchResult",
    "ImportRow",
    "MarkEntry",
    "NewHoliday",
    "NewUser",
    "NotificationRequest",
    "RosterSnapshot",
    "RowVerdict",
    "UserReferenceSnapshot",
    "WriteFailure",
    "WriteSuccess",
    "WrittenRecord",
]
