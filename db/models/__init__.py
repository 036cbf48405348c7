"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.academics import Assessment, Attendance, AttendanceStatus, ClassSession, Mark
from db.models.holiday import Holiday
from db.models.message_log import MessageChannel, MessageLog, MessageStatus, MessageType
from db.models.org import AcademicTerm, Department, Program, Section, Subject
from db.models.user import Staff, Student, User, UserRole

__all__ = [
    "AcademicTerm",
    "Assessment",
    "Attendance",
    "AttendanceStatus",
    "ClassSession",
    "Department",
    "Holiday",
    "Mark",
    "MessageChannel",
    "MessageLog",
    "MessageStatus",
    "MessageType",
    "Program",
    "Section",
    "Staff",
    "Student",
    "Subject",
    "User",
    "UserRole",
]
