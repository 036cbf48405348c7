"""
app/repositories/attendance_repository.py

Attendance upserts and the daily absence lookup used by guardian alerts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.repositories.upsert import dialect_insert
from db.models.academics import Attendance, AttendanceStatus, ClassSession
from db.models.org import Subject
from db.models.user import Student, User


@dataclass(frozen=True)
class AttendanceLine:
    """
    One attendance mark of a student for the alert report.
    """

    subject_name: str
    scheduled_at: datetime
    status: str


@dataclass(frozen=True)
class AbsentStudent:
    student_id: int
    name: str
    roll_number: str
    guardian_email: str | None
    guardian_phone: str | None
    lines: tuple[AttendanceLine, ...]


class AttendanceRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(
        self,
        *,
        session_id: int,
        student_id: int,
        subject_id: int,
        status: str,
        marked_at: datetime | None = None,
    ) -> int:
        """
        Insert or update the mark for ``(session_id, student_id)`` in one
        statement and return its id.
        """

        values = {
            "session_id": session_id,
            "student_id": student_id,
            "subject_id": subject_id,
            "status": status,
            "marked_at": marked_at or datetime.now(timezone.utc),
        }
        stmt = dialect_insert(self._session, Attendance).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Attendance.session_id, Attendance.student_id],
            set_={
                "status": stmt.excluded.status,
                "subject_id": stmt.excluded.subject_id,
                "marked_at": stmt.excluded.marked_at,
                "updated_at": func.now(),
            },
        ).returning(Attendance.id)
        return self._session.execute(stmt).scalar_one()

    def students_flagged_between(self, start: datetime, end: datetime) -> list[AbsentStudent]:
        """
        Students with at least one ABSENT or LATE mark in ``[start, end)``,
        each with every mark they received in that window.
        """

        flagged_ids = select(Attendance.student_id).where(
            Attendance.marked_at >= start,
            Attendance.marked_at < end,
            Attendance.status.in_(sorted(AttendanceStatus.ALERTING)),
        )
        stmt = (
            select(
                Student.id,
                User.name,
                Student.roll_number,
                Student.guardian_email,
                Student.guardian_phone,
                Subject.name,
                ClassSession.scheduled_at,
                Attendance.status,
            )
            .join(User, User.id == Student.user_id)
            .join(Attendance, Attendance.student_id == Student.id)
            .join(ClassSession, ClassSession.id == Attendance.session_id)
            .join(Subject, Subject.id == Attendance.subject_id)
            .where(
                Student.id.in_(flagged_ids),
                Attendance.marked_at >= start,
                Attendance.marked_at < end,
            )
            .order_by(Student.id, ClassSession.scheduled_at)
        )

        grouped: dict[int, dict] = {}
        for (
            student_id,
            name,
            roll_number,
            guardian_email,
            guardian_phone,
            subject_name,
            scheduled_at,
            status,
        ) in self._session.execute(stmt):
            entry = grouped.setdefault(
                student_id,
                {
                    "name": name,
                    "roll_number": roll_number,
                    "guardian_email": guardian_email,
                    "guardian_phone": guardian_phone,
                    "lines": [],
                },
            )
            entry["lines"].append(AttendanceLine(subject_name, scheduled_at, status))

        return [
            AbsentStudent(
                student_id=student_id,
                name=entry["name"],
                roll_number=entry["roll_number"],
                guardian_email=entry["guardian_email"],
                guardian_phone=entry["guardian_phone"],
                lines=tuple(entry["lines"]),
            )
            for student_id, entry in grouped.items()
        ]
