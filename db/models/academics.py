"""
db/models/academics.py

Class sessions, attendance, assessments and marks.

Attendance and marks are upsert targets: each carries a composite natural key
(``session_id, student_id`` / ``assessment_id, student_id``) enforced by a
unique constraint so repeat uploads update in place.
"""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.org import AcademicTerm, Section, Subject
    from db.models.user import Staff, Student


class AttendanceStatus:
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"

    ALL: frozenset[str] = frozenset({PRESENT, ABSENT, LATE, EXCUSED})
    ALERTING: frozenset[str] = frozenset({ABSENT, LATE})


class ClassSession(Base, TimestampMixin):
    __tablename__ = "class_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    section_id: Mapped[int] = mapped_column(ForeignKey("sections.id"), nullable=False)
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id"), nullable=False)
    term_id: Mapped[int] = mapped_column(ForeignKey("academic_terms.id"), nullable=False)
    scheduled_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_min: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    room: Mapped[str | None] = mapped_column(String(64), nullable=True)
    taken_by_staff_id: Mapped[int] = mapped_column(ForeignKey("staff.id"), nullable=False)

    section: Mapped["Section"] = relationship("Section")
    subject: Mapped["Subject"] = relationship("Subject")
    term: Mapped["AcademicTerm"] = relationship("AcademicTerm")
    taken_by: Mapped["Staff"] = relationship("Staff")
    attendance: Mapped[list["Attendance"]] = relationship("Attendance", back_populates="session")

    __table_args__ = (
        Index("ix_class_sessions_section_term", "section_id", "term_id"),
        Index("ix_class_sessions_taken_by", "taken_by_staff_id"),
    )


class Attendance(Base):
    __tablename__ = "attendance"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        ForeignKey("class_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id"), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="PRESENT, ABSENT, LATE, EXCUSED",
    )
    marked_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: dt.datetime.now(dt.timezone.utc),
    )

    session: Mapped[ClassSession] = relationship("ClassSession", back_populates="attendance")
    student: Mapped["Student"] = relationship("Student", back_populates="attendance")
    subject: Mapped["Subject"] = relationship("Subject")

    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uq_attendance_session_student"),
        Index("ix_attendance_marked_at_status", "marked_at", "status"),
    )


class Assessment(Base, TimestampMixin):
    __tablename__ = "assessments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    max_marks: Mapped[int] = mapped_column(Integer, nullable=False)
    weightage: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=True)
    section_id: Mapped[int] = mapped_column(ForeignKey("sections.id"), nullable=False)
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id"), nullable=False)
    term_id: Mapped[int] = mapped_column(ForeignKey("academic_terms.id"), nullable=False)
    created_by_id: Mapped[int] = mapped_column(ForeignKey("staff.id"), nullable=False)

    section: Mapped["Section"] = relationship("Section")
    marks: Mapped[list["Mark"]] = relationship("Mark", back_populates="assessment")


class Mark(Base, TimestampMixin):
    __tablename__ = "marks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assessment_id: Mapped[int] = mapped_column(
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    marks_obtained: Mapped[int] = mapped_column(Integer, nullable=False)

    assessment: Mapped[Assessment] = relationship("Assessment", back_populates="marks")
    student: Mapped["Student"] = relationship("Student", back_populates="marks")

    __table_args__ = (
        UniqueConstraint("assessment_id", "student_id", name="uq_marks_assessment_student"),
    )
