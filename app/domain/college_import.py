"""
app/domain/college_import.py

Typed rows and per-batch reference snapshots for each import kind.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field


@dataclass(frozen=True)
class NewUser:
    """
    A validated user-import row ready to be written.
    """

    name: str
    email: str
    role: str
    roll_number: str
    program_id: int | None = None
    section_id: int | None = None
    department_id: int | None = None
    guardian_email: str | None = None
    guardian_phone: str | None = None
    admission_year: int | None = None
    designation: str | None = None


@dataclass(frozen=True)
class AttendanceEntry:
    roll_number: str
    student_id: int
    session_id: int
    subject_id: int
    status: str


@dataclass(frozen=True)
class MarkEntry:
    roll_number: str
    student_id: int
    assessment_id: int
    marks_obtained: int


@dataclass(frozen=True)
class NewHoliday:
    name: str
    date: dt.date


@dataclass
class UserReferenceSnapshot:
    """
    Reference ids and known emails, fetched once per batch.

    ``claimed_emails`` grows while the batch is validated so that a second row
    carrying the same email is classified as a duplicate. A claim is released
    again when the row that made it fails to write.
    """

    program_ids: frozenset[int] = frozenset()
    section_ids: frozenset[int] = frozenset()
    department_ids: frozenset[int] = frozenset()
    existing_emails: frozenset[str] = frozenset()
    claimed_emails: set[str] = field(default_factory=set)

    def email_taken(self, email: str) -> bool:
        return email in self.existing_emails or email in self.claimed_emails

    def claim_email(self, email: str) -> None:
        self.claimed_emails.add(email)

    def release_email(self, email: str) -> None:
        self.claimed_emails.discard(email)


@dataclass(frozen=True)
class RosterSnapshot:
    """
    Roll number to student id map for the section an upload targets.
    """

    section_id: int
    students_by_roll: dict[str, int] = field(default_factory=dict)

    def student_id_for(self, roll_number: str) -> int | None:
        return self.students_by_roll.get(roll_number)


@dataclass(frozen=True)
class AttendanceTarget:
    session_id: int
    section_id: int
    subject_id: int
    staff_id: int


@dataclass(frozen=True)
class AssessmentTarget:
    assessment_id: int
    section_id: int
    max_marks: int
    staff_id: int


@dataclass
class HolidaySnapshot:
    existing: frozenset[tuple[dt.date, str]] = frozenset()
    claimed: set[tuple[dt.date, str]] = field(default_factory=set)

    def taken(self, key: tuple[dt.date, str]) -> bool:
        return key in self.existing or key in self.claimed

    def claim(self, key: tuple[dt.date, str]) -> None:
        self.claimed.add(key)

    def release(self, key: tuple[dt.date, str]) -> None:
        self.claimed.discard(key)
