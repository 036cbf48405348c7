"""
app/repositories/reference_repository.py

Read-only lookups of reference data and upload targets.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.models.academics import Assessment, ClassSession
from db.models.org import Department, Program, Section
from db.models.user import Staff, Student, User


class ReferenceRepository:
    """
    Lookups the import validators run against; nothing here writes.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def program_ids(self) -> frozenset[int]:
        return frozenset(self._session.scalars(select(Program.id)).all())

    def section_ids(self) -> frozenset[int]:
        return frozenset(self._session.scalars(select(Section.id)).all())

    def department_ids(self) -> frozenset[int]:
        return frozenset(self._session.scalars(select(Department.id)).all())

    def existing_emails(self, emails: Iterable[str]) -> frozenset[str]:
        """
        Return which of ``emails`` already belong to a user, ignoring case.

        Results are lower-cased so they compare against normalised CSV values.
        """

        candidates = sorted({email.strip().lower() for email in emails if email and email.strip()})
        found: set[str] = set()
        # Chunked to stay under bind-parameter limits on large uploads.
        for start in range(0, len(candidates), 500):
            chunk = candidates[start : start + 500]
            stmt = select(func.lower(User.email)).where(func.lower(User.email).in_(chunk))
            found.update(self._session.scalars(stmt).all())
        return frozenset(found)

    def section_roster(self, section_id: int) -> dict[str, int]:
        """
        Map roll number to student id for every student in the section.
        """

        stmt = select(Student.roll_number, Student.id).where(Student.section_id == section_id)
        return {roll_number: student_id for roll_number, student_id in self._session.execute(stmt)}

    def get_class_session(self, session_id: int) -> ClassSession | None:
        return self._session.get(ClassSession, session_id)

    def get_assessment(self, assessment_id: int) -> Assessment | None:
        return self._session.get(Assessment, assessment_id)

    def get_staff(self, staff_id: int) -> Staff | None:
        return self._session.get(Staff, staff_id)
