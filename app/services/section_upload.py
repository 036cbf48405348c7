"""
app/services/section_upload.py

Shared pieces of the staff uploads that target one section's roster
(attendance for a class session, marks for an assessment).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from app.domain.bulk_import import ImportRow
from app.domain.college_import import RosterSnapshot
from app.ingestion.pipeline import ImportHandler
from app.repositories.reference_repository import ReferenceRepository

TypedRowT = TypeVar("TypedRowT")


class ImportTargetNotFoundError(LookupError):
    """
    Raised when the session or assessment an upload targets does not exist.
    """


class ImportPermissionError(PermissionError):
    """
    Raised when the requesting staff member does not own the upload target.
    """


class SectionRosterHandler(ImportHandler[RosterSnapshot, TypedRowT], Generic[TypedRowT]):
    """
    Handler base that validates rows against the roster of one section.
    """

    natural_key_column = "rollNumber"

    def __init__(self, section_id: int) -> None:
        self._section_id = section_id

    def load_snapshot(self, session: Session, rows: Sequence[ImportRow]) -> RosterSnapshot:
        roster = ReferenceRepository(session).section_roster(self._section_id)
        return RosterSnapshot(section_id=self._section_id, students_by_roll=roster)


def ensure_staff_owns(
    repository: ReferenceRepository,
    *,
    staff_id: int,
    owner_staff_id: int,
    message: str,
) -> None:
    if repository.get_staff(staff_id) is None:
        raise ImportPermissionError("Staff profile not found.")
    if owner_staff_id != staff_id:
        raise ImportPermissionError(message)
