"""
app/services/attendance_import_service.py

Attendance CSV upload for one class session (``rollNumber,status`` rows).
"""

from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy.orm import Session, sessionmaker

from app.config import CSVImportSettings, get_csv_import_settings
from app.domain.bulk_import import BatchResult, ImportRow, RowVerdict, WrittenRecord
from app.domain.college_import import AttendanceEntry, AttendanceTarget, RosterSnapshot
from app.ingestion.csv_parser import CSVSource
from app.ingestion.pipeline import BulkImportPipeline
from app.repositories.attendance_repository import AttendanceRepository
from app.repositories.reference_repository import ReferenceRepository
from app.services.section_upload import (
    ImportTargetNotFoundError,
    SectionRosterHandler,
    ensure_staff_owns,
)
from app.validators.attendance_row_validator import AttendanceRowValidator
from db.session import get_session_factory

logger = logging.getLogger(__name__)


class AttendanceImportHandler(SectionRosterHandler[AttendanceEntry]):
    kind = "attendance"

    def __init__(self, target: AttendanceTarget) -> None:
        super().__init__(target.section_id)
        self._validator = AttendanceRowValidator(target)

    def validate(self, row: ImportRow, snapshot: RosterSnapshot) -> RowVerdict[AttendanceEntry]:
        return self._validator.validate(row, snapshot)

    def write(self, session: Session, typed: AttendanceEntry) -> WrittenRecord:
        attendance_id = AttendanceRepository(session).upsert(
            session_id=typed.session_id,
            student_id=typed.student_id,
            subject_id=typed.subject_id,
            status=typed.status,
        )
        return WrittenRecord(
            record_id=attendance_id,
            fields={"studentId": typed.student_id, "status": typed.status},
        )


class AttendanceImportService:
    """
    Checks session ownership, then upserts one attendance mark per row.
    """

    def __init__(self, *, session_factory: sessionmaker[Session], settings: CSVImportSettings) -> None:
        self._session_factory = session_factory
        self._pipeline = BulkImportPipeline(session_factory=session_factory, settings=settings)

    def resolve_target(self, *, session_id: int, staff_id: int) -> AttendanceTarget:
        """
        Load the class session and verify ``staff_id`` took it.

        Raises:
            ImportTargetNotFoundError: the session does not exist.
            ImportPermissionError: the staff member does not own the session.
        """

        with self._session_factory() as session:
            repository = ReferenceRepository(session)
            class_session = repository.get_class_session(session_id)
            if class_session is None:
                raise ImportTargetNotFoundError("Session not found.")
            ensure_staff_owns(
                repository,
                staff_id=staff_id,
                owner_staff_id=class_session.taken_by_staff_id,
                message="Only the staff member who created this session can upload attendance.",
            )
            return AttendanceTarget(
                session_id=class_session.id,
                section_id=class_session.section_id,
                subject_id=class_session.subject_id,
                staff_id=staff_id,
            )

    def import_attendance(self, source: CSVSource, *, session_id: int, staff_id: int) -> BatchResult:
        target = self.resolve_target(session_id=session_id, staff_id=staff_id)
        logger.info(
            "Attendance upload session_id=%s section_id=%s staff_id=%s",
            target.session_id,
            target.section_id,
            staff_id,
        )
        return self._pipeline.run(source, AttendanceImportHandler(target), notify=False)


@lru_cache(maxsize=1)
def get_attendance_import_service() -> AttendanceImportService:
    return AttendanceImportService(
        session_factory=get_session_factory(),
        settings=get_csv_import_settings(),
    )
