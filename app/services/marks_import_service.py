"""
app/services/marks_import_service.py

Marks CSV upload for one assessment (``rollNumber,marksObtained`` rows).
"""

from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy.orm import Session, sessionmaker

from app.config import CSVImportSettings, get_csv_import_settings
from app.domain.bulk_import import BatchResult, ImportRow, RowVerdict, WrittenRecord
from app.domain.college_import import AssessmentTarget, MarkEntry, RosterSnapshot
from app.ingestion.csv_parser import CSVSource
from app.ingestion.pipeline import BulkImportPipeline
from app.repositories.mark_repository import MarkRepository
from app.repositories.reference_repository import ReferenceRepository
from app.services.section_upload import (
    ImportTargetNotFoundError,
    SectionRosterHandler,
    ensure_staff_owns,
)
from app.validators.attendance_row_validator import MarksRowValidator
from db.session import get_session_factory

logger = logging.getLogger(__name__)


class MarksImportHandler(SectionRosterHandler[MarkEntry]):
    kind = "marks"

    def __init__(self, target: AssessmentTarget) -> None:
        super().__init__(target.section_id)
        self._validator = MarksRowValidator(target)

    def validate(self, row: ImportRow, snapshot: RosterSnapshot) -> RowVerdict[MarkEntry]:
        return self._validator.validate(row, snapshot)

    def write(self, session: Session, typed: MarkEntry) -> WrittenRecord:
        mark_id = MarkRepository(session).upsert(
            assessment_id=typed.assessment_id,
            student_id=typed.student_id,
            marks_obtained=typed.marks_obtained,
        )
        return WrittenRecord(
            record_id=mark_id,
            fields={"studentId": typed.student_id, "marksObtained": typed.marks_obtained},
        )


class MarksImportService:
    def __init__(self, *, session_factory: sessionmaker[Session], settings: CSVImportSettings) -> None:
        self._session_factory = session_factory
        self._pipeline = BulkImportPipeline(session_factory=session_factory, settings=settings)

    def resolve_target(self, *, assessment_id: int, staff_id: int) -> AssessmentTarget:
        with self._session_factory() as session:
            repository = ReferenceRepository(session)
            assessment = repository.get_assessment(assessment_id)
            if assessment is None:
                raise ImportTargetNotFoundError("Assessment not found.")
            ensure_staff_owns(
                repository,
                staff_id=staff_id,
                owner_staff_id=assessment.created_by_id,
                message="Only the staff member who created this assessment can upload marks.",
            )
            return AssessmentTarget(
                assessment_id=assessment.id,
                section_id=assessment.section_id,
                max_marks=assessment.max_marks,
                staff_id=staff_id,
            )

    def import_marks(self, source: CSVSource, *, assessment_id: int, staff_id: int) -> BatchResult:
        """
        Upsert one mark per row after checking the staff member owns the assessment.
        """

        target = self.resolve_target(assessment_id=assessment_id, staff_id=staff_id)
        logger.info(
            "Marks upload assessment_id=%s section_id=%s staff_id=%s",
            target.assessment_id,
            target.section_id,
            staff_id,
        )
        return self._pipeline.run(source, MarksImportHandler(target), notify=False)


@lru_cache(maxsize=1)
def get_marks_import_service() -> MarksImportService:
    return MarksImportService(
        session_factory=get_session_factory(),
        settings=get_csv_import_settings(),
    )
