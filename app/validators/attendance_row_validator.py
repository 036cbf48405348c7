"""
app/validators/attendance_row_validator.py

Validation of attendance and marks upload rows against a section roster.
"""

from __future__ import annotations

from collections.abc import Mapping

from app.domain.bulk_import import RowVerdict
from app.domain.college_import import (
    AssessmentTarget,
    AttendanceEntry,
    AttendanceTarget,
    MarkEntry,
    RosterSnapshot,
)
from app.validators.row_validator import BaseRowValidator
from db.models.academics import AttendanceStatus

ATTENDANCE_REQUIRED_FIELDS: tuple[str, ...] = ("rollNumber", "status")
MARKS_REQUIRED_FIELDS: tuple[str, ...] = ("rollNumber", "marksObtained")

NOT_ENROLLED_REASON = "Roll number not enrolled in section"


class AttendanceRowValidator(BaseRowValidator):
    """
    Checks one ``rollNumber,status`` row for a class session.
    """

    def __init__(self, target: AttendanceTarget) -> None:
        self._target = target

    def validate(
        self,
        row: Mapping[str, str],
        roster: RosterSnapshot,
    ) -> RowVerdict[AttendanceEntry]:
        if self._missing_any(row, ATTENDANCE_REQUIRED_FIELDS):
            return RowVerdict.reject(self._required_message(ATTENDANCE_REQUIRED_FIELDS))

        status_raw = row["status"].strip()
        status = status_raw.upper()
        if status not in AttendanceStatus.ALL:
            allowed = ", ".join(sorted(AttendanceStatus.ALL))
            return RowVerdict.reject(f"Invalid status '{status_raw}'. Must be one of {allowed}.")

        roll_number = row["rollNumber"].strip()
        student_id = roster.student_id_for(roll_number)
        if student_id is None:
            return RowVerdict.skip(NOT_ENROLLED_REASON)

        return RowVerdict.accept(
            AttendanceEntry(
                roll_number=roll_number,
                student_id=student_id,
                session_id=self._target.session_id,
                subject_id=self._target.subject_id,
                status=status,
            )
        )


class MarksRowValidator(BaseRowValidator):
    """
    Checks one ``rollNumber,marksObtained`` row for an assessment.
    """

    def __init__(self, target: AssessmentTarget) -> None:
        self._target = target

    def validate(
        self,
        row: Mapping[str, str],
        roster: RosterSnapshot,
    ) -> RowVerdict[MarkEntry]:
        if self._missing_any(row, MARKS_REQUIRED_FIELDS):
            return RowVerdict.reject(self._required_message(MARKS_REQUIRED_FIELDS))

        raw_marks = row["marksObtained"].strip()
        marks = self._parse_int(raw_marks)
        if marks is None or not 0 <= marks <= self._target.max_marks:
            return RowVerdict.reject(
                f"Invalid marksObtained '{raw_marks}'. "
                f"Must be a whole number between 0 and {self._target.max_marks}."
            )

        roll_number = row["rollNumber"].strip()
        student_id = roster.student_id_for(roll_number)
        if student_id is None:
            return RowVerdict.skip(NOT_ENROLLED_REASON)

        return RowVerdict.accept(
            MarkEntry(
                roll_number=roll_number,
                student_id=student_id,
                assessment_id=self._target.assessment_id,
                marks_obtained=marks,
            )
        )
