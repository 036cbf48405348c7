"""
app/repositories/mark_repository.py

Assessment mark upserts.
"""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.repositories.upsert import dialect_insert
from db.models.academics import Mark


class MarkRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(self, *, assessment_id: int, student_id: int, marks_obtained: int) -> int:
        stmt = dialect_insert(self._session, Mark).values(
            assessment_id=assessment_id,
            student_id=student_id,
            marks_obtained=marks_obtained,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Mark.assessment_id, Mark.student_id],
            set_={"marks_obtained": stmt.excluded.marks_obtained, "updated_at": func.now()},
        ).returning(Mark.id)
        return self._session.execute(stmt).scalar_one()
