"""
app/repositories/holiday_repository.py

Holiday calendar reads and inserts.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.holiday import Holiday


class HolidayRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def is_holiday(self, day: date) -> bool:
        stmt = select(Holiday.id).where(Holiday.date == day).limit(1)
        return self._session.execute(stmt).first() is not None

    def existing_keys(self, days: Iterable[date]) -> frozenset[tuple[date, str]]:
        wanted = sorted(set(days))
        if not wanted:
            return frozenset()
        stmt = select(Holiday.date, Holiday.name).where(Holiday.date.in_(wanted))
        return frozenset((day, name) for day, name in self._session.execute(stmt))

    def create(self, *, name: str, day: date) -> Holiday:
        holiday = Holiday(name=name, date=day)
        self._session.add(holiday)
        self._session.flush()
        return holiday
