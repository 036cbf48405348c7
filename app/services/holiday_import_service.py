"""
app/services/holiday_import_service.py

Holiday calendar CSV upload (``name,date`` rows).
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache

from sqlalchemy.orm import Session, sessionmaker

from app.config import CSVImportSettings, get_csv_import_settings
from app.domain.bulk_import import BatchResult, ImportRow, RowVerdict, WrittenRecord
from app.domain.college_import import HolidaySnapshot, NewHoliday
from app.ingestion.csv_parser import CSVSource
from app.ingestion.pipeline import BulkImportPipeline, ImportHandler
from app.repositories.holiday_repository import HolidayRepository
from app.validators.holiday_row_validator import HolidayRowValidator
from app.validators.row_validator import parse_date
from db.session import get_session_factory


class HolidayImportHandler(ImportHandler[HolidaySnapshot, NewHoliday]):
    kind = "holidays"
    natural_key_column = "date"

    def __init__(self, validator: HolidayRowValidator | None = None) -> None:
        self._validator = validator or HolidayRowValidator()

    def natural_key(self, row: ImportRow) -> str:
        return f"{row.get('date', '').strip()} {row.get('name', '').strip()}".strip()

    def load_snapshot(self, session: Session, rows: Sequence[ImportRow]) -> HolidaySnapshot:
        days = [
            parsed
            for parsed in (parse_date(row.get("date")) for row in rows)
            if parsed is not None
        ]
        return HolidaySnapshot(existing=HolidayRepository(session).existing_keys(days))

    def validate(self, row: ImportRow, snapshot: HolidaySnapshot) -> RowVerdict[NewHoliday]:
        return self._validator.validate(row, snapshot)

    def release(self, snapshot: HolidaySnapshot, typed: NewHoliday) -> None:
        snapshot.release((typed.date, typed.name))

    def write(self, session: Session, typed: NewHoliday) -> WrittenRecord:
        holiday = HolidayRepository(session).create(name=typed.name, day=typed.date)
        return WrittenRecord(
            record_id=holiday.id,
            fields={"name": holiday.name, "date": holiday.date.isoformat()},
        )


class HolidayImportService:
    def __init__(self, *, session_factory: sessionmaker[Session], settings: CSVImportSettings) -> None:
        self._pipeline = BulkImportPipeline(session_factory=session_factory, settings=settings)
        self._handler = HolidayImportHandler()

    def import_holidays(self, source: CSVSource) -> BatchResult:
        return self._pipeline.run(source, self._handler, notify=False)


@lru_cache(maxsize=1)
def get_holiday_import_service() -> HolidayImportService:
    return HolidayImportService(
        session_factory=get_session_factory(),
        settings=get_csv_import_settings(),
    )
