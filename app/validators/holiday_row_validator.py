"""
app/validators/holiday_row_validator.py

Validation of one ``name,date`` holiday row.
"""

from __future__ import annotations

from collections.abc import Mapping

from app.domain.bulk_import import RowVerdict
from app.domain.college_import import HolidaySnapshot, NewHoliday
from app.validators.row_validator import BaseRowValidator

REQUIRED_FIELDS: tuple[str, ...] = ("name", "date")


class HolidayRowValidator(BaseRowValidator):
    def validate(self, row: Mapping[str, str], snapshot: HolidaySnapshot) -> RowVerdict[NewHoliday]:
        if self._missing_any(row, REQUIRED_FIELDS):
            return RowVerdict.reject(self._required_message(REQUIRED_FIELDS))

        holiday_date = self._parse_date(row["date"])
        if holiday_date is None:
            return RowVerdict.reject(f"Invalid date '{row['date'].strip()}'. Use YYYY-MM-DD.")

        name = row["name"].strip()
        key = (holiday_date, name)
        if snapshot.taken(key):
            return RowVerdict.skip("Holiday already exists")
        snapshot.claim(key)

        return RowVerdict.accept(NewHoliday(name=name, date=holiday_date))
