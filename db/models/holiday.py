"""
db/models/holiday.py

Official holidays. The daily attendance alert job does not run on these dates.
"""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Date, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class Holiday(Base, TimestampMixin):
    __tablename__ = "holidays"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)

    __table_args__ = (UniqueConstraint("date", "name", name="uq_holidays_date_name"),)

    def __repr__(self) -> str:
        return f"<Holiday id={self.id} date={self.date} name={self.name!r}>"
