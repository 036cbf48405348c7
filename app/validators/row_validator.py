"""
app/validators/row_validator.py

Shared parsing helpers for the per-kind CSV row validators.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%m/%d/%Y",
)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


class BaseRowValidator:
    """
    Blank checks and scalar parsing reused by every row validator.
    """

    @classmethod
    def _missing_any(cls, row: Mapping[str, Any], fields: Iterable[str]) -> bool:
        return any(cls._is_blank(row.get(field)) for field in fields)

    @staticmethod
    def _required_message(fields: Iterable[str]) -> str:
        return f"Missing required fields ({', '.join(fields)})."

    @classmethod
    def _optional_string(cls, value: Any) -> str | None:
        if cls._is_blank(value):
            return None
        return str(value).strip()

    @classmethod
    def _parse_int(cls, value: Any) -> int | None:
        """
        Parse a whole number; returns None for blanks and non-integers.
        """

        if cls._is_blank(value):
            return None
        raw = str(value).strip()
        if not _INTEGER_PATTERN.match(raw):
            return None
        return int(raw)

    @staticmethod
    def _parse_date(value: Any) -> date | None:
        return parse_date(value)

    @staticmethod
    def _is_email(value: str) -> bool:
        return bool(_EMAIL_PATTERN.match(value))

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        return str(value).strip() == ""


def parse_date(value: Any) -> date | None:
    """
    Parse a calendar date in ISO or one of ``DATE_FORMATS``; None when invalid.
    """

    if value is None or str(value).strip() == "":
        return None
    raw = str(value).strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    # ISO timestamps such as 2025-01-26T00:00:00Z
    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        return None
