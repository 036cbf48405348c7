"""
app/ingestion/reporter.py

Accumulates per-row outcomes of one import call into a BatchResult.
"""

from __future__ import annotations

import logging
from typing import Any

from app.domain.bulk_import import (
    EMPTY_INPUT_REASON,
    NOTIFICATION_REASON_PREFIX,
    BatchResult,
    ErrorKind,
    ImportRow,
    NotificationFailure,
    RowResult,
    WriteFailure,
    WriteSuccess,
)

logger = logging.getLogger(__name__)


class BatchReporter:
    """
    Collects the created, skipped, invalid and errors buckets in input order.
    """

    def __init__(self, *, kind: str, log_row_issues: bool = True) -> None:
        self._kind = kind
        self._log_row_issues = log_row_issues
        self._result = BatchResult()
        self._notification_errors: list[tuple[int, dict[str, Any]]] = []
        self._write_errors: list[tuple[int, dict[str, Any]]] = []
        self._finalized = False

    def set_total_rows(self, total_rows: int) -> None:
        self._result.total_rows = total_rows

    def mark_empty(self) -> None:
        self._result.invalid.append({"row": 0, "reason": EMPTY_INPUT_REASON})
        logger.info("CSV import kind=%s found no rows", self._kind)

    def add_invalid(self, row_number: int, row: ImportRow, reason: str) -> None:
        entry: dict[str, Any] = dict(row)
        entry["row"] = row_number
        entry["reason"] = reason
        self._result.invalid.append(entry)
        if self._log_row_issues:
            logger.warning(
                "CSV import kind=%s row=%s invalid reason=%s",
                self._kind,
                row_number,
                reason,
            )

    def add_skipped(self, row_number: int, natural_key: str, reason: str) -> None:
        self._result.skipped.append(
            {"row": row_number, "naturalKey": natural_key, "reason": reason}
        )
        if self._log_row_issues:
            logger.warning(
                "CSV import kind=%s row=%s skipped key=%s reason=%s",
                self._kind,
                row_number,
                natural_key,
                reason,
            )

    def add_result(self, result: RowResult) -> None:
        if isinstance(result, WriteSuccess):
            entry: dict[str, Any] = {
                "row": result.row_number,
                "id": result.record.record_id,
                "naturalKey": result.natural_key,
            }
            entry.update(result.record.fields)
            self._result.created.append(entry)
            return

        if isinstance(result, WriteFailure):
            self._write_errors.append(
                (
                    result.row_number,
                    {
                        "row": result.row_number,
                        "naturalKey": result.natural_key,
                        "reason": result.reason,
                        "kind": ErrorKind.WRITE,
                    },
                )
            )
            logger.warning(
                "CSV import kind=%s row=%s write failed key=%s reason=%s",
                self._kind,
                result.row_number,
                result.natural_key,
                result.reason,
            )
            return

        raise TypeError(f"Unsupported row result: {result!r}")

    def add_notification_failure(self, failure: NotificationFailure) -> None:
        reason = failure.reason
        if not reason.startswith(NOTIFICATION_REASON_PREFIX):
            reason = f"{NOTIFICATION_REASON_PREFIX}{reason}"
        self._notification_errors.append(
            (
                failure.row_number,
                {
                    "row": failure.row_number,
                    "naturalKey": failure.natural_key,
                    "reason": reason,
                    "kind": ErrorKind.NOTIFICATION,
                },
            )
        )

    def finalize(self) -> BatchResult:
        """
        Merge write and notification errors by row number and return the result.
        """

        if self._finalized:
            return self._result
        merged = sorted(
            self._write_errors + self._notification_errors,
            key=lambda item: item[0],
        )
        self._result.errors.extend(entry for _, entry in merged)
        self._finalized = True

        logger.info(
            "CSV import kind=%s finished total=%s created=%s skipped=%s invalid=%s errors=%s",
            self._kind,
            self._result.total_rows,
            self._result.created_count,
            len(self._result.skipped),
            len(self._result.invalid),
            len(self._result.errors),
        )
        return self._result
