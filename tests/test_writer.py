"""
tests/test_writer.py

Per-row failure isolation of TransactionalWriter in both transaction layouts.
"""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import event, select
from sqlalchemy.exc import OperationalError

from app.domain.bulk_import import PendingWrite, WriteFailure, WriteSuccess, WrittenRecord
from app.ingestion.writer import RowWriteError, TransactionalWriter
from db.models import Holiday


def _create_holiday(session, name: str) -> WrittenRecord:
    if name == "refused":
        raise RowWriteError("Refused by write unit")
    holiday = Holiday(name=name, date=date(2026, 1, 1))
    session.add(holiday)
    session.flush()
    return WrittenRecord(record_id=holiday.id, fields={"name": name})


def _pending(*names: str) -> list[PendingWrite[str]]:
    return [PendingWrite(row_number=index + 2, natural_key=name, typed=name) for index, name in enumerate(names)]


def _stored_names(session_factory) -> list[str]:
    with session_factory() as session:
        return list(session.scalars(select(Holiday.name).order_by(Holiday.id)))


@pytest.mark.parametrize("mode", ["per_row", "savepoint"])
class TestTransactionalWriter:
    def test_failures_are_isolated(self, session_factory, mode) -> None:
        writer = TransactionalWriter(session_factory, batch_size=10, transaction_mode=mode)

        results = writer.write_all(_pending("a", "refused", "b", "a", "c"), _create_holiday)

        assert [type(result) for result in results] == [
            WriteSuccess,
            WriteFailure,
            WriteSuccess,
            WriteFailure,
            WriteSuccess,
        ]
        assert results[1].reason == "Refused by write unit"
        assert results[3].reason.startswith("Integrity error: ")
        assert [result.row_number for result in results] == [2, 3, 4, 5, 6]
        assert _stored_names(session_factory) == ["a", "b", "c"]

    def test_unexpected_exception_fails_only_its_row(self, session_factory, mode) -> None:
        def unit(session, name):
            if name == "huge":
                raise OverflowError("Python int too large to convert to SQLite INTEGER")
            return _create_holiday(session, name)

        writer = TransactionalWriter(session_factory, batch_size=10, transaction_mode=mode)

        results = writer.write_all(_pending("a", "huge", "b"), unit)

        assert [type(result) for result in results] == [WriteSuccess, WriteFailure, WriteSuccess]
        assert results[1].reason == "Unexpected error: OverflowError"
        assert _stored_names(session_factory) == ["a", "b"]

    def test_success_carries_record(self, session_factory, mode) -> None:
        writer = TransactionalWriter(session_factory, transaction_mode=mode)

        (result,) = writer.write_chunk(_pending("solo"), _create_holiday)

        assert isinstance(result, WriteSuccess)
        assert result.natural_key == "solo"
        assert result.record.fields == {"name": "solo"}

    def test_empty_chunk(self, session_factory, mode) -> None:
        writer = TransactionalWriter(session_factory, transaction_mode=mode)

        assert writer.write_chunk([], _create_holiday) == []


class TestWriterModes:
    def test_auto_mode_uses_per_row_on_sqlite(self, session_factory) -> None:
        writer = TransactionalWriter(session_factory, batch_size=50)

        assert writer.mode == "per_row"
        assert writer.chunk_size == 1

    def test_savepoint_chunk_size(self, session_factory) -> None:
        writer = TransactionalWriter(session_factory, batch_size=50, transaction_mode="savepoint")

        assert writer.chunk_size == 50

    def test_unknown_mode(self, session_factory) -> None:
        with pytest.raises(ValueError):
            TransactionalWriter(session_factory, transaction_mode="eventually")

    def test_unexpected_database_error_reason(self, session_factory) -> None:
        def broken(session, typed):
            raise OperationalError("INSERT", {}, Exception("database is locked"))

        writer = TransactionalWriter(session_factory, transaction_mode="per_row")

        (result,) = writer.write_chunk(_pending("x"), broken)

        assert isinstance(result, WriteFailure)
        assert result.reason == "Database error: OperationalError"

    def test_failed_chunk_commit_is_replayed_per_row(self, engine, session_factory, caplog) -> None:
        remaining_failures = [OperationalError("COMMIT", {}, Exception("disk I/O error"))]

        @event.listens_for(engine, "commit")
        def _fail_first_commit(connection) -> None:  # noqa: ANN001
            if remaining_failures:
                raise remaining_failures.pop()

        writer = TransactionalWriter(session_factory, batch_size=10, transaction_mode="savepoint")

        results = writer.write_chunk(_pending("a", "b"), _create_holiday)

        assert remaining_failures == []
        assert [type(result) for result in results] == [WriteSuccess, WriteSuccess]
        assert [result.row_number for result in results] == [2, 3]
        assert _stored_names(session_factory) == ["a", "b"]
        assert "retrying one transaction per row" in caplog.text
