"""
app/ingestion/writer.py

Runs one atomic write unit per validated row and reports each outcome.

Two transaction layouts are supported:

* ``savepoint``: rows are grouped into chunks, each chunk runs in one outer
  transaction and every row gets its own SAVEPOINT. A failing row rolls back
  to its savepoint only.
* ``per_row``: every row runs in its own outer transaction.

Any exception raised by a write unit becomes a ``WriteFailure`` for that row;
it never aborts the rest of the batch.

``auto`` picks ``savepoint`` on PostgreSQL and ``per_row`` elsewhere.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.domain.bulk_import import (
    PendingWrite,
    RowResult,
    WriteFailure,
    WriteSuccess,
    WrittenRecord,
)

logger = logging.getLogger(__name__)

TypedRowT = TypeVar("TypedRowT")

WriteUnit = Callable[[Session, Any], WrittenRecord]

MODE_AUTO = "auto"
MODE_SAVEPOINT = "savepoint"
MODE_PER_ROW = "per_row"

_SAVEPOINT_DIALECTS = frozenset({"postgresql"})


class RowWriteError(RuntimeError):
    """
    Raised inside a write unit to abort that row with a readable reason.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class TransactionalWriter(Generic[TypedRowT]):
    """
    Applies a write unit to validated rows with per-row failure isolation.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        batch_size: int = 500,
        transaction_mode: str = MODE_AUTO,
    ) -> None:
        if transaction_mode not in {MODE_AUTO, MODE_SAVEPOINT, MODE_PER_ROW}:
            raise ValueError(f"Unknown transaction mode: {transaction_mode!r}")
        self._session_factory = session_factory
        self._batch_size = max(1, batch_size)
        self._requested_mode = transaction_mode
        self._mode: str | None = None

    @property
    def mode(self) -> str:
        if self._mode is None:
            self._mode = self._resolve_mode()
        return self._mode

    @property
    def chunk_size(self) -> int:
        return self._batch_size if self.mode == MODE_SAVEPOINT else 1

    def write_all(
        self,
        pending: Sequence[PendingWrite[TypedRowT]],
        unit: WriteUnit,
    ) -> list[RowResult]:
        """
        Write every pending row and return one result per row, in order.
        """

        results: list[RowResult] = []
        size = self.chunk_size
        for start in range(0, len(pending), size):
            results.extend(self.write_chunk(pending[start : start + size], unit))
        return results

    def write_chunk(
        self,
        chunk: Sequence[PendingWrite[TypedRowT]],
        unit: WriteUnit,
    ) -> list[RowResult]:
        if not chunk:
            return []
        if self.mode == MODE_PER_ROW:
            return [self._write_one(item, unit) for item in chunk]
        return self._write_with_savepoints(chunk, unit)

    # ------------------------------------------------------------------
    # Transaction layouts
    # ------------------------------------------------------------------

    def _write_with_savepoints(
        self,
        chunk: Sequence[PendingWrite[TypedRowT]],
        unit: WriteUnit,
    ) -> list[RowResult]:
        results: list[RowResult] = []
        try:
            with self._session_factory() as session, session.begin():
                for item in chunk:
                    try:
                        with session.begin_nested():
                            record = unit(session, item.typed)
                    except Exception as exc:
                        results.append(_failure(item, exc))
                        continue
                    results.append(WriteSuccess(item.row_number, item.natural_key, record))
        except SQLAlchemyError as exc:
            logger.warning(
                "Chunk commit failed rows=%s error=%s; retrying one transaction per row",
                len(chunk),
                exc.__class__.__name__,
            )
            return [self._write_one(item, unit) for item in chunk]
        return results

    def _write_one(self, item: PendingWrite[TypedRowT], unit: WriteUnit) -> RowResult:
        try:
            with self._session_factory() as session, session.begin():
                record = unit(session, item.typed)
        except Exception as exc:
            return _failure(item, exc)
        return WriteSuccess(item.row_number, item.natural_key, record)

    def _resolve_mode(self) -> str:
        if self._requested_mode != MODE_AUTO:
            return self._requested_mode
        with self._session_factory() as session:
            dialect = session.get_bind().dialect.name
        mode = MODE_SAVEPOINT if dialect in _SAVEPOINT_DIALECTS else MODE_PER_ROW
        logger.debug("Resolved transaction mode dialect=%s mode=%s", dialect, mode)
        return mode


def _failure(item: PendingWrite[Any], exc: Exception) -> WriteFailure:
    if not isinstance(exc, (RowWriteError, SQLAlchemyError)):
        logger.warning(
            "Unexpected write failure row=%s key=%s error=%s",
            item.row_number,
            item.natural_key,
            exc.__class__.__name__,
            exc_info=exc,
        )
    return WriteFailure(item.row_number, item.natural_key, _describe(exc))


def _describe(exc: Exception) -> str:
    if isinstance(exc, RowWriteError):
        return exc.reason
    if isinstance(exc, IntegrityError):
        detail = str(getattr(exc, "orig", None) or exc).splitlines()[0]
        return f"Integrity error: {detail}"
    if isinstance(exc, SQLAlchemyError):
        return f"Database error: {exc.__class__.__name__}"
    return f"Unexpected error: {exc.__class__.__name__}"
