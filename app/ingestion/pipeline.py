"""
app/ingestion/pipeline.py

Generic bulk import orchestration: parse, validate, write, notify, report.

Each import kind plugs in through an ``ImportHandler``; the pipeline owns the
row loop, the transaction layout and the notification task group.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from app.config import CSVImportSettings
from app.domain.bulk_import import (
    BatchResult,
    ImportRow,
    PendingWrite,
    RowClass,
    RowResult,
    RowVerdict,
    WriteFailure,
    WriteSuccess,
    WrittenRecord,
)
from app.ingestion.csv_parser import CSVSource, parse_csv
from app.ingestion.notifier import Notifier
from app.ingestion.reporter import BatchReporter
from app.ingestion.writer import TransactionalWriter
from app.notifications.base import NotificationTransport

logger = logging.getLogger(__name__)

SnapshotT = TypeVar("SnapshotT")
TypedRowT = TypeVar("TypedRowT")


class ImportHandler(ABC, Generic[SnapshotT, TypedRowT]):
    """
    Per-kind plug-in: reference prefetch, row validation and the write unit.
    """

    kind: str = "generic"
    natural_key_column: str = ""

    @abstractmethod
    def load_snapshot(self, session: Session, rows: Sequence[ImportRow]) -> SnapshotT:
        """
        Fetch the reference data the batch is validated against.
        """

    @abstractmethod
    def validate(self, row: ImportRow, snapshot: SnapshotT) -> RowVerdict[TypedRowT]:
        """
        Classify one row; must not touch the database.
        """

    @abstractmethod
    def write(self, session: Session, typed: TypedRowT) -> WrittenRecord:
        """
        Perform every write for one row inside the caller's transaction.
        """

    def release(self, snapshot: SnapshotT, typed: TypedRowT) -> None:
        """
        Undo any batch-local claim ``validate`` made for a row that failed to write.
        """

    def natural_key(self, row: ImportRow) -> str:
        return row.get(self.natural_key_column, "").strip()


class BulkImportPipeline:
    """
    Runs one CSV payload through an import handler.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session],
        settings: CSVImportSettings,
        transport: NotificationTransport | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings
        self._transport = transport

    def run(
        self,
        source: CSVSource,
        handler: ImportHandler[Any, Any],
        *,
        notify: bool = True,
    ) -> BatchResult:
        """
        Import every row of ``source`` and return the batch summary.

        Only ``ParseError`` escapes; every per-row problem is folded into the
        result.
        """

        rows = list(parse_csv(source).numbered())
        reporter = BatchReporter(kind=handler.kind, log_row_issues=self._settings.log_row_issues)
        reporter.set_total_rows(len(rows))
        if not rows:
            reporter.mark_empty()
            return reporter.finalize()

        logger.info("CSV import kind=%s started rows=%s", handler.kind, len(rows))

        with self._session_factory() as session:
            snapshot = handler.load_snapshot(session, [row for _, row in rows])

        writer: TransactionalWriter[Any] = TransactionalWriter(
            self._session_factory,
            batch_size=self._settings.batch_size,
            transaction_mode=self._settings.transaction_mode,
        )
        notifier = self._build_notifier() if notify else None

        try:
            pending: list[PendingWrite[Any]] = []
            for row_number, row in rows:
                verdict = handler.validate(row, snapshot)
                if verdict.classification == RowClass.SKIPPED and pending:
                    # The claim behind the skip may belong to a pending row
                    # that has yet to commit; settle the chunk and look again.
                    self._flush(writer, handler, snapshot, pending, reporter, notifier)
                    pending = []
                    verdict = handler.validate(row, snapshot)
                if not verdict.ok:
                    reason = verdict.reason or "Row rejected."
                    if verdict.classification == RowClass.SKIPPED:
                        reporter.add_skipped(row_number, handler.natural_key(row), reason)
                    else:
                        reporter.add_invalid(row_number, row, reason)
                    continue

                pending.append(PendingWrite(row_number, handler.natural_key(row), verdict.typed))
                if len(pending) >= writer.chunk_size:
                    self._flush(writer, handler, snapshot, pending, reporter, notifier)
                    pending = []

            self._flush(writer, handler, snapshot, pending, reporter, notifier)
        finally:
            if notifier is not None:
                for failure in notifier.join():
                    reporter.add_notification_failure(failure)
                notifier.shutdown()

        return reporter.finalize()

    def _build_notifier(self) -> Notifier | None:
        if self._transport is None:
            return None
        return Notifier(self._transport, max_workers=self._settings.notify_max_workers)

    @staticmethod
    def _flush(
        writer: TransactionalWriter[Any],
        handler: ImportHandler[Any, Any],
        snapshot: Any,
        pending: list[PendingWrite[Any]],
        reporter: BatchReporter,
        notifier: Notifier | None,
    ) -> None:
        if not pending:
            return
        results: list[RowResult] = writer.write_chunk(pending, handler.write)
        for item, result in zip(pending, results):
            reporter.add_result(result)
            if isinstance(result, WriteFailure):
                handler.release(snapshot, item.typed)
            elif (
                notifier is not None
                and isinstance(result, WriteSuccess)
                and result.record.notification is not None
            ):
                notifier.submit_request(
                    result.natural_key,
                    result.record.notification,
                    row_number=result.row_number,
                )
