"""
app/ingestion/notifier.py

Best-effort delivery of post-write notifications on a bounded thread pool.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from app.domain.bulk_import import NOTIFICATION_REASON_PREFIX, NotificationFailure, NotificationRequest
from app.notifications.base import NotificationTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Submitted:
    row_number: int
    natural_key: str
    future: Future[str | None]


class Notifier:
    """
    Sends one message per created record without blocking the writer.

    Each send runs on the pool; ``join()`` waits for every task and returns the
    failures in submission order. A failed send never touches the record that
    triggered it.
    """

    def __init__(self, transport: NotificationTransport, *, max_workers: int = 4) -> None:
        self._transport = transport
        self._max_workers = max(1, max_workers)
        self._executor: ThreadPoolExecutor | None = None
        self._submitted: list[_Submitted] = []

    def __enter__(self) -> "Notifier":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def submit(
        self,
        natural_key: str,
        recipient: str,
        subject: str,
        body: str,
        *,
        row_number: int = 0,
    ) -> None:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix="import-notify",
            )
        future = self._executor.submit(self._deliver, recipient, subject, body)
        self._submitted.append(_Submitted(row_number, natural_key, future))

    def submit_request(self, natural_key: str, request: NotificationRequest, *, row_number: int = 0) -> None:
        self.submit(
            natural_key,
            request.recipient,
            request.subject,
            request.body,
            row_number=row_number,
        )

    def join(self) -> list[NotificationFailure]:
        failures: list[NotificationFailure] = []
        for submitted in self._submitted:
            reason = submitted.future.result()
            if reason is None:
                continue
            logger.warning(
                "Notification failed row=%s key=%s reason=%s",
                submitted.row_number,
                submitted.natural_key,
                reason,
            )
            failures.append(
                NotificationFailure(
                    row_number=submitted.row_number,
                    natural_key=submitted.natural_key,
                    reason=f"{NOTIFICATION_REASON_PREFIX}{reason}",
                )
            )
        self._submitted = []
        return failures

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _deliver(self, recipient: str, subject: str, body: str) -> str | None:
        try:
            accepted = self._transport.send(recipient, subject, body)
        except Exception as exc:  # noqa: BLE001
            return str(exc) or exc.__class__.__name__
        if not accepted:
            return "transport rejected the message"
        return None
