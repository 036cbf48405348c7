"""
app/domain/bulk_import.py

Pipeline-level types shared by every bulk CSV import kind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

ImportRow = dict[str, str]

TypedRowT = TypeVar("TypedRowT")

EMPTY_INPUT_REASON = "No rows found in CSV."
NOTIFICATION_REASON_PREFIX = "Email failed: "


class RowClass:
    INVALID = "invalid"
    SKIPPED = "skipped"


class ErrorKind:
    WRITE = "write"
    NOTIFICATION = "notification"


@dataclass(frozen=True)
class RowVerdict(Generic[TypedRowT]):
    """
    Outcome of validating one row: either a typed row or exactly one reason.
    """

    ok: bool
    typed: TypedRowT | None = None
    reason: str | None = None
    classification: str | None = None

    @classmethod
    def accept(cls, typed: TypedRowT) -> "RowVerdict[TypedRowT]":
        return cls(ok=True, typed=typed)

    @classmethod
    def reject(cls, reason: str) -> "RowVerdict[TypedRowT]":
        return cls(ok=False, reason=reason, classification=RowClass.INVALID)

    @classmethod
    def skip(cls, reason: str) -> "RowVerdict[TypedRowT]":
        return cls(ok=False, reason=reason, classification=RowClass.SKIPPED)


@dataclass(frozen=True)
class NotificationRequest:
    """
    One outbound message produced by a successful write unit.
    """

    recipient: str
    subject: str
    body: str


@dataclass(frozen=True)
class WrittenRecord:
    """
    What a write unit hands back after its transaction commits.

    ``fields`` are copied into the ``created`` summary entry; ``notification``
    never is.
    """

    record_id: int
    fields: dict[str, Any] = field(default_factory=dict)
    notification: NotificationRequest | None = None


@dataclass(frozen=True)
class PendingWrite(Generic[TypedRowT]):
    row_number: int
    natural_key: str
    typed: TypedRowT


@dataclass(frozen=True)
class WriteSuccess:
    row_number: int
    natural_key: str
    record: WrittenRecord


@dataclass(frozen=True)
class WriteFailure:
    row_number: int
    natural_key: str
    reason: str


RowResult = WriteSuccess | WriteFailure


@dataclass(frozen=True)
class NotificationFailure:
    row_number: int
    natural_key: str
    reason: str


@dataclass
class BatchResult:
    """
    Final tally of one import call.

    Every parsed row lands in exactly one of ``created``, ``skipped``,
    ``invalid`` or the ``kind="write"`` part of ``errors``. Notification
    failures are additional ``errors`` entries for rows already in ``created``.
    """

    created: list[dict[str, Any]] = field(default_factory=list)
    skipped: list[dict[str, Any]] = field(default_factory=list)
    invalid: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def write_errors(self) -> list[dict[str, Any]]:
        return [entry for entry in self.errors if entry.get("kind") == ErrorKind.WRITE]

    @property
    def notification_errors(self) -> list[dict[str, Any]]:
        return [entry for entry in self.errors if entry.get("kind") == ErrorKind.NOTIFICATION]

    def to_dict(self) -> dict[str, Any]:
        return {
            "createdCount": self.created_count,
            "created": list(self.created),
            "skipped": list(self.skipped),
            "invalid": list(self.invalid),
            "errors": list(self.errors),
            "totalRows": self.total_rows,
        }
