"""
db/models/message_log.py

Delivery log for guardian notifications (one row per channel per send attempt).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONType, TimestampMixin


class MessageType:
    ABSENCE_ALERT = "ABSENCE_ALERT"


class MessageChannel:
    EMAIL = "EMAIL"
    SMS = "SMS"


class MessageStatus:
    SENT = "SENT"
    FAILED = "FAILED"


class MessageLog(Base, TimestampMixin):
    __tablename__ = "message_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    message_type: Mapped[str] = mapped_column(String(32), nullable=False)
    channel: Mapped[str] = mapped_column(String(16), nullable=False, comment="EMAIL, SMS")
    status: Mapped[str] = mapped_column(String(16), nullable=False, comment="SENT, FAILED")
    payload: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)

    __table_args__ = (
        Index("ix_message_logs_student_id", "student_id"),
        Index("ix_message_logs_type_channel", "message_type", "channel"),
    )
