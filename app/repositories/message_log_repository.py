"""
app/repositories/message_log_repository.py

Persistence of guardian notification delivery outcomes.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from db.models.message_log import MessageLog


class MessageLogRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def record(
        self,
        *,
        student_id: int,
        message_type: str,
        channel: str,
        status: str,
        payload: dict[str, Any] | None = None,
    ) -> MessageLog:
        log = MessageLog(
            student_id=student_id,
            message_type=message_type,
            channel=channel,
            status=status,
            payload=payload,
        )
        self._session.add(log)
        return log
