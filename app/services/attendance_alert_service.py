"""
app/services/attendance_alert_service.py

Daily guardian alert: email and SMS the guardian of every student marked
ABSENT or LATE today, then log one delivery row per channel.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session, sessionmaker

from app.config import get_alert_job_settings, get_mail_settings, get_sms_settings
from app.notifications.base import NotificationTransport
from app.notifications.mailer import SMTPMailer
from app.notifications.sms import TwilioSMSSender
from app.notifications.templates import (
    ATTENDANCE_ALERT_SUBJECT,
    render_attendance_alert_email,
    render_attendance_alert_sms,
)
from app.repositories.attendance_repository import AbsentStudent, AttendanceRepository
from app.repositories.holiday_repository import HolidayRepository
from app.repositories.message_log_repository import MessageLogRepository
from db.models.message_log import MessageChannel, MessageStatus, MessageType
from db.session import get_session_factory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertRunSummary:
    run_date: date
    skipped_holiday: bool = False
    students: int = 0
    emails_sent: int = 0
    sms_sent: int = 0

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["run_date"] = self.run_date.isoformat()
        return payload


@dataclass(frozen=True)
class _Delivery:
    student: AbsentStudent
    email_sent: bool
    sms_sent: bool


class AttendanceAlertService:
    """
    Runs one pass of the guardian attendance alert for the local calendar day.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session],
        mailer: NotificationTransport,
        sms_sender: NotificationTransport,
        timezone_name: str = "Asia/Kolkata",
        max_workers: int = 4,
    ) -> None:
        self._session_factory = session_factory
        self._mailer = mailer
        self._sms_sender = sms_sender
        self._tz = ZoneInfo(timezone_name)
        self._max_workers = max(2, max_workers)

    def run(self, now: datetime | None = None) -> AlertRunSummary:
        """
        Send today's alerts. ``now`` defaults to the current time.
        """

        local_now = (now or datetime.now(timezone.utc)).astimezone(self._tz)
        today = local_now.date()
        start_local = datetime.combine(today, time.min, tzinfo=self._tz)
        start = start_local.astimezone(timezone.utc)
        end = (start_local + timedelta(days=1)).astimezone(timezone.utc)

        with self._session_factory() as session:
            if HolidayRepository(session).is_holiday(today):
                logger.info("Attendance alerts skipped: %s is a holiday", today.isoformat())
                return AlertRunSummary(run_date=today, skipped_holiday=True)
            students = AttendanceRepository(session).students_flagged_between(start, end)

        logger.info("Attendance alerts date=%s flagged_students=%s", today.isoformat(), len(students))
        if not students:
            return AlertRunSummary(run_date=today)

        deliveries = self._deliver_all(students, today)
        self._record(deliveries)

        summary = AlertRunSummary(
            run_date=today,
            students=len(deliveries),
            emails_sent=sum(1 for delivery in deliveries if delivery.email_sent),
            sms_sent=sum(1 for delivery in deliveries if delivery.sms_sent),
        )
        logger.info(
            "Attendance alerts finished date=%s students=%s emails_sent=%s sms_sent=%s",
            today.isoformat(),
            summary.students,
            summary.emails_sent,
            summary.sms_sent,
        )
        return summary

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _deliver_all(self, students: list[AbsentStudent], today: date) -> list[_Delivery]:
        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="attendance-alert") as pool:
            pending = [
                (
                    student,
                    pool.submit(
                        self._send,
                        self._mailer,
                        student.guardian_email,
                        ATTENDANCE_ALERT_SUBJECT,
                        self._email_body(student, today),
                    ),
                    pool.submit(
                        self._send,
                        self._sms_sender,
                        student.guardian_phone,
                        ATTENDANCE_ALERT_SUBJECT,
                        render_attendance_alert_sms(student_name=student.name),
                    ),
                )
                for student in students
            ]
            return [
                _Delivery(student=student, email_sent=email.result(), sms_sent=sms.result())
                for student, email, sms in pending
            ]

    def _email_body(self, student: AbsentStudent, today: date) -> str:
        return render_attendance_alert_email(
            student_name=student.name,
            report_date=today,
            lines=[(line.subject_name, self._local(line.scheduled_at), line.status) for line in student.lines],
        )

    @staticmethod
    def _send(transport: NotificationTransport, recipient: str | None, subject: str, body: str) -> bool:
        if not recipient:
            return False
        try:
            return bool(transport.send(recipient, subject, body))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Attendance alert delivery failed to=%s error=%s", recipient, exc)
            return False

    def _record(self, deliveries: list[_Delivery]) -> None:
        with self._session_factory() as session, session.begin():
            repository = MessageLogRepository(session)
            for delivery in deliveries:
                student = delivery.student
                repository.record(
                    student_id=student.student_id,
                    message_type=MessageType.ABSENCE_ALERT,
                    channel=MessageChannel.EMAIL,
                    status=MessageStatus.SENT if delivery.email_sent else MessageStatus.FAILED,
                    payload={
                        "studentName": student.name,
                        "records": [
                            {
                                "subject": line.subject_name,
                                "scheduledAt": self._local(line.scheduled_at).isoformat(),
                                "status": line.status,
                            }
                            for line in student.lines
                        ],
                    },
                )
                repository.record(
                    student_id=student.student_id,
                    message_type=MessageType.ABSENCE_ALERT,
                    channel=MessageChannel.SMS,
                    status=MessageStatus.SENT if delivery.sms_sent else MessageStatus.FAILED,
                    payload={"studentName": student.name},
                )

    def _local(self, value: datetime) -> datetime:
        # SQLite hands back naive values; they are stored as UTC.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(self._tz)


@lru_cache(maxsize=1)
def get_attendance_alert_service() -> AttendanceAlertService:
    return AttendanceAlertService(
        session_factory=get_session_factory(),
        mailer=SMTPMailer(get_mail_settings()),
        sms_sender=TwilioSMSSender(get_sms_settings()),
        timezone_name=get_alert_job_settings().timezone,
    )
