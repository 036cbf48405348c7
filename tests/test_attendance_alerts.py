"""
tests/test_attendance_alerts.py

Daily guardian alert run against seeded attendance.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from sqlalchemy import select

from app.repositories.attendance_repository import AttendanceRepository
from app.repositories.holiday_repository import HolidayRepository
from app.services.attendance_alert_service import AttendanceAlertService
from db.models import MessageLog

NOW = datetime(2026, 3, 10, 12, 30, tzinfo=timezone.utc)
MARKED_AT = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def marked_attendance(session_factory, seed) -> None:
    with session_factory() as session, session.begin():
        repository = AttendanceRepository(session)
        for roll_number, status in (("R001", "ABSENT"), ("R002", "PRESENT"), ("R003", "LATE")):
            repository.upsert(
                session_id=seed.session_id,
                student_id=seed.students[roll_number],
                subject_id=seed.subject_id,
                status=status,
                marked_at=MARKED_AT,
            )


def _service(session_factory, mailer, sms_sender) -> AttendanceAlertService:
    return AttendanceAlertService(
        session_factory=session_factory,
        mailer=mailer,
        sms_sender=sms_sender,
        timezone_name="Asia/Kolkata",
        max_workers=2,
    )


def _logs(session_factory) -> list[tuple[int, str, str]]:
    with session_factory() as session:
        rows = session.scalars(select(MessageLog).order_by(MessageLog.student_id, MessageLog.channel)).all()
        return [(row.student_id, row.channel, row.status) for row in rows]


class TestAttendanceAlertService:
    def test_alerts_absent_and_late_students(self, session_factory, seed, marked_attendance, transport_factory) -> None:
        mailer = transport_factory()
        sms_sender = transport_factory()

        summary = _service(session_factory, mailer, sms_sender).run(now=NOW)

        assert summary.run_date == date(2026, 3, 10)
        assert summary.students == 2
        assert summary.emails_sent == 2
        assert summary.sms_sent == 2
        assert sorted(mailer.recipients) == ["guardian.r001@example.org", "guardian.r003@example.org"]
        assert all(subject == "Daily Attendance Alert" for _, subject, _ in mailer.sent)
        body = dict((recipient, text) for recipient, _, text in mailer.sent)["guardian.r001@example.org"]
        assert "Asha Rao" in body
        assert "Data Structures" in body
        assert "10:00 AM" in body
        assert "10/03/2026" in body
        assert "Asha Rao" in sms_sender.sent[0][2] or "Meera Iyer" in sms_sender.sent[0][2]

        r001, r003 = seed.students["R001"], seed.students["R003"]
        assert _logs(session_factory) == sorted(
            [
                (r001, "EMAIL", "SENT"),
                (r001, "SMS", "SENT"),
                (r003, "EMAIL", "SENT"),
                (r003, "SMS", "SENT"),
            ]
        )

    def test_failed_deliveries_are_logged(self, session_factory, seed, marked_attendance, transport_factory) -> None:
        mailer = transport_factory(explode={"guardian.r001@example.org"})
        sms_sender = transport_factory(reject={"+919800000000"})

        summary = _service(session_factory, mailer, sms_sender).run(now=NOW)

        assert summary.students == 2
        assert summary.emails_sent == 1
        assert summary.sms_sent == 0
        statuses = {(student_id, channel): status for student_id, channel, status in _logs(session_factory)}
        assert statuses[(seed.students["R001"], "EMAIL")] == "FAILED"
        assert statuses[(seed.students["R003"], "EMAIL")] == "SENT"
        assert statuses[(seed.students["R001"], "SMS")] == "FAILED"

    def test_payload_lists_the_days_records(self, session_factory, seed, marked_attendance, transport_factory) -> None:
        _service(session_factory, transport_factory(), transport_factory()).run(now=NOW)

        with session_factory() as session:
            log = session.scalars(
                select(MessageLog).where(
                    MessageLog.student_id == seed.students["R003"],
                    MessageLog.channel == "EMAIL",
                )
            ).one()
        assert log.message_type == "ABSENCE_ALERT"
        assert log.payload["studentName"] == "Meera Iyer"
        assert [record["status"] for record in log.payload["records"]] == ["LATE"]
        assert log.payload["records"][0]["scheduledAt"].startswith("2026-03-10T10:00:00+05:30")

    def test_holiday_skips_the_run(self, session_factory, seed, marked_attendance, transport_factory) -> None:
        with session_factory() as session, session.begin():
            HolidayRepository(session).create(name="Holi", day=date(2026, 3, 10))
        mailer = transport_factory()

        summary = _service(session_factory, mailer, transport_factory()).run(now=NOW)

        assert summary.skipped_holiday is True
        assert summary.students == 0
        assert mailer.sent == []
        assert _logs(session_factory) == []

    def test_other_days_are_ignored(self, session_factory, seed, marked_attendance, transport_factory) -> None:
        mailer = transport_factory()

        summary = _service(session_factory, mailer, transport_factory()).run(
            now=datetime(2026, 3, 11, 12, 30, tzinfo=timezone.utc)
        )

        assert summary.to_dict() == {
            "run_date": "2026-03-11",
            "skipped_holiday": False,
            "students": 0,
            "emails_sent": 0,
            "sms_sent": 0,
        }
        assert mailer.sent == []
