"""
tests/conftest.py

Shared fixtures: an in-memory SQLite database with working SAVEPOINTs,
seeded reference data and recording notification transports.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ALERT_JOB_ENABLED", "false")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401
from app.config import CSVImportSettings
from db.base import Base
from db.models import (
    AcademicTerm,
    Assessment,
    ClassSession,
    Department,
    Program,
    Section,
    Staff,
    Student,
    Subject,
    User,
    UserRole,
)
from db.session import build_session_factory

# Placeholder; seeded accounts never log in.
SEED_PASSWORD_HASH = "$2b$04$seedseedseedseedseedseOZ2q3Yq1lqkB3gGx4iYk3d5a0a9xq6u"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine() -> Engine:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite starts transactions lazily and breaks SAVEPOINT; take over BEGIN.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:  # noqa: ANN001
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection) -> None:  # noqa: ANN001
        connection.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return build_session_factory(engine)


@pytest.fixture(params=["per_row", "savepoint"])
def import_settings(request: pytest.FixtureRequest) -> CSVImportSettings:
    """CSV import settings, run once per transaction layout."""
    return CSVImportSettings(
        batch_size=2,
        transaction_mode=request.param,
        notify_max_workers=2,
        log_row_issues=True,
    )


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Seed:
    department_id: int
    program_id: int
    section_id: int
    other_section_id: int
    subject_id: int
    term_id: int
    staff_id: int
    other_staff_id: int
    session_id: int
    assessment_id: int
    students: dict[str, int]


def _add_user(session: Session, *, name: str, email: str, role: str) -> User:
    user = User(name=name, email=email, password_hash=SEED_PASSWORD_HASH, role=role)
    session.add(user)
    session.flush()
    return user


@pytest.fixture()
def seed(session_factory: sessionmaker[Session]) -> Seed:
    with session_factory() as session, session.begin():
        department = Department(name="Computer Science", code="CSE")
        session.add(department)
        session.flush()

        program = Program(name="B.Tech CSE", code="BTCSE", department_id=department.id)
        session.add(program)
        session.flush()

        section = Section(name="A", academic_year=2025, program_id=program.id)
        other_section = Section(name="B", academic_year=2025, program_id=program.id)
        subject = Subject(name="Data Structures", code="CS201")
        term = AcademicTerm(name="Odd 2025", start_date=date(2025, 7, 1), end_date=date(2025, 12, 15))
        session.add_all([section, other_section, subject, term])
        session.flush()

        staff_ids = []
        for index in (1, 2):
            staff_user = _add_user(
                session,
                name=f"Teacher {index}",
                email=f"teacher{index}@college.edu",
                role=UserRole.STAFF,
            )
            staff = Staff(
                user_id=staff_user.id,
                employee_id=f"EMP{index:03d}",
                department_id=department.id,
                designation="Teacher",
            )
            session.add(staff)
            session.flush()
            staff_ids.append(staff.id)

        students: dict[str, int] = {}
        for roll_number, name, section_id in (
            ("R001", "Asha Rao", section.id),
            ("R002", "Vikram Das", section.id),
            ("R003", "Meera Iyer", section.id),
            ("R900", "Other Section", other_section.id),
        ):
            user = _add_user(
                session,
                name=name,
                email=f"{roll_number.lower()}@college.edu",
                role=UserRole.STUDENT,
            )
            student = Student(
                user_id=user.id,
                roll_number=roll_number,
                admission_year=2025,
                current_semester=1,
                program_id=program.id,
                section_id=section_id,
                guardian_email=f"guardian.{roll_number.lower()}@example.org",
                guardian_phone="+919800000000",
            )
            session.add(student)
            session.flush()
            students[roll_number] = student.id

        class_session = ClassSession(
            section_id=section.id,
            subject_id=subject.id,
            term_id=term.id,
            scheduled_at=datetime(2026, 3, 10, 4, 30, tzinfo=timezone.utc),
            duration_min=60,
            room="LH-1",
            taken_by_staff_id=staff_ids[0],
        )
        assessment = Assessment(
            name="Mid-term",
            date=date(2026, 3, 12),
            max_marks=50,
            weightage=20.0,
            section_id=section.id,
            subject_id=subject.id,
            term_id=term.id,
            created_by_id=staff_ids[0],
        )
        session.add_all([class_session, assessment])
        session.flush()

        return Seed(
            department_id=department.id,
            program_id=program.id,
            section_id=section.id,
            other_section_id=other_section.id,
            subject_id=subject.id,
            term_id=term.id,
            staff_id=staff_ids[0],
            other_staff_id=staff_ids[1],
            session_id=class_session.id,
            assessment_id=assessment.id,
            students=students,
        )


# ---------------------------------------------------------------------------
# Notification transports
# ---------------------------------------------------------------------------


class RecordingTransport:
    """
    Transport double: records every send, fails or raises for chosen recipients.
    """

    def __init__(self, *, reject: set[str] | None = None, explode: set[str] | None = None) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self._reject = reject or set()
        self._explode = explode or set()
        self._lock = threading.Lock()

    def send(self, recipient: str, subject: str, body: str) -> bool:
        with self._lock:
            self.sent.append((recipient, subject, body))
        if recipient in self._explode:
            raise RuntimeError("SMTP connection refused")
        return recipient not in self._reject

    @property
    def recipients(self) -> list[str]:
        return [recipient for recipient, _, _ in self.sent]


@pytest.fixture()
def mailer() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def transport_factory() -> type[RecordingTransport]:
    return RecordingTransport
