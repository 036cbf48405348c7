"""
app/services/user_import_service.py

Bulk user import: one login identity plus its role profile per CSV row,
followed by a credential email to every created user.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date
from functools import lru_cache

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.config import CSVImportSettings, get_csv_import_settings, get_mail_settings
from app.domain.bulk_import import BatchResult, ImportRow, NotificationRequest, RowVerdict, WrittenRecord
from app.domain.college_import import NewUser, UserReferenceSnapshot
from app.ingestion.csv_parser import CSVSource
from app.ingestion.pipeline import BulkImportPipeline, ImportHandler
from app.ingestion.writer import RowWriteError
from app.notifications.base import NotificationTransport
from app.notifications.mailer import SMTPMailer
from app.notifications.templates import CREDENTIALS_SUBJECT, render_credentials_email
from app.repositories.reference_repository import ReferenceRepository
from app.repositories.user_repository import UserRepository
from app.security.passwords import generate_password, hash_password
from app.validators.user_row_validator import UserRowValidator
from db.models.user import UserRole
from db.session import get_session_factory

logger = logging.getLogger(__name__)


class UserImportHandler(ImportHandler[UserReferenceSnapshot, NewUser]):
    """
    Prefetches reference ids, validates rows and creates user + profile.
    """

    kind = "users"
    natural_key_column = "email"

    def __init__(
        self,
        *,
        settings: CSVImportSettings,
        validator: UserRowValidator | None = None,
        password_factory: Callable[[int], str] = generate_password,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._settings = settings
        self._validator = validator or UserRowValidator()
        self._password_factory = password_factory
        self._today = today

    def natural_key(self, row: ImportRow) -> str:
        return row.get("email", "").strip().lower()

    def load_snapshot(self, session: Session, rows: Sequence[ImportRow]) -> UserReferenceSnapshot:
        repository = ReferenceRepository(session)
        return UserReferenceSnapshot(
            program_ids=repository.program_ids(),
            section_ids=repository.section_ids(),
            department_ids=repository.department_ids(),
            existing_emails=repository.existing_emails(row.get("email", "") for row in rows),
        )

    def validate(self, row: ImportRow, snapshot: UserReferenceSnapshot) -> RowVerdict[NewUser]:
        return self._validator.validate(row, snapshot)

    def release(self, snapshot: UserReferenceSnapshot, typed: NewUser) -> None:
        snapshot.release_email(typed.email)

    def write(self, session: Session, typed: NewUser) -> WrittenRecord:
        repository = UserRepository(session)
        if typed.role == UserRole.STUDENT and repository.roll_number_exists(typed.roll_number):
            raise RowWriteError(f"Duplicate rollNumber: {typed.roll_number}")
        if typed.role == UserRole.STAFF and repository.employee_id_exists(typed.roll_number):
            raise RowWriteError(f"Duplicate employeeId: {typed.roll_number}")

        password = self._password_factory(self._settings.password_length)
        user = repository.create_user(
            name=typed.name,
            email=typed.email,
            password_hash=hash_password(password),
            role=typed.role,
        )

        try:
            if typed.role == UserRole.STUDENT:
                repository.create_student_profile(
                    user_id=user.id,
                    roll_number=typed.roll_number,
                    program_id=typed.program_id,
                    section_id=typed.section_id,
                    admission_year=typed.admission_year or self._today().year,
                    current_semester=self._settings.default_semester,
                    guardian_email=typed.guardian_email,
                    guardian_phone=typed.guardian_phone,
                )
            elif typed.role == UserRole.STAFF:
                repository.create_staff_profile(
                    user_id=user.id,
                    employee_id=typed.roll_number,
                    department_id=typed.department_id,
                    designation=typed.designation or self._settings.default_designation,
                )
        except IntegrityError as exc:
            label = "rollNumber" if typed.role == UserRole.STUDENT else "employeeId"
            raise RowWriteError(f"Duplicate {label}: {typed.roll_number}") from exc

        return WrittenRecord(
            record_id=user.id,
            fields={"email": user.email, "name": user.name, "role": user.role},
            notification=NotificationRequest(
                recipient=user.email,
                subject=CREDENTIALS_SUBJECT,
                body=render_credentials_email(name=user.name, email=user.email, password=password),
            ),
        )


class UserImportService:
    """
    Entry point for admin user uploads and the import CLI.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session],
        settings: CSVImportSettings,
        mailer: NotificationTransport | None = None,
        handler: UserImportHandler | None = None,
    ) -> None:
        self._pipeline = BulkImportPipeline(
            session_factory=session_factory,
            settings=settings,
            transport=mailer,
        )
        self._handler = handler or UserImportHandler(settings=settings)

    def import_users(self, source: CSVSource, *, send_mails: bool = True) -> BatchResult:
        """
        Create users from a CSV payload and optionally email their credentials.
        """

        result = self._pipeline.run(source, self._handler, notify=send_mails)
        logger.info(
            "User import finished created=%s skipped=%s invalid=%s errors=%s send_mails=%s",
            result.created_count,
            len(result.skipped),
            len(result.invalid),
            len(result.errors),
            send_mails,
        )
        return result


@lru_cache(maxsize=1)
def get_user_import_service() -> UserImportService:
    """
    Build and cache the user import service with env-driven settings.
    """
    return UserImportService(
        session_factory=get_session_factory(),
        settings=get_csv_import_settings(),
        mailer=SMTPMailer(get_mail_settings()),
    )
