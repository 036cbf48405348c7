"""
tests/test_user_import.py

End-to-end tests for the bulk user import against an in-memory database.

Coverage
--------
- Mixed batch: created, invalid and in-batch duplicate rows
- Re-import of the same file creates nothing
- User and profile are written atomically
- Duplicate roll numbers and employee ids surface as write errors
- Credential emails: one per created user, failures isolated
- send_mails=False and empty input
"""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.config import CSVImportSettings
from app.ingestion.csv_parser import ParseError
from app.repositories.user_repository import UserRepository
from app.security.passwords import verify_password
from app.services.user_import_service import UserImportHandler, UserImportService
from db.models import Staff, Student, User, UserRole

HEADER = "name,email,rollNumber,role,programId,sectionId,departmentId,guardianEmail,guardianPhone\n"


def _service(session_factory, settings: CSVImportSettings, mailer) -> UserImportService:
    handler = UserImportHandler(
        settings=settings,
        password_factory=lambda length: "Secret123",
        today=lambda: date(2026, 7, 1),
    )
    return UserImportService(
        session_factory=session_factory,
        settings=settings,
        mailer=mailer,
        handler=handler,
    )


def _count(session_factory, model) -> int:
    with session_factory() as session:
        return session.scalar(select(func.count()).select_from(model))


def _csv(seed, *rows: str) -> bytes:
    body = "".join(row.format(p=seed.program_id, s=seed.section_id, d=seed.department_id) + "\n" for row in rows)
    return (HEADER + body).encode("utf-8")


# ---------------------------------------------------------------------------
# Batch classification
# ---------------------------------------------------------------------------


class TestUserImportBatch:
    def test_mixed_batch(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(
            seed,
            "Anita,anita@college.edu,S100,STUDENT,{p},{s},,parent.a@mail.com,+919811111111",
            "Bad Role,bad@college.edu,S101,DEAN,{p},{s},,,",
            "Chirag,Chirag@College.edu,E100,STAFF,,,{d},,",
            "Anita Again,ANITA@college.edu,S102,STUDENT,{p},{s},,,",
        )

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert result.total_rows == 4
        assert [entry["row"] for entry in result.created] == [2, 4]
        assert [entry["email"] for entry in result.created] == ["anita@college.edu", "chirag@college.edu"]
        assert [entry["row"] for entry in result.invalid] == [3]
        assert result.invalid[0]["reason"].startswith("Invalid role 'DEAN'")
        assert result.skipped == [{"row": 5, "naturalKey": "anita@college.edu", "reason": "Duplicate email"}]
        assert result.errors == []
        assert sorted(mailer.recipients) == ["anita@college.edu", "chirag@college.edu"]

        with session_factory() as session:
            student = session.scalar(select(Student).where(Student.roll_number == "S100"))
            staff = session.scalar(select(Staff).where(Staff.employee_id == "E100"))
            assert student is not None and staff is not None
            assert student.admission_year == 2026
            assert student.current_semester == import_settings.default_semester
            assert student.guardian_email == "parent.a@mail.com"
            assert staff.designation == "Teacher"
            assert staff.department_id == seed.department_id

    def test_created_entries_never_carry_passwords(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(seed, "Anita,anita@college.edu,S100,STUDENT,{p},{s},,,")

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert "Secret123" not in repr(result.to_dict())
        assert set(result.created[0]) == {"row", "id", "naturalKey", "email", "name", "role"}

    def test_reimport_creates_nothing(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(
            seed,
            "Anita,anita@college.edu,S100,STUDENT,{p},{s},,,",
            "Chirag,chirag@college.edu,E100,STAFF,,,{d},,",
        )
        service = _service(session_factory, import_settings, mailer)
        service.import_users(payload)
        users_before = _count(session_factory, User)

        second = service.import_users(payload)

        assert second.created_count == 0
        assert [entry["reason"] for entry in second.skipped] == ["Duplicate email", "Duplicate email"]
        assert _count(session_factory, User) == users_before
        assert len(mailer.sent) == 2

    def test_unknown_references_are_invalid(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(
            seed,
            "Anita,anita@college.edu,S100,STUDENT,999,{s},,,",
            "Chirag,chirag@college.edu,E100,STAFF,,,,,",
        )

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert [entry["reason"] for entry in result.invalid] == ["Invalid programId: 999", "Missing departmentId"]
        assert result.invalid[0]["email"] == "anita@college.edu"
        assert result.created_count == 0
        assert mailer.sent == []

    def test_admin_gets_no_profile(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(seed, "Root,root@college.edu,A1,admin,,,,,")

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert result.created[0]["role"] == "ADMIN"
        with session_factory() as session:
            user = session.scalar(select(User).where(User.email == "root@college.edu"))
            assert user.student is None and user.staff is None

    def test_password_is_stored_hashed(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(seed, "Anita,anita@college.edu,S100,STUDENT,{p},{s},,,")

        _service(session_factory, import_settings, mailer).import_users(payload)

        with session_factory() as session:
            user = session.scalar(select(User).where(User.email == "anita@college.edu"))
            assert user.password_hash != "Secret123"
            assert verify_password("Secret123", user.password_hash)
        assert "<p><b>Password:</b> Secret123</p>" in mailer.sent[0][2]

    def test_existing_email_matches_regardless_of_case(self, session_factory, import_settings, seed, mailer) -> None:
        with session_factory() as session, session.begin():
            session.add(
                User(
                    name="Pre Existing",
                    email="Pre.Existing@College.edu",
                    password_hash="x",
                    role=UserRole.ADMIN,
                )
            )
        payload = _csv(seed, "Again,pre.existing@college.edu,S110,STUDENT,{p},{s},,,")

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert result.created_count == 0
        assert result.skipped == [{"row": 2, "naturalKey": "pre.existing@college.edu", "reason": "Duplicate email"}]
        with session_factory() as session:
            matches = session.scalar(
                select(func.count()).select_from(User).where(func.lower(User.email) == "pre.existing@college.edu")
            )
        assert matches == 1

    def test_store_rejects_case_variant_emails(self, session_factory, seed) -> None:
        with pytest.raises(IntegrityError):
            with session_factory() as session, session.begin():
                session.add(User(name="One", email="Same@College.edu", password_hash="x", role=UserRole.ADMIN))
                session.add(User(name="Two", email="same@college.edu", password_hash="x", role=UserRole.ADMIN))

    def test_out_of_range_admission_year_is_invalid(self, session_factory, import_settings, seed, mailer) -> None:
        payload = (
            "name,email,rollNumber,role,programId,sectionId,admissionYear\n"
            f"Ok,ok@college.edu,S120,STUDENT,{seed.program_id},{seed.section_id},2025\n"
            f"Huge,huge@college.edu,S121,STUDENT,{seed.program_id},{seed.section_id},99999999999999999999\n"
        ).encode("utf-8")

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert [entry["row"] for entry in result.created] == [2]
        assert result.invalid[0]["reason"] == "Invalid admissionYear: 99999999999999999999"
        with session_factory() as session:
            student = session.scalar(select(Student).where(Student.roll_number == "S120"))
            assert student.admission_year == 2025


# ---------------------------------------------------------------------------
# Write failures
# ---------------------------------------------------------------------------


class TestUserImportWriteFailures:
    def test_duplicate_roll_number_is_a_write_error(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(
            seed,
            "Clash,clash@college.edu,R001,STUDENT,{p},{s},,,",
            "Fresh,fresh@college.edu,S200,STUDENT,{p},{s},,,",
        )

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert result.errors == [
            {"row": 2, "naturalKey": "clash@college.edu", "reason": "Duplicate rollNumber: R001", "kind": "write"}
        ]
        assert [entry["row"] for entry in result.created] == [3]
        assert mailer.recipients == ["fresh@college.edu"]
        with session_factory() as session:
            assert session.scalar(select(User).where(User.email == "clash@college.edu")) is None

    def test_duplicate_employee_id_is_a_write_error(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(seed, "Clash,clash@college.edu,EMP001,STAFF,,,{d},,")

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert result.write_errors[0]["reason"] == "Duplicate employeeId: EMP001"

    def test_roll_number_repeated_inside_batch(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(
            seed,
            "First,first@college.edu,S300,STUDENT,{p},{s},,,",
            "Second,second@college.edu,S300,STUDENT,{p},{s},,,",
        )

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert [entry["row"] for entry in result.created] == [2]
        assert result.write_errors[0]["row"] == 3
        assert result.write_errors[0]["reason"] == "Duplicate rollNumber: S300"
        with session_factory() as session:
            assert session.scalar(select(User).where(User.email == "second@college.edu")) is None

    def test_email_of_failed_row_is_free_for_a_later_row(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(
            seed,
            "Clash,retry@college.edu,R001,STUDENT,{p},{s},,,",
            "Retry,retry@college.edu,S210,STUDENT,{p},{s},,,",
        )

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert result.write_errors[0]["row"] == 2
        assert [entry["row"] for entry in result.created] == [3]
        assert result.skipped == []
        with session_factory() as session:
            user = session.scalar(select(User).where(User.email == "retry@college.edu"))
            assert user.student.roll_number == "S210"

    def test_profile_failure_leaves_no_orphan_user(
        self,
        session_factory,
        import_settings,
        seed,
        mailer,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        original = UserRepository.create_student_profile

        def flaky(self, **kwargs):
            if kwargs["roll_number"] == "S401":
                raise SQLAlchemyError("disk full")
            return original(self, **kwargs)

        monkeypatch.setattr(UserRepository, "create_student_profile", flaky)
        payload = _csv(
            seed,
            "Ok,ok@college.edu,S400,STUDENT,{p},{s},,,",
            "Broken,broken@college.edu,S401,STUDENT,{p},{s},,,",
            "Ok Too,ok2@college.edu,S402,STUDENT,{p},{s},,,",
        )

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert [entry["row"] for entry in result.created] == [2, 4]
        assert result.write_errors == [
            {"row": 3, "naturalKey": "broken@college.edu", "reason": "Database error: SQLAlchemyError", "kind": "write"}
        ]
        with session_factory() as session:
            assert session.scalar(select(User).where(User.email == "broken@college.edu")) is None
        assert "broken@college.edu" not in mailer.recipients


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class TestUserImportNotifications:
    def test_mail_failure_does_not_undo_creation(self, session_factory, import_settings, seed, transport_factory) -> None:
        mailer = transport_factory(explode={"b@college.edu"}, reject={"c@college.edu"})
        payload = _csv(
            seed,
            "A,a@college.edu,S500,STUDENT,{p},{s},,,",
            "B,b@college.edu,S501,STUDENT,{p},{s},,,",
            "C,c@college.edu,S502,STUDENT,{p},{s},,,",
        )

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert result.created_count == 3
        assert result.write_errors == []
        assert result.notification_errors == [
            {"row": 3, "naturalKey": "b@college.edu", "reason": "Email failed: SMTP connection refused", "kind": "notification"},
            {"row": 4, "naturalKey": "c@college.edu", "reason": "Email failed: transport rejected the message", "kind": "notification"},
        ]
        assert _count(session_factory, Student) == len(seed.students) + 3

    def test_errors_are_ordered_by_row(self, session_factory, import_settings, seed, transport_factory) -> None:
        mailer = transport_factory(explode={"a@college.edu"})
        payload = _csv(
            seed,
            "A,a@college.edu,S600,STUDENT,{p},{s},,,",
            "Clash,clash@college.edu,R001,STUDENT,{p},{s},,,",
        )

        result = _service(session_factory, import_settings, mailer).import_users(payload)

        assert [(entry["row"], entry["kind"]) for entry in result.errors] == [(2, "notification"), (3, "write")]

    def test_send_mails_false(self, session_factory, import_settings, seed, mailer) -> None:
        payload = _csv(seed, "A,a@college.edu,S700,STUDENT,{p},{s},,,")

        result = _service(session_factory, import_settings, mailer).import_users(payload, send_mails=False)

        assert result.created_count == 1
        assert mailer.sent == []

    def test_without_mailer(self, session_factory, import_settings, seed) -> None:
        payload = _csv(seed, "A,a@college.edu,S800,STUDENT,{p},{s},,,")

        result = _service(session_factory, import_settings, None).import_users(payload)

        assert result.created_count == 1
        assert result.errors == []


# ---------------------------------------------------------------------------
# Input edge cases
# ---------------------------------------------------------------------------


class TestUserImportInput:
    def test_empty_input(self, session_factory, import_settings, seed, mailer) -> None:
        result = _service(session_factory, import_settings, mailer).import_users(HEADER.encode("utf-8"))

        assert result.total_rows == 0
        assert result.invalid == [{"row": 0, "reason": "No rows found in CSV."}]
        assert result.to_dict()["createdCount"] == 0

    def test_unreadable_input_raises_before_writing(self, session_factory, import_settings, seed, mailer) -> None:
        payload = HEADER.encode("utf-8") + b"A,\xff\xfe@college.edu,S900,STUDENT,1,1,,,\n"
        users_before = _count(session_factory, User)

        with pytest.raises(ParseError):
            _service(session_factory, import_settings, mailer).import_users(payload)

        assert _count(session_factory, User) == users_before
