"""
tests/test_api.py

HTTP contract of the upload endpoints, with services bound to the test database.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.config import CSVImportSettings
from app.main import create_app
from app.services.attendance_alert_service import AttendanceAlertService, get_attendance_alert_service
from app.services.attendance_import_service import AttendanceImportService, get_attendance_import_service
from app.services.holiday_import_service import HolidayImportService, get_holiday_import_service
from app.services.marks_import_service import MarksImportService, get_marks_import_service
from app.services.user_import_service import UserImportService, get_user_import_service


@pytest.fixture()
def client(session_factory, seed, mailer, transport_factory) -> TestClient:
    settings = CSVImportSettings(batch_size=10, transaction_mode="per_row", notify_max_workers=2)
    application = create_app()
    application.dependency_overrides[get_user_import_service] = lambda: UserImportService(
        session_factory=session_factory,
        settings=settings,
        mailer=mailer,
    )
    application.dependency_overrides[get_attendance_import_service] = lambda: AttendanceImportService(
        session_factory=session_factory,
        settings=settings,
    )
    application.dependency_overrides[get_marks_import_service] = lambda: MarksImportService(
        session_factory=session_factory,
        settings=settings,
    )
    application.dependency_overrides[get_holiday_import_service] = lambda: HolidayImportService(
        session_factory=session_factory,
        settings=settings,
    )
    application.dependency_overrides[get_attendance_alert_service] = lambda: AttendanceAlertService(
        session_factory=session_factory,
        mailer=transport_factory(),
        sms_sender=transport_factory(),
    )
    # No context manager: the lifespan (DB check, scheduler) stays off.
    return TestClient(application)


def _upload(content: str, filename: str = "upload.csv") -> dict:
    return {"file": (filename, content.encode("utf-8"), "text/csv")}


class TestHealth:
    def test_health(self, client) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestUploadUsers:
    def test_created_returns_201(self, client, seed, mailer) -> None:
        content = (
            "name,email,rollNumber,role,programId,sectionId\n"
            f"Anita,anita@college.edu,S100,STUDENT,{seed.program_id},{seed.section_id}\n"
            "Bad,bad,S101,STUDENT,1,1\n"
        )

        response = client.post("/admin/upload-users", files=_upload(content))

        assert response.status_code == 201
        body = response.json()
        assert body["createdCount"] == 1
        assert body["totalRows"] == 2
        assert body["created"][0]["email"] == "anita@college.edu"
        assert body["invalid"][0]["reason"] == "Invalid email 'bad'."
        assert mailer.recipients == ["anita@college.edu"]

    def test_nothing_created_returns_200(self, client) -> None:
        content = "name,email,rollNumber,role\nTaken,r001@college.edu,X1,ADMIN\n"

        response = client.post("/admin/upload-users", files=_upload(content))

        assert response.status_code == 200
        assert response.json()["skipped"][0]["reason"] == "Duplicate email"

    def test_send_mails_flag(self, client, mailer) -> None:
        content = "name,email,rollNumber,role\nRoot,root@college.edu,A1,ADMIN\n"

        response = client.post("/admin/upload-users", params={"sendMails": "false"}, files=_upload(content))

        assert response.status_code == 201
        assert mailer.sent == []

    def test_rejects_non_csv(self, client) -> None:
        response = client.post(
            "/admin/upload-users",
            files={"file": ("users.xlsx", b"PK\x03\x04", "application/octet-stream")},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Only CSV files are allowed."

    def test_unreadable_csv_returns_400(self, client) -> None:
        response = client.post(
            "/admin/upload-users",
            files={"file": ("users.csv", b"name,email\n\xff\xfe,x\n", "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "CSV must be UTF-8 encoded."


class TestSectionUploads:
    def test_attendance_upload(self, client, seed) -> None:
        response = client.post(
            "/attendance/upload-csv",
            data={"sessionId": str(seed.session_id), "staffId": str(seed.staff_id)},
            files=_upload("rollNumber,status\nR001,ABSENT\nR404,PRESENT\n"),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["createdCount"] == 1
        assert body["skipped"][0]["reason"] == "Roll number not enrolled in section"

    def test_attendance_unknown_session(self, client, seed) -> None:
        response = client.post(
            "/attendance/upload-csv",
            data={"sessionId": "999", "staffId": str(seed.staff_id)},
            files=_upload("rollNumber,status\n"),
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Session not found."

    def test_attendance_wrong_staff(self, client, seed) -> None:
        response = client.post(
            "/attendance/upload-csv",
            data={"sessionId": str(seed.session_id), "staffId": str(seed.other_staff_id)},
            files=_upload("rollNumber,status\nR001,ABSENT\n"),
        )

        assert response.status_code == 403

    def test_marks_upload(self, client, seed) -> None:
        response = client.post(
            "/marks/upload-csv",
            data={"assessmentId": str(seed.assessment_id), "staffId": str(seed.staff_id)},
            files=_upload("rollNumber,marksObtained\nR001,40\nR002,90\n"),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["created"][0]["marksObtained"] == 40
        assert body["invalid"][0]["row"] == 3


class TestAdminHolidaysAndAlerts:
    def test_holiday_upload(self, client) -> None:
        response = client.post("/admin/holidays/upload", files=_upload("name,date\nHoli,2026-03-04\n"))

        assert response.status_code == 201
        assert response.json()["created"][0]["date"] == "2026-03-04"

    def test_trigger_alerts(self, client) -> None:
        response = client.post("/admin/trigger-alerts")

        assert response.status_code == 200
        body = response.json()
        assert body["students"] == 0
        assert body["skipped_holiday"] is False
