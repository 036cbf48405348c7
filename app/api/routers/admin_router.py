"""
app/api/routers/admin_router.py

Admin endpoints: bulk user import, holiday upload and the alert trigger.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, UploadFile, status

from app.api.dependencies import apply_batch_status, get_csv_upload, read_csv_upload
from app.ingestion.csv_parser import ParseError
from app.schemas.bulk_import import AlertRunResponse, BatchSummaryResponse
from app.services.attendance_alert_service import AttendanceAlertService, get_attendance_alert_service
from app.services.holiday_import_service import HolidayImportService, get_holiday_import_service
from app.services.user_import_service import UserImportService, get_user_import_service

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/upload-users", response_model=BatchSummaryResponse)
def upload_users(
    response: Response,
    file: UploadFile = Depends(get_csv_upload),
    send_mails: bool = Query(default=True, alias="sendMails", description="Email credentials to created users"),
    service: UserImportService = Depends(get_user_import_service),
) -> BatchSummaryResponse:
    """
    Create users (and their student/staff profiles) from a CSV upload.
    """

    payload = read_csv_upload(file)
    try:
        result = service.import_users(payload, send_mails=send_mails)
    except ParseError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    apply_batch_status(response, result)
    return BatchSummaryResponse.from_result(result)


@router.post("/holidays/upload", response_model=BatchSummaryResponse)
def upload_holidays(
    response: Response,
    file: UploadFile = Depends(get_csv_upload),
    service: HolidayImportService = Depends(get_holiday_import_service),
) -> BatchSummaryResponse:
    payload = read_csv_upload(file)
    try:
        result = service.import_holidays(payload)
    except ParseError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    apply_batch_status(response, result)
    return BatchSummaryResponse.from_result(result)


@router.post("/trigger-alerts", response_model=AlertRunResponse)
def trigger_attendance_alerts(
    service: AttendanceAlertService = Depends(get_attendance_alert_service),
) -> AlertRunResponse:
    """
    Run the daily guardian attendance alert immediately.
    """

    summary = service.run()
    return AlertRunResponse(**summary.to_dict())
