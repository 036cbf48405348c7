"""
app/api/routers/attendance_router.py

Staff attendance CSV upload for one class session.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Response, UploadFile, status

from app.api.dependencies import apply_batch_status, get_csv_upload, read_csv_upload
from app.ingestion.csv_parser import ParseError
from app.schemas.bulk_import import BatchSummaryResponse
from app.services.attendance_import_service import AttendanceImportService, get_attendance_import_service
from app.services.section_upload import ImportPermissionError, ImportTargetNotFoundError

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/upload-csv", response_model=BatchSummaryResponse)
def upload_attendance_csv(
    response: Response,
    file: UploadFile = Depends(get_csv_upload),
    session_id: int = Form(..., alias="sessionId"),
    staff_id: int = Form(..., alias="staffId"),
    service: AttendanceImportService = Depends(get_attendance_import_service),
) -> BatchSummaryResponse:
    """
    Upsert attendance marks (``rollNumber,status``) for a session the caller took.
    """

    try:
        result = service.import_attendance(read_csv_upload(file), session_id=session_id, staff_id=staff_id)
    except ImportTargetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ImportPermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except ParseError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    apply_batch_status(response, result)
    return BatchSummaryResponse.from_result(result)
