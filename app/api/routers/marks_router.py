"""
app/api/routers/marks_router.py

Staff marks CSV upload for one assessment.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Response, UploadFile, status

from app.api.dependencies import apply_batch_status, get_csv_upload, read_csv_upload
from app.ingestion.csv_parser import ParseError
from app.schemas.bulk_import import BatchSummaryResponse
from app.services.marks_import_service import MarksImportService, get_marks_import_service
from app.services.section_upload import ImportPermissionError, ImportTargetNotFoundError

router = APIRouter(prefix="/marks", tags=["marks"])


@router.post("/upload-csv", response_model=BatchSummaryResponse)
def upload_marks_csv(
    response: Response,
    file: UploadFile = Depends(get_csv_upload),
    assessment_id: int = Form(..., alias="assessmentId"),
    staff_id: int = Form(..., alias="staffId"),
    service: MarksImportService = Depends(get_marks_import_service),
) -> BatchSummaryResponse:
    try:
        result = service.import_marks(read_csv_upload(file), assessment_id=assessment_id, staff_id=staff_id)
    except ImportTargetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ImportPermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except ParseError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    apply_batch_status(response, result)
    return BatchSummaryResponse.from_result(result)
