"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, HTTPException, Response, UploadFile, status

from app.domain.bulk_import import BatchResult

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a CSV by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    return file


def read_csv_upload(file: UploadFile) -> bytes:
    """
    Read the whole upload into memory and close it.
    """

    try:
        file.file.seek(0)
        return file.file.read()
    finally:
        file.file.close()


def apply_batch_status(response: Response, result: BatchResult) -> None:
    """
    201 when at least one record was created, 200 otherwise.
    """

    response.status_code = status.HTTP_201_CREATED if result.created_count > 0 else status.HTTP_200_OK
