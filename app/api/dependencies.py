"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import File, HTTPException, UploadFile, status

TABULAR_EXTENSIONS = {".csv", ".xls", ".xlsx"}
TABULAR_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def get_tabular_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is CSV or Excel by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_tabular_filename = Path(filename).suffix in TABULAR_EXTENSIONS
    is_tabular_content_type = content_type in TABULAR_CONTENT_TYPES

    if not is_tabular_filename and not is_tabular_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV and Excel files are allowed.",
        )

    return file
