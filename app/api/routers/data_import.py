"""
app/api/routers/data_import.py

Data import, export and report HTTP endpoints.

All parsing, validation and rendering lives in the services; the router only
spools uploads, maps domain errors to HTTP status codes, and serves files.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.api.dependencies import get_tabular_upload
from app.config import ExportSettings, ImportSettings, get_export_settings, get_import_settings
from app.domain.data_import import FileAnalysis, ImportResult
from app.domain.errors import (
    ExportConfigurationError,
    ImportConfigurationError,
    ImportFileError,
    ImportPersistenceError,
    ReportEntityNotFoundError,
    UnsupportedReportTypeError,
    UploadTooLargeError,
)
from app.schemas.data_import import (
    ColumnStatsResponse,
    EntitySchemaResponse,
    EntitySummaryResponse,
    ExportEntityResponse,
    ExportRequest,
    ExportResponse,
    FileAnalysisResponse,
    ImportSummaryResponse,
    MappingValidationRequest,
    MappingValidationResponse,
    ReportRequest,
    ReportResponse,
    ReportTypeResponse,
    RowErrorResponse,
)
from app.services.data_import_service import DataImportService, get_data_import_service
from app.services.export_service import ExportService, get_export_service
from app.services.report_service import ReportOptions, ReportService, get_report_service
from app.services.upload_storage import store_upload
from app.validators.mapping_validator import MappingValidationError
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/data-import", tags=["data-import"])

_MEDIA_TYPES = {
    ".csv": "text/csv",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".pdf": "application/pdf",
}


# ---------------------------------------------------------------------------
# Helpers (no business logic)
# ---------------------------------------------------------------------------


def _spool(file: UploadFile, settings: ImportSettings) -> Path:
    try:
        return store_upload(
            file.file,
            filename=file.filename,
            upload_dir=settings.upload_dir,
            max_bytes=settings.max_upload_bytes,
        )
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=str(exc),
        ) from exc


def _parse_mappings(raw: str) -> dict[str, str]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"mappings must be a JSON object: {exc.msg}",
        ) from exc
    if not isinstance(parsed, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in parsed.items()
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="mappings must map source column names to target field names.",
        )
    return parsed


def _import_response(result: ImportResult) -> ImportSummaryResponse:
    return ImportSummaryResponse(
        total=result.total,
        valid=result.valid_count,
        invalid=result.invalid_count,
        created=result.created_count,
        errors=[
            RowErrorResponse(row=error.row, errors=list(error.errors), original=dict(error.original))
            for error in result.errors
        ],
        warnings=list(result.warnings),
    )


def _analysis_response(analysis: FileAnalysis) -> FileAnalysisResponse:
    return FileAnalysisResponse(
        total_rows=analysis.total_rows,
        sample_size=analysis.sample_size,
        headers=list(analysis.headers),
        normalized_headers=list(analysis.normalized_headers),
        columns={
            name: ColumnStatsResponse(
                original_name=stats.original_name,
                data_type=stats.data_type,
                examples=list(stats.examples),
                non_empty_count=stats.non_empty_count,
                unique_count=stats.unique_count,
            )
            for name, stats in analysis.columns.items()
        },
        mappable_to=analysis.mappable_to,
        suggested_entity=analysis.suggested_entity,
        suggested_mappings=analysis.suggested_mappings,
        sample_rows=analysis.sample_rows,
    )


def _download_url(settings: ExportSettings, filename: str) -> str:
    return f"{settings.download_path_prefix}/{filename}"


# ---------------------------------------------------------------------------
# Import endpoints
# ---------------------------------------------------------------------------


@router.post("/analyze", response_model=FileAnalysisResponse)
def analyze_file(
    file: UploadFile = Depends(get_tabular_upload),
    has_header_row: bool = Form(default=True),
    skip_lines: int = Form(default=0, ge=0, description="Leading lines discarded before the header"),
    import_service: DataImportService = Depends(get_data_import_service),
    settings: ImportSettings = Depends(get_import_settings),
) -> FileAnalysisResponse:
    """
    Summarise an uploaded file and suggest a target entity and mapping.
    """

    path: Path | None = None
    try:
        path = _spool(file, settings)
        analysis = import_service.analyze_file(
            path,
            has_header_row=has_header_row,
            skip_lines=skip_lines,
        )
    except (ImportConfigurationError, ImportFileError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    finally:
        file.file.close()
        if path is not None:
            path.unlink(missing_ok=True)

    return _analysis_response(analysis)


@router.post("/import", response_model=ImportSummaryResponse)
def import_file(
    file: UploadFile = Depends(get_tabular_upload),
    entity: str = Form(...),
    mappings: str = Form(..., description="JSON object of source column -> target field"),
    has_header_row: bool = Form(default=True),
    skip_lines: int = Form(default=0, ge=0, description="Leading lines discarded before the header"),
    db: Session = Depends(get_db),
    import_service: DataImportService = Depends(get_data_import_service),
    settings: ImportSettings = Depends(get_import_settings),
) -> ImportSummaryResponse:
    """
    Import one uploaded file into ``entity``.
    """

    parsed_mappings = _parse_mappings(mappings)
    try:
        path = _spool(file, settings)
        result = import_service.import_file(
            db,
            path,
            entity=entity,
            mappings=parsed_mappings,
            has_header_row=has_header_row,
            skip_lines=skip_lines,
        )
    except MappingValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict()) from exc
    except (ImportConfigurationError, ImportFileError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ImportPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to persist imported rows; no rows were saved.",
        ) from exc
    finally:
        file.file.close()

    return _import_response(result)


@router.post("/validate-mappings", response_model=MappingValidationResponse)
def validate_mappings(
    payload: MappingValidationRequest,
    import_service: DataImportService = Depends(get_data_import_service),
) -> MappingValidationResponse:
    try:
        report = import_service.validate_field_mappings(payload.mappings, payload.entity)
    except ImportConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MappingValidationResponse(valid=report.valid, errors=list(report.errors), warnings=list(report.warnings))


@router.get("/entities", response_model=list[EntitySummaryResponse])
def list_entities(
    import_service: DataImportService = Depends(get_data_import_service),
) -> list[EntitySummaryResponse]:
    return [EntitySummaryResponse(**entity) for entity in import_service.supported_entities()]


@router.get("/entities/{entity}/schema", response_model=EntitySchemaResponse)
def entity_schema(
    entity: str,
    import_service: DataImportService = Depends(get_data_import_service),
) -> EntitySchemaResponse:
    try:
        schema = import_service.entity_schema(entity)
    except ImportConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return EntitySchemaResponse(**schema)


# ---------------------------------------------------------------------------
# Export and report endpoints
# ---------------------------------------------------------------------------


@router.post("/export", response_model=ExportResponse)
def export_entity(
    payload: ExportRequest,
    db: Session = Depends(get_db),
    export_service: ExportService = Depends(get_export_service),
    settings: ExportSettings = Depends(get_export_settings),
) -> ExportResponse:
    """
    Export one entity to CSV, Excel or PDF and return its download link.
    """

    try:
        artifact = export_service.export_to_format(
            db,
            entity=payload.entity,
            filters=payload.filters,
            fields=payload.fields,
            format=payload.format,
        )
    except (ExportConfigurationError, ImportConfigurationError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return ExportResponse(
        filename=artifact.filename,
        entity=artifact.entity,
        format=artifact.format,
        record_count=artifact.record_count,
        download_url=_download_url(settings, artifact.filename),
    )


@router.get("/export/entities", response_model=list[ExportEntityResponse])
def list_export_entities(
    export_service: ExportService = Depends(get_export_service),
) -> list[ExportEntityResponse]:
    return [ExportEntityResponse(**entity) for entity in export_service.supported_entities()]


@router.get("/reports/types", response_model=list[ReportTypeResponse])
def list_report_types(
    report_service: ReportService = Depends(get_report_service),
) -> list[ReportTypeResponse]:
    return [ReportTypeResponse(**report_type) for report_type in report_service.supported_report_types()]


@router.post("/reports", response_model=ReportResponse)
def generate_report(
    payload: ReportRequest,
    db: Session = Depends(get_db),
    report_service: ReportService = Depends(get_report_service),
    settings: ExportSettings = Depends(get_export_settings),
) -> ReportResponse:
    """
    Generate a PDF report and return its download link.
    """

    if payload.date_from and payload.date_to and payload.date_from > payload.date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_from must not be later than date_to.",
        )

    try:
        artifact = report_service.generate_report(
            db,
            payload.report_type,
            ReportOptions(
                facility_id=payload.facility_id,
                disease_id=payload.disease_id,
                date_from=payload.date_from,
                date_to=payload.date_to,
            ),
        )
    except ReportEntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (UnsupportedReportTypeError, ExportConfigurationError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return ReportResponse(
        filename=artifact.filename,
        report_type=artifact.report_type,
        format=artifact.format,
        download_url=_download_url(settings, artifact.filename),
    )


@router.get("/download/{filename}")
def download_file(
    filename: str,
    settings: ExportSettings = Depends(get_export_settings),
) -> FileResponse:
    """
    Serve a previously generated export or report file.
    """

    export_dir = settings.export_dir.resolve()
    candidate = (export_dir / filename).resolve()
    if candidate.parent != export_dir or Path(filename).name != filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid filename.")
    if not candidate.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found.")

    return FileResponse(
        path=candidate,
        filename=filename,
        media_type=_MEDIA_TYPES.get(candidate.suffix.lower(), "application/octet-stream"),
    )
