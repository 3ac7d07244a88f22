"""
app/schemas/data_import.py

Request and response schemas for data import, export and report endpoints.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, Field


class RowErrorResponse(BaseModel):
    """
    API response model for one rejected row.
    """

    row: int = Field(..., ge=1)
    errors: list[str]
    original: dict[str, str | None] = Field(default_factory=dict)


class ImportSummaryResponse(BaseModel):
    """
    API response model for one import run.
    """

    total: int = Field(..., ge=0)
    valid: int = Field(..., ge=0)
    invalid: int = Field(..., ge=0)
    created: int = Field(..., ge=0)
    errors: list[RowErrorResponse] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ColumnStatsResponse(BaseModel):
    original_name: str
    data_type: str
    examples: list[str] = Field(default_factory=list)
    non_empty_count: int = Field(..., ge=0)
    unique_count: int = Field(..., ge=0)


class FileAnalysisResponse(BaseModel):
    """
    API response model for an uploaded file analysis.
    """

    total_rows: int = Field(..., ge=0)
    sample_size: int = Field(..., ge=0)
    headers: list[str]
    normalized_headers: list[str]
    columns: dict[str, ColumnStatsResponse]
    mappable_to: str
    suggested_entity: str | None = None
    suggested_mappings: dict[str, str] = Field(default_factory=dict)
    sample_rows: list[dict[str, str | None]] = Field(default_factory=list)


class MappingValidationRequest(BaseModel):
    entity: str = Field(..., min_length=1)
    mappings: dict[str, str]


class MappingValidationResponse(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class EntitySummaryResponse(BaseModel):
    name: str
    label: str
    description: str


class EntityFieldResponse(BaseModel):
    name: str
    label: str
    data_type: str
    is_required: bool
    is_unique: bool
    validation: dict[str, Any] = Field(default_factory=dict)
    references: str | None = None


class EntitySchemaResponse(BaseModel):
    entity: str
    label: str
    fields: list[EntityFieldResponse]
    required_fields: list[str]
    unique_fields: list[str]


class ExportRequest(BaseModel):
    """
    Export request body.

    ``filters`` keys: ``dateFrom``, ``dateTo`` and any model column name.
    """

    entity: str = Field(..., min_length=1)
    format: Literal["csv", "excel", "pdf"] = "csv"
    fields: list[str] = Field(default_factory=list)
    filters: dict[str, Any] = Field(default_factory=dict)


class ExportResponse(BaseModel):
    filename: str
    entity: str
    format: str
    record_count: int = Field(..., ge=0)
    download_url: str


class ExportFieldResponse(BaseModel):
    name: str
    label: str


class ExportEntityResponse(BaseModel):
    name: str
    label: str
    fields: list[ExportFieldResponse]
    default_fields: list[str]
    date_field: str


class ReportRequest(BaseModel):
    report_type: str = Field(..., min_length=1)
    facility_id: str | None = None
    disease_id: str | None = None
    date_from: date | None = None
    date_to: date | None = None


class ReportResponse(BaseModel):
    filename: str
    report_type: str
    format: str
    download_url: str


class ReportTypeResponse(BaseModel):
    name: str
    label: str
    description: str
    required_params: list[str] = Field(default_factory=list)
