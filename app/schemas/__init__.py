"""
app/schemas package marker.
"""

from app.schemas.data_import import (
    ExportRequest,
    ExportResponse,
    FileAnalysisResponse,
    ImportSummaryResponse,
    ReportRequest,
    ReportResponse,
)

__all__ = [
    "ExportRequest",
    "ExportResponse",
    "FileAnalysisResponse",
    "ImportSummaryResponse",
    "ReportRequest",
    "ReportResponse",
]
