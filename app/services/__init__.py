"""
app/services package marker.
"""

from app.services.data_import_service import DataImportService, get_data_import_service
from app.services.export_service import ExportService, get_export_service
from app.services.report_service import ReportOptions, ReportService, get_report_service

__all__ = [
    "DataImportService",
    "get_data_import_service",
    "ExportService",
    "get_export_service",
    "ReportOptions",
    "ReportService",
    "get_report_service",
]
