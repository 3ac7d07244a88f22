"""
app/domain/errors.py

Exception taxonomy for the import/export engine.

Row-level validation and foreign-key failures are not exceptions; they are
returned as data inside ImportResult.errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.data_import import ImportResult


class ImportConfigurationError(ValueError):
    """
    Raised before any data row is read when the request cannot succeed.
    """


class UnsupportedEntityError(ImportConfigurationError):
    """
    Raised when an entity name has no registered configuration.
    """

    def __init__(self, entity: str) -> None:
        super().__init__(f"Unsupported entity: {entity}")
        self.entity = entity


class UnsupportedFileFormatError(ImportConfigurationError):
    """
    Raised when an uploaded file extension cannot be read.
    """


class UploadTooLargeError(ImportConfigurationError):
    """
    Raised when an upload exceeds the configured size limit.
    """


class ImportFileError(ValueError):
    """
    Raised when the uploaded file cannot be decoded or parsed mid-stream.
    """


class ImportPersistenceError(RuntimeError):
    """
    Raised when the bulk insert fails and the whole transaction is rolled back.
    """

    def __init__(self, message: str, *, result: ImportResult) -> None:
        super().__init__(message)
        self.result = result


class ExportConfigurationError(ValueError):
    """
    Raised for unknown export fields, filters or formats.
    """


class UnsupportedReportTypeError(ValueError):
    """
    Raised when a report type is not registered.
    """

    def __init__(self, report_type: str) -> None:
        super().__init__(f"Unsupported report type: {report_type}")
        self.report_type = report_type


class ReportEntityNotFoundError(LookupError):
    """
    Raised when a report references a facility or disease that does not exist.
    """

    def __init__(self, label: str, identifier: object) -> None:
        super().__init__(f"{label} not found with ID: {identifier}")
        self.label = label
        self.identifier = identifier
