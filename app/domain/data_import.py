"""
app/domain/data_import.py

Domain models used by the import and export flows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

RawRow = dict[str, "str | None"]
TransformedRow = dict[str, Any]


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Result of validating one row against an entity ruleset.
    """

    errors: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class RowError:
    """
    One rejected row: its 1-based data ordinal, the row as read, and every problem found.
    """

    row: int
    original: RawRow
    errors: tuple[str, ...]


@dataclass(frozen=True)
class ValidRow:
    """
    One accepted row, transformed into target field values.
    """

    row: int
    original: RawRow
    values: TransformedRow


@dataclass(frozen=True)
class PipelineResult:
    """
    Partition of a streamed file into valid and invalid rows.
    """

    valid: list[ValidRow] = field(default_factory=list)
    invalid: list[RowError] = field(default_factory=list)
    total: int = 0


@dataclass(frozen=True)
class ImportResult:
    """
    End-of-run import summary.

    valid_count + invalid_count == total. Rows rejected by the foreign-key
    check stay counted as valid but are listed in ``errors`` after the
    validation failures and never reach ``created_count``.
    """

    total: int
    valid_count: int
    invalid_count: int
    created_count: int
    errors: list[RowError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MappingValidationReport:
    """
    Outcome of checking a source->target mapping against an entity.
    """

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ColumnStats:
    """
    Sample statistics for one source column.
    """

    original_name: str
    data_type: str
    examples: tuple[str, ...]
    non_empty_count: int
    unique_count: int


@dataclass(frozen=True)
class FileAnalysis:
    """
    Summary returned by file analysis, before any mapping is chosen.
    """

    total_rows: int
    sample_size: int
    headers: tuple[str, ...]
    normalized_headers: tuple[str, ...]
    columns: dict[str, ColumnStats]
    mappable_to: str
    suggested_entity: str | None = None
    suggested_mappings: dict[str, str] = field(default_factory=dict)
    sample_rows: list[RawRow] = field(default_factory=list)


@dataclass(frozen=True)
class ExportArtifact:
    """
    A rendered export file on disk.
    """

    file_path: Path
    filename: str
    entity: str
    format: str
    record_count: int


@dataclass(frozen=True)
class ReportTable:
    headers: tuple[str, ...]
    rows: list[tuple[Any, ...]]


@dataclass(frozen=True)
class ReportSection:
    """
    One titled block of a PDF report: free text, a table, or both.
    """

    title: str
    text: str | None = None
    table: ReportTable | None = None


@dataclass(frozen=True)
class ReportArtifact:
    file_path: Path
    filename: str
    report_type: str
    format: str = "pdf"
