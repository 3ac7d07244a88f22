"""
app/services/file_readers.py

Streaming row readers for uploaded CSV and XLSX files.

Readers yield one RawRow at a time keyed by header name. Blank lines are
skipped. Without a header row, columns are named ``column_1``,
``column_2``, ...
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.domain.data_import import RawRow
from app.domain.errors import ImportFileError, UnsupportedFileFormatError

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = frozenset({".csv"})
XLSX_EXTENSIONS = frozenset({".xlsx"})
LEGACY_EXCEL_EXTENSIONS = frozenset({".xls"})
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS | XLSX_EXTENSIONS


class TabularSource:
    """
    One open file: its resolved headers and a single-pass row iterator.
    """

    def __init__(self, headers: Sequence[str], rows: Iterator[RawRow]) -> None:
        self.headers: tuple[str, ...] = tuple(headers)
        self._rows = rows

    def __iter__(self) -> Iterator[RawRow]:
        return self._rows


def resolve_headers(raw_headers: Sequence[Any]) -> list[str]:
    """
    Turn a header line into unique, non-empty column names.
    """

    headers: list[str] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_headers, start=1):
        name = "" if raw is None else str(raw).strip()
        if not name or name in seen:
            name = f"column_{index}"
        seen.add(name)
        headers.append(name)
    return headers


def positional_headers(width: int) -> list[str]:
    return [f"column_{index}" for index in range(1, width + 1)]


@contextmanager
def open_tabular_source(
    file_path: str | Path,
    *,
    has_header_row: bool = True,
    skip_lines: int = 0,
) -> Iterator[TabularSource]:
    """
    Open ``file_path`` for streaming by extension.

    Raises UnsupportedFileFormatError for unknown or legacy ``.xls`` files.
    Decoding and format errors surface as ImportFileError while the source
    is being consumed.
    """

    path = Path(file_path)
    extension = path.suffix.lower()
    if extension in CSV_EXTENSIONS:
        with _open_csv(path, has_header_row=has_header_row, skip_lines=skip_lines) as source:
            yield source
    elif extension in XLSX_EXTENSIONS:
        with _open_xlsx(path, has_header_row=has_header_row, skip_lines=skip_lines) as source:
            yield source
    elif extension in LEGACY_EXCEL_EXTENSIONS:
        raise UnsupportedFileFormatError(
            "Legacy .xls workbooks are not supported. Save the sheet as .xlsx or .csv."
        )
    else:
        raise UnsupportedFileFormatError(f"Unsupported file format: {extension or path.name}")


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


@contextmanager
def _open_csv(path: Path, *, has_header_row: bool, skip_lines: int) -> Iterator[TabularSource]:
    with path.open("r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.reader(handle)
        try:
            for _ in range(skip_lines):
                next(reader, None)
            first = _next_non_blank(reader)
        except UnicodeDecodeError as exc:
            raise ImportFileError("File must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise ImportFileError(f"Invalid CSV format: {exc}") from exc

        if first is None:
            yield TabularSource(headers=[], rows=iter(()))
            return

        if has_header_row:
            headers = resolve_headers(first)
            pending: list[list[str]] = []
        else:
            headers = positional_headers(len(first))
            pending = [first]

        yield TabularSource(headers=headers, rows=_csv_rows(reader, headers, pending))


def _csv_rows(reader: Any, headers: list[str], pending: list[list[str]]) -> Iterator[RawRow]:
    for values in pending:
        yield _zip_row(headers, values)
    try:
        for values in reader:
            if _is_blank_line(values):
                continue
            yield _zip_row(headers, values)
    except UnicodeDecodeError as exc:
        raise ImportFileError("File must be UTF-8 encoded.") from exc
    except csv.Error as exc:
        raise ImportFileError(f"Invalid CSV format at line {reader.line_num}: {exc}") from exc


def _next_non_blank(reader: Any) -> list[str] | None:
    for values in reader:
        if not _is_blank_line(values):
            return values
    return None


# ---------------------------------------------------------------------------
# XLSX
# ---------------------------------------------------------------------------


@contextmanager
def _open_xlsx(path: Path, *, has_header_row: bool, skip_lines: int) -> Iterator[TabularSource]:
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, KeyError, ValueError) as exc:
        raise ImportFileError(f"Invalid XLSX workbook: {exc}") from exc

    try:
        sheet = workbook.active
        values_iter = sheet.iter_rows(min_row=skip_lines + 1, values_only=True)
        first = next((values for values in values_iter if not _is_blank_line(values)), None)
        if first is None:
            yield TabularSource(headers=[], rows=iter(()))
            return

        if has_header_row:
            headers = resolve_headers(first)
            pending: list[tuple[Any, ...]] = []
        else:
            headers = positional_headers(len(first))
            pending = [first]

        yield TabularSource(headers=headers, rows=_xlsx_rows(values_iter, headers, pending))
    finally:
        workbook.close()


def _xlsx_rows(
    values_iter: Iterator[tuple[Any, ...]],
    headers: list[str],
    pending: list[tuple[Any, ...]],
) -> Iterator[RawRow]:
    for values in pending:
        yield _zip_row(headers, [_cell_text(value) for value in values])
    for values in values_iter:
        if _is_blank_line(values):
            continue
        yield _zip_row(headers, [_cell_text(value) for value in values])


def _cell_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        if value.time() == time.min:
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _zip_row(headers: Sequence[str], values: Sequence[Any]) -> RawRow:
    row: RawRow = {}
    for index, header in enumerate(headers):
        row[header] = values[index] if index < len(values) else None
    if len(values) > len(headers):
        logger.debug("Dropping %d cells beyond the header width", len(values) - len(headers))
    return row


def _is_blank_line(values: Sequence[Any]) -> bool:
    return all(value is None or str(value).strip() == "" for value in values)
