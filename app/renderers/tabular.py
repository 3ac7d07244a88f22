"""
app/renderers/tabular.py

CSV and Excel writers for export rows keyed by human-readable labels.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Mapping, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

MIN_COLUMN_WIDTH = 15
MAX_COLUMN_WIDTH = 60

_HEADER_FONT = Font(bold=True)
_HEADER_FILL = PatternFill(start_color="E0E0E0", end_color="E0E0E0", fill_type="solid")
_HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center", wrap_text=True)
_ZEBRA_FILL = PatternFill(start_color="F5F5F5", end_color="F5F5F5", fill_type="solid")


def write_csv(path: Path, headers: Sequence[str], rows: Sequence[Mapping[str, Any]]) -> None:
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(
            handle,
            fieldnames=list(headers),
            extrasaction="ignore",
            restval="",
            lineterminator="\r\n",
        )
        writer.writeheader()
        writer.writerows(rows)


def write_excel(
    path: Path,
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]],
    *,
    sheet_title: str,
) -> None:
    """
    Write one styled worksheet: shaded bold header, zebra rows, auto-filter.
    """

    workbook = Workbook()
    worksheet = workbook.active
    # Excel rejects sheet titles longer than 31 characters.
    worksheet.title = sheet_title[:31] or "Export"

    widths = [max(len(str(header)), MIN_COLUMN_WIDTH) for header in headers]
    for col_num, header in enumerate(headers, 1):
        cell = worksheet.cell(row=1, column=col_num, value=header)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGNMENT

    for row_num, row in enumerate(rows, 2):
        zebra = row_num % 2 == 1
        for col_num, header in enumerate(headers, 1):
            value = row.get(header, "")
            cell = worksheet.cell(row=row_num, column=col_num, value=value)
            if zebra:
                cell.fill = _ZEBRA_FILL
            widths[col_num - 1] = max(widths[col_num - 1], len(str(value)))

    for col_num, width in enumerate(widths, 1):
        worksheet.column_dimensions[get_column_letter(col_num)].width = min(width + 2, MAX_COLUMN_WIDTH)

    if headers:
        worksheet.freeze_panes = "A2"
        worksheet.auto_filter.ref = f"A1:{get_column_letter(len(headers))}{max(1, len(rows) + 1)}"

    workbook.save(path)
