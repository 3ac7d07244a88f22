"""
app/renderers/pdf.py

PDF rendering for table exports and sectioned reports, built on fpdf2.

Core fonts only cover latin-1; text outside it is replaced before drawing.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

from fpdf import FPDF, XPos, YPos

from app.domain.data_import import ReportSection

_FONT = "helvetica"
_HEADER_FILL = (224, 224, 224)
_ZEBRA_FILL = (245, 245, 245)
_ROW_HEIGHT = 6
_MARGIN = 10


class _TablePDF(FPDF):
    """
    FPDF with a centered "Page n/N" footer.
    """

    def footer(self) -> None:
        self.set_y(-12)
        self.set_font(_FONT, "I", 8)
        self.set_text_color(120, 120, 120)
        self.cell(0, 8, f"Page {self.page_no()}/{{nb}}", align="C")
        self.set_text_color(0, 0, 0)


def _latin1(value: Any) -> str:
    return str(value).encode("latin-1", "replace").decode("latin-1")


def _fit(pdf: FPDF, text: str, width: float) -> str:
    if pdf.get_string_width(text) <= width:
        return text
    while text and pdf.get_string_width(text + "...") > width:
        text = text[:-1]
    return text + "..."


def _create_pdf(*, landscape: bool) -> _TablePDF:
    pdf = _TablePDF(orientation="L" if landscape else "P", unit="mm", format="A4")
    pdf.set_margins(_MARGIN, _MARGIN, _MARGIN)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()
    return pdf


def _write_title(pdf: FPDF, title: str, subtitle_lines: Sequence[str]) -> None:
    pdf.set_font(_FONT, "B", 16)
    pdf.cell(0, 10, _latin1(title), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font(_FONT, "", 10)
    for line in subtitle_lines:
        pdf.cell(0, 6, _latin1(line), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    pdf.set_font(_FONT, "I", 8)
    pdf.cell(0, 6, f"Generated: {generated}", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)


def _draw_table(pdf: FPDF, headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    if not headers:
        return

    width = pdf.epw / len(headers)
    font_size = 8 if len(headers) <= 8 else 7

    def draw_header() -> None:
        pdf.set_font(_FONT, "B", font_size)
        pdf.set_fill_color(*_HEADER_FILL)
        for header in headers:
            pdf.cell(width, _ROW_HEIGHT + 1, _fit(pdf, _latin1(header), width - 2), border=1, align="C", fill=True)
        pdf.ln()
        pdf.set_font(_FONT, "", font_size)

    draw_header()
    if not rows:
        pdf.cell(pdf.epw, _ROW_HEIGHT, "No records found", border=1, align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        return

    for index, row in enumerate(rows):
        if pdf.will_page_break(_ROW_HEIGHT):
            pdf.add_page()
            draw_header()
        fill = index % 2 == 1
        pdf.set_fill_color(*_ZEBRA_FILL)
        for value in row:
            pdf.cell(width, _ROW_HEIGHT, _fit(pdf, _latin1(value), width - 2), border=1, fill=fill)
        pdf.ln()


def write_table_pdf(
    path: Path,
    *,
    title: str,
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]],
    subtitle_lines: Sequence[str] = (),
) -> None:
    """
    Render label-keyed rows as a landscape A4 table that repeats its header on every page.
    """

    pdf = _create_pdf(landscape=True)
    _write_title(pdf, title, [*subtitle_lines, f"Total records: {len(rows)}"])
    _draw_table(pdf, headers, [[row.get(header, "") for header in headers] for row in rows])
    pdf.output(str(path))


def write_report_pdf(
    path: Path,
    *,
    title: str,
    subtitle_lines: Sequence[str],
    sections: Sequence[ReportSection],
) -> None:
    """
    Render a portrait report: a heading per section followed by its text and table.
    """

    pdf = _create_pdf(landscape=False)
    _write_title(pdf, title, subtitle_lines)

    for section in sections:
        if pdf.will_page_break(_ROW_HEIGHT * 4):
            pdf.add_page()
        pdf.set_font(_FONT, "B", 12)
        pdf.cell(0, 8, _latin1(section.title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if section.text:
            pdf.set_font(_FONT, "", 10)
            pdf.multi_cell(0, 5, _latin1(section.text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if section.table is not None:
            pdf.ln(1)
            _draw_table(pdf, section.table.headers, section.table.rows)
        pdf.ln(4)

    pdf.output(str(path))

