"""
tests/test_export_service.py

Pytest tests for ExportService: filtering, labelled columns and each output format.
"""

from __future__ import annotations

import csv
import re
import uuid
from datetime import date
from pathlib import Path

import pytest
from openpyxl import load_workbook

from app.domain.entity_config import build_entity_registry
from app.domain.errors import ExportConfigurationError, UnsupportedEntityError
from app.domain.export_config import build_export_configs
from app.services.export_service import ExportService, period_text, unique_filename
from db.models import Immunization
from tests.conftest import add_facility, add_patient


@pytest.fixture()
def export_dir(tmp_path: Path) -> Path:
    return tmp_path / "exports"


@pytest.fixture()
def service(export_dir: Path) -> ExportService:
    return ExportService(
        export_dir=export_dir,
        max_rows=100,
        registry=build_entity_registry(),
        configs=build_export_configs(),
    )


@pytest.fixture()
def immunizations(session):
    facility = add_facility(session, name="Ikeja Clinic", type="Clinic")
    patient = add_patient(session, first_name="Ada", last_name="Obi")
    records = [
        Immunization(
            id=uuid.uuid4(),
            patient_id=patient.id,
            facility_id=facility.id,
            vaccine_type=vaccine,
            vaccine_name=vaccine,
            dose_number=dose,
            administration_date=given_on,
        )
        for vaccine, dose, given_on in (
            ("BCG", 1, date(2024, 1, 15)),
            ("OPV", 1, date(2024, 2, 10)),
            ("OPV", 2, date(2024, 3, 20)),
        )
    ]
    session.add_all(records)
    session.commit()
    return facility, patient, records


def _read_csv(path: Path) -> list[dict[str, str]]:
    with path.open("r", encoding="utf-8", newline="") as handle:
        return list(csv.DictReader(handle))


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


class TestCSVExport:
    def test_date_range_and_labelled_columns(self, service, session, immunizations) -> None:
        artifact = service.export_to_format(
            session,
            entity="immunizations",
            filters={"dateFrom": "2024-02-01", "dateTo": "2024-03-31", "page": "2", "limit": "10"},
            fields=["vaccine_type", "dose_number", "administration_date", "patient_name", "facility_name"],
            format="csv",
        )

        rows = _read_csv(artifact.file_path)
        assert artifact.record_count == 2
        assert list(rows[0]) == ["Vaccine Type", "Dose Number", "Administration Date", "Patient Name", "Facility Name"]
        assert [row["Administration Date"] for row in rows] == ["2024-03-20", "2024-02-10"]
        assert rows[0]["Patient Name"] == "Ada Obi"
        assert rows[0]["Facility Name"] == "Ikeja Clinic"
        assert artifact.file_path.read_bytes().startswith(b"Vaccine Type,")

    def test_default_fields_and_equality_filter(self, service, session, immunizations) -> None:
        _, patient, _ = immunizations

        artifact = service.export_to_format(
            session,
            entity="immunizations",
            filters={"vaccine_type": "OPV", "patient_id": str(patient.id)},
        )

        rows = _read_csv(artifact.file_path)
        assert len(rows) == 2
        assert list(rows[0]) == [
            "ID",
            "Patient ID",
            "Facility ID",
            "Vaccine Type",
            "Vaccine Name",
            "Administration Date",
            "Dose Number",
        ]
        assert rows[0]["Patient ID"] == str(patient.id)

    def test_boolean_and_null_values(self, service, session) -> None:
        add_patient(session, first_name="Chi", last_name="Eze", is_deceased=True)

        artifact = service.export_to_format(
            session,
            entity="patients",
            fields=["first_name", "is_deceased", "email"],
        )

        assert _read_csv(artifact.file_path) == [{"First Name": "Chi", "Is Deceased": "Yes", "Email": ""}]


class TestExportErrors:
    def test_unknown_field(self, service, session) -> None:
        with pytest.raises(ExportConfigurationError, match="Unknown export fields for patients: shoe_size"):
            service.export_to_format(session, entity="patients", fields=["first_name", "shoe_size"])

    def test_unknown_filter(self, service, session) -> None:
        with pytest.raises(ExportConfigurationError, match="Unknown filter 'colour'"):
            service.export_to_format(session, entity="patients", filters={"colour": "red"})

    def test_invalid_date_bound(self, service, session) -> None:
        with pytest.raises(ExportConfigurationError, match="dateFrom must be a valid date"):
            service.export_to_format(session, entity="patients", filters={"dateFrom": "soon"})

    def test_more_records_than_row_cap_is_rejected(self, export_dir, session, immunizations) -> None:
        capped = ExportService(
            export_dir=export_dir,
            max_rows=2,
            registry=build_entity_registry(),
            configs=build_export_configs(),
        )

        with pytest.raises(ExportConfigurationError, match="more than 2 records"):
            capped.export_to_format(session, entity="immunizations")

        assert not export_dir.exists()

    def test_records_at_row_cap_are_all_exported(self, export_dir, session, immunizations) -> None:
        capped = ExportService(
            export_dir=export_dir,
            max_rows=3,
            registry=build_entity_registry(),
            configs=build_export_configs(),
        )

        artifact = capped.export_to_format(session, entity="immunizations")

        assert artifact.record_count == 3
        assert len(_read_csv(artifact.file_path)) == 3

    def test_unknown_format_and_entity(self, service, session) -> None:
        with pytest.raises(ExportConfigurationError):
            service.export_to_format(session, entity="patients", format="docx")
        with pytest.raises(UnsupportedEntityError):
            service.export_to_format(session, entity="vehicles")


# ---------------------------------------------------------------------------
# Excel and PDF
# ---------------------------------------------------------------------------


class TestExcelExport:
    def test_styled_workbook(self, service, session, immunizations) -> None:
        artifact = service.export_to_format(
            session,
            entity="immunizations",
            fields=["vaccine_type", "dose_number"],
            format="excel",
        )

        assert artifact.filename.endswith(".xlsx")
        workbook = load_workbook(artifact.file_path)
        sheet = workbook.active
        assert sheet.title == "Immunizations"
        assert [cell.value for cell in sheet[1]] == ["Vaccine Type", "Dose Number"]
        assert sheet["A1"].font.bold is True
        assert sheet.freeze_panes == "A2"
        assert sheet.max_row == 4
        assert sheet["A2"].value == "OPV"
        assert sheet["B2"].value == 2


class TestPDFExport:
    def test_pdf_is_written(self, service, session, immunizations) -> None:
        artifact = service.export_to_format(
            session,
            entity="immunizations",
            filters={"dateFrom": "2024-01-01"},
            format="pdf",
        )

        assert artifact.format == "pdf"
        assert artifact.record_count == 3
        assert artifact.file_path.read_bytes().startswith(b"%PDF")

    def test_empty_pdf(self, service, session) -> None:
        artifact = service.export_to_format(session, entity="facilities", format="pdf")

        assert artifact.record_count == 0
        assert artifact.file_path.stat().st_size > 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_unique_filename_pattern() -> None:
    first = unique_filename("patients_export", "csv")
    second = unique_filename("patients_export", "csv")

    assert re.fullmatch(r"patients_export_\d{8}T\d{12}Z_[0-9a-f]{6}\.csv", first)
    assert first != second


@pytest.mark.parametrize(
    ("date_from", "date_to", "expected"),
    [
        ("2024-01-01", "2024-01-31", "Period: 2024-01-01 to 2024-01-31"),
        ("2024-01-01", None, "From 2024-01-01"),
        (None, "2024-01-31", "To 2024-01-31"),
        (None, None, "All Time"),
    ],
)
def test_period_text(date_from, date_to, expected) -> None:
    assert period_text(date_from, date_to) == expected


def test_supported_entities_report_date_field(service) -> None:
    entities = {entity["name"]: entity for entity in service.supported_entities()}

    assert entities["immunizations"]["date_field"] == "administration_date"
    assert entities["patients"]["date_field"] == "created_at"
    assert "patient_name" in [field["name"] for field in entities["immunizations"]["fields"]]
