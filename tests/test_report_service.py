"""
tests/test_report_service.py

Pytest tests for ReportService. Sections are captured before rendering so
the grouped counts can be asserted directly; one test per report checks the
real PDF output.
"""

from __future__ import annotations

import uuid
from datetime import date
from pathlib import Path

import pytest

from app.domain.errors import ExportConfigurationError, ReportEntityNotFoundError, UnsupportedReportTypeError
from app.services.report_service import ReportOptions, ReportService
from db.models import AntenatalCare, BirthStatistic, DiseaseCase, Immunization
from tests.conftest import add_disease, add_facility, add_patient


@pytest.fixture()
def export_dir(tmp_path: Path) -> Path:
    return tmp_path / "reports"


@pytest.fixture()
def service(export_dir: Path) -> ReportService:
    return ReportService(export_dir=export_dir)


@pytest.fixture()
def captured(monkeypatch: pytest.MonkeyPatch) -> dict:
    """Replace the PDF writer and record what it was asked to draw."""
    calls: dict = {}

    def fake_write(path, *, title, subtitle_lines, sections):
        calls.update(path=path, title=title, subtitle_lines=list(subtitle_lines), sections=sections)

    monkeypatch.setattr("app.services.report_service.write_report_pdf", fake_write)
    return calls


@pytest.fixture()
def seeded(session):
    north = add_facility(session, name="North Clinic", type="Clinic")
    south = add_facility(session, name="South Hospital")
    patient = add_patient(session)
    malaria = add_disease(session, "Malaria")
    cholera = add_disease(session, "Cholera")

    def immunization(facility, vaccine, dose, status, given_on):
        return Immunization(
            id=uuid.uuid4(),
            patient_id=patient.id,
            facility_id=facility.id,
            vaccine_type=vaccine,
            vaccine_name=vaccine,
            dose_number=dose,
            status=status,
            administration_date=given_on,
        )

    def disease_case(facility, disease, severity, reported_on):
        return DiseaseCase(
            id=uuid.uuid4(),
            patient_id=patient.id,
            disease_id=disease.id,
            facility_id=facility.id,
            reporting_date=reported_on,
            diagnosis_date=reported_on,
            severity=severity,
        )

    session.add_all(
        [
            immunization(north, "BCG", 1, "Administered", date(2024, 1, 10)),
            immunization(north, "OPV", 1, None, date(2024, 2, 10)),
            immunization(south, "OPV", 2, "Administered", date(2024, 3, 10)),
            immunization(south, "Measles", 1, "Missed", date(2023, 12, 1)),
            disease_case(north, malaria, "Mild", date(2024, 1, 5)),
            disease_case(north, malaria, "Severe", date(2024, 1, 6)),
            disease_case(north, cholera, None, date(2024, 1, 7)),
            disease_case(south, cholera, "Mild", date(2024, 1, 8)),
            AntenatalCare(
                id=uuid.uuid4(),
                patient_id=patient.id,
                facility_id=north.id,
                registration_date=date(2024, 1, 3),
                lmp=date(2023, 10, 1),
                edd=date(2024, 7, 8),
                status="Active",
            ),
            BirthStatistic(
                id=uuid.uuid4(),
                patient_id=patient.id,
                facility_id=north.id,
                birth_date=date(2024, 2, 2),
                delivery_type="Vaginal",
            ),
            BirthStatistic(
                id=uuid.uuid4(),
                patient_id=patient.id,
                facility_id=south.id,
                birth_date=date(2024, 2, 3),
                delivery_type="Cesarean",
            ),
        ]
    )
    session.commit()
    return {"north": north, "south": south, "malaria": malaria, "cholera": cholera}


def _sections(calls: dict) -> dict:
    return {section.title: section for section in calls["sections"]}


# ---------------------------------------------------------------------------
# Request failures
# ---------------------------------------------------------------------------


class TestReportFailures:
    def test_unknown_report_type(self, service, session) -> None:
        with pytest.raises(UnsupportedReportTypeError):
            service.generate_report(session, "weekly_digest")

    def test_facility_summary_requires_facility_id(self, service, session) -> None:
        with pytest.raises(ExportConfigurationError, match="facility_id is required for facility_summary reports"):
            service.generate_report(session, "facility_summary")

    @pytest.mark.parametrize("facility_id", [str(uuid.uuid4()), "not-a-uuid"])
    def test_unknown_facility_writes_nothing(self, service, session, export_dir, facility_id) -> None:
        with pytest.raises(ReportEntityNotFoundError) as exc_info:
            service.generate_report(session, "facility_summary", ReportOptions(facility_id=facility_id))

        assert exc_info.value.label == "Facility"
        assert str(exc_info.value) == f"Facility not found with ID: {facility_id}"
        assert not export_dir.exists()

    def test_unknown_disease(self, service, session) -> None:
        with pytest.raises(ReportEntityNotFoundError, match="Disease not found"):
            service.generate_report(
                session,
                "disease_surveillance",
                ReportOptions(disease_id=str(uuid.uuid4())),
            )

    def test_invalid_date(self, service, session) -> None:
        with pytest.raises(ExportConfigurationError):
            service.generate_report(session, "immunization_coverage", ReportOptions(date_from="someday"))


# ---------------------------------------------------------------------------
# Report contents
# ---------------------------------------------------------------------------


class TestImmunizationCoverage:
    def test_grouped_counts(self, service, session, seeded, captured) -> None:
        service.generate_report(
            session,
            "immunization_coverage",
            ReportOptions(date_from=date(2024, 1, 1), date_to=date(2024, 12, 31)),
        )

        sections = _sections(captured)
        assert captured["title"] == "Immunization Coverage Report"
        assert captured["subtitle_lines"] == ["Period: 2024-01-01 to 2024-12-31"]
        assert sections["Immunization Coverage Report"].text == "All Facilities\nPeriod: 2024-01-01 to 2024-12-31"
        assert sections["Summary"].table.rows == [("Total Immunizations", 3)]
        assert sections["Vaccine Type Distribution"].table.rows == [("OPV", 2), ("BCG", 1)]
        assert sections["Dose Distribution"].table.rows == [(1, 2), (2, 1)]
        assert dict(sections["Status Distribution"].table.rows) == {"Administered": 2, "Unspecified": 1}
        assert sections["Top Facilities"].table.headers == ("Facility", "Immunizations")
        assert dict(sections["Top Facilities"].table.rows) == {"North Clinic": 2, "South Hospital": 1}

    def test_facility_filter(self, service, session, seeded, captured) -> None:
        service.generate_report(
            session,
            "immunization_coverage",
            ReportOptions(facility_id=str(seeded["south"].id)),
        )

        sections = _sections(captured)
        assert sections["Immunization Coverage Report"].text == "Facility: South Hospital\nPeriod: All Time"
        assert sections["Summary"].table.rows == [("Total Immunizations", 2)]

    def test_pdf_is_rendered(self, service, session, seeded, export_dir) -> None:
        artifact = service.generate_report(session, "immunization_coverage")

        assert artifact.file_path.parent == export_dir
        assert artifact.filename.startswith("immunization_coverage_report_")
        assert artifact.file_path.read_bytes().startswith(b"%PDF")


class TestFacilitySummary:
    def test_statistics_and_top_diseases(self, service, session, seeded, captured) -> None:
        service.generate_report(
            session,
            "facility_summary",
            ReportOptions(facility_id=str(seeded["north"].id)),
        )

        sections = _sections(captured)
        assert captured["title"] == "Healthcare Facility Summary Report"
        assert sections["Facility Information"].text.startswith("Name: North Clinic\nType: Clinic\n")
        statistics = dict(sections["Summary Statistics"].table.rows)
        assert statistics["Patients"] == 1
        assert statistics["Immunizations"] == 2
        assert statistics["Disease Cases"] == 3
        assert statistics["Births"] == 1
        assert statistics["Antenatal Registrations"] == 1
        assert statistics["Deaths"] == 0
        assert sections["Top Diseases"].table.rows == [("Malaria", 2), ("Cholera", 1)]

    def test_pdf_is_rendered(self, service, session, seeded) -> None:
        artifact = service.generate_report(
            session,
            "facility_summary",
            ReportOptions(facility_id=str(seeded["north"].id)),
        )

        assert artifact.file_path.read_bytes().startswith(b"%PDF")


class TestDiseaseSurveillance:
    def test_breakdowns(self, service, session, seeded, captured) -> None:
        service.generate_report(
            session,
            "disease_surveillance",
            ReportOptions(disease_id=str(seeded["cholera"].id)),
        )

        sections = _sections(captured)
        assert sections["Disease Surveillance Report"].text.splitlines() == [
            "Disease: Cholera",
            "All Facilities",
            "Period: All Time",
        ]
        assert sections["Disease Breakdown"].table.rows == [("Cholera", 2)]
        assert dict(sections["Severity Breakdown"].table.rows) == {"Mild": 1, "Unspecified": 1}
        assert dict(sections["Top Facilities"].table.rows) == {"North Clinic": 1, "South Hospital": 1}


class TestMaternalHealth:
    def test_summary(self, service, session, seeded, captured) -> None:
        service.generate_report(session, "maternal_health")

        sections = _sections(captured)
        assert sections["Summary"].table.rows == [
            ("Total Antenatal Registrations", 1),
            ("Live Births", 2),
        ]
        assert dict(sections["Delivery Types"].table.rows) == {"Cesarean": 1, "Vaginal": 1}
        assert sections["Antenatal Care Status"].table.rows == [("Active", 1)]
        assert sections["Top Facilities"].table.rows == [("North Clinic", 1)]


def test_supported_report_types(service) -> None:
    types = {item["name"]: item for item in service.supported_report_types()}

    assert list(types) == ["facility_summary", "disease_surveillance", "maternal_health", "immunization_coverage"]
    assert types["facility_summary"]["required_params"] == ["facility_id"]
