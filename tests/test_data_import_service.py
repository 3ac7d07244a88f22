"""
tests/test_data_import_service.py

Pytest tests for DataImportService against an in-memory SQLite database.

Covers:
  - request-level failures raised before any row is read
  - row partitioning and persistence of valid rows
  - foreign-key demotion of rows with missing parents
  - all-or-nothing persistence
  - upload cleanup on every outcome
  - file analysis and entity schema description
"""

from __future__ import annotations

import uuid
from datetime import date

import pytest
from sqlalchemy import func, select

from app.domain.entity_config import build_entity_registry
from app.domain.errors import ImportPersistenceError, UnsupportedEntityError
from app.services.data_import_service import DataImportService
from app.validators.mapping_validator import MappingValidationError
from db.models import Facility, Immunization, Patient
from tests.conftest import add_facility, add_patient

PATIENT_HEADER = ["First Name", "Last Name", "Sex", "DOB", "Email"]
PATIENT_MAPPINGS = {
    "First Name": "first_name",
    "Last Name": "last_name",
    "Sex": "gender",
    "DOB": "date_of_birth",
    "Email": "email",
}
FACILITY_MAPPINGS = {"Name": "name", "Type": "type", "LGA": "lga"}
IMMUNIZATION_MAPPINGS = {
    "Patient": "patient_id",
    "Facility": "facility_id",
    "Vaccine Type": "vaccine_type",
    "Vaccine": "vaccine_name",
    "Dose": "dose_number",
    "Given On": "administration_date",
}


@pytest.fixture()
def service() -> DataImportService:
    return DataImportService(
        registry=build_entity_registry(),
        batch_size=2,
        log_validation_errors=False,
    )


def _count(session, model) -> int:
    return session.scalar(select(func.count()).select_from(model))


# ---------------------------------------------------------------------------
# Request-level failures
# ---------------------------------------------------------------------------


class TestRequestFailures:
    def test_unknown_entity(self, service, session, write_csv) -> None:
        path = write_csv([["a"], ["1"]])

        with pytest.raises(UnsupportedEntityError):
            service.import_file(session, path, entity="vehicles", mappings={"a": "a"})

        assert not path.exists()

    def test_required_field_unmapped_reads_no_rows(self, service, session, write_csv) -> None:
        path = write_csv([PATIENT_HEADER, ["Ada", "Obi", "Female", "1990-05-17", ""]])

        with pytest.raises(MappingValidationError) as exc_info:
            service.import_file(
                session,
                path,
                entity="patients",
                mappings={"First Name": "first_name", "Last Name": "last_name"},
            )

        assert [error.target_field for error in exc_info.value.errors] == ["gender", "date_of_birth"]
        assert _count(session, Patient) == 0
        assert not path.exists()

    def test_mapped_column_missing_from_header(self, service, session, write_csv) -> None:
        path = write_csv([["First Name", "Last Name", "Sex"], ["Ada", "Obi", "Female"]])

        with pytest.raises(MappingValidationError) as exc_info:
            service.import_file(session, path, entity="patients", mappings=PATIENT_MAPPINGS)

        missing = {error.source_column for error in exc_info.value.errors}
        assert missing == {"DOB", "Email"}
        assert _count(session, Patient) == 0


# ---------------------------------------------------------------------------
# Successful imports
# ---------------------------------------------------------------------------


class TestImport:
    def test_valid_rows_are_persisted_and_invalid_rows_reported(self, service, session, write_csv) -> None:
        path = write_csv(
            [
                PATIENT_HEADER,
                ["Ada", "Obi", "Female", "1990-05-17", "ada@example.org"],
                ["", "Eze", "Male", "1985-01-01", ""],
                ["Chi", "Okafor", "Male", "03/14/1978", ""],
                ["Ngozi", "Ade", "Unknown", "nope", ""],
            ]
        )

        result = service.import_file(session, path, entity="patients", mappings=PATIENT_MAPPINGS)

        assert (result.total, result.valid_count, result.invalid_count, result.created_count) == (4, 2, 2, 2)
        assert [error.row for error in result.errors] == [2, 4]
        assert result.errors[0].errors == ("first_name is required",)
        assert result.errors[1].errors == (
            "gender must be one of: Male, Female",
            "date_of_birth must be a valid date",
        )
        assert result.errors[1].original["First Name"] == "Ngozi"

        patients = session.scalars(select(Patient).order_by(Patient.first_name)).all()
        assert [(p.first_name, p.date_of_birth) for p in patients] == [
            ("Ada", date(1990, 5, 17)),
            ("Chi", date(1978, 3, 14)),
        ]
        assert all(patient.is_deceased is False for patient in patients)
        assert patients[1].email is None
        assert not path.exists()

    def test_unknown_target_field_is_a_warning(self, service, session, write_csv) -> None:
        path = write_csv([[*PATIENT_HEADER, "Shoe"], ["Ada", "Obi", "Female", "1990-05-17", "", "42"]])

        result = service.import_file(
            session,
            path,
            entity="patients",
            mappings={**PATIENT_MAPPINGS, "Shoe": "shoe_size"},
        )

        assert result.created_count == 1
        assert result.warnings == ["Unknown field 'shoe_size' is mapped"]

    def test_leading_lines_are_skipped_before_header(self, service, session, write_csv) -> None:
        path = write_csv(
            [
                ["Facility register export"],
                ["Generated 2024-06-01"],
                PATIENT_HEADER,
                ["Ada", "Obi", "Female", "1990-05-17", ""],
            ]
        )

        result = service.import_file(session, path, entity="patients", mappings=PATIENT_MAPPINGS, skip_lines=2)

        assert (result.total, result.created_count, result.errors) == (1, 1, [])
        assert session.scalar(select(Patient.first_name)) == "Ada"

    def test_imported_rows_record_creation_time_only(self, service, session, write_csv) -> None:
        path = write_csv([["Name", "Type", "LGA"], ["Clinic A", "Clinic", "Ikeja"]])

        service.import_file(session, path, entity="facilities", mappings=FACILITY_MAPPINGS)

        facility = session.scalars(select(Facility)).one()
        assert facility.created_at is not None
        assert "updated_at" not in Facility.__table__.columns

    def test_empty_file_creates_nothing(self, service, session, write_csv) -> None:
        path = write_csv([])

        result = service.import_file(session, path, entity="patients", mappings=PATIENT_MAPPINGS)

        assert (result.total, result.created_count, result.errors) == (0, 0, [])


class TestForeignKeys:
    def test_rows_with_missing_parents_are_demoted(self, service, session, write_csv) -> None:
        facility = add_facility(session)
        patient = add_patient(session)
        ghost = uuid.uuid4()
        path = write_csv(
            [
                list(IMMUNIZATION_MAPPINGS),
                [str(patient.id), str(facility.id), "BCG", "BCG", "1", "2024-02-01"],
                [str(ghost), str(facility.id), "OPV", "OPV", "2", "2024-02-02"],
                [str(patient.id), "not-a-uuid", "OPV", "OPV", "1", "2024-02-03"],
            ]
        )

        result = service.import_file(session, path, entity="immunizations", mappings=IMMUNIZATION_MAPPINGS)

        assert (result.total, result.valid_count, result.invalid_count, result.created_count) == (3, 3, 0, 1)
        assert [error.row for error in result.errors] == [2, 3]
        assert result.errors[0].errors == (
            f"Foreign key constraint failed: patient_id references Patient but no record found with ID {ghost}",
        )
        assert result.errors[1].errors == (
            "Foreign key constraint failed: facility_id references Facility "
            "but no record found with ID not-a-uuid",
        )

        stored = session.scalars(select(Immunization)).one()
        assert stored.patient_id == patient.id
        assert stored.dose_number == 1
        assert stored.administration_date == date(2024, 2, 1)


class TestAtomicity:
    def test_database_error_rolls_back_every_row(self, service, session, write_csv) -> None:
        add_facility(session, name="Clinic A")
        path = write_csv(
            [
                list(FACILITY_MAPPINGS),
                ["Clinic B", "Clinic", "Ikeja"],
                ["Clinic C", "Clinic", "Ikeja"],
                ["Clinic A", "Clinic", "Ikeja"],
            ]
        )

        with pytest.raises(ImportPersistenceError) as exc_info:
            service.import_file(session, path, entity="facilities", mappings=FACILITY_MAPPINGS)

        assert exc_info.value.result.created_count == 0
        assert exc_info.value.result.valid_count == 3
        assert session.scalars(select(Facility.name)).all() == ["Clinic A"]
        assert not path.exists()


# ---------------------------------------------------------------------------
# Analysis and schema
# ---------------------------------------------------------------------------


class TestAnalyzeFile:
    def test_suggests_entity_and_mappings(self, service, write_csv) -> None:
        path = write_csv(
            [
                ["First Name", "Last Name", "Gender", "Date of Birth", "Phone"],
                ["Ada", "Obi", "Female", "1990-05-17", "0801"],
                ["Chi", "Eze", "Male", "1985-01-01", ""],
                ["Ada", "Ade", "Female", "1979-09-09", "0802"],
                ["Tobi", "Ola", "Male", "2001-12-12", "0803"],
            ]
        )

        analysis = service.analyze_file(path)

        assert analysis.total_rows == 4
        assert analysis.sample_size == 4
        assert analysis.mappable_to == "patient"
        assert analysis.suggested_entity == "patients"
        assert analysis.suggested_mappings == {
            "First Name": "first_name",
            "Last Name": "last_name",
            "Gender": "gender",
            "Date of Birth": "date_of_birth",
        }

        first_name = analysis.columns["first_name"]
        assert first_name.examples == ("Ada", "Chi", "Ada")
        assert (first_name.non_empty_count, first_name.unique_count) == (4, 3)
        assert analysis.columns["date_of_birth"].data_type == "date"
        assert analysis.columns["phone"].non_empty_count == 3

    def test_leading_lines_are_skipped(self, service, write_csv) -> None:
        path = write_csv([["Export v2"], ["Name", "Type", "LGA"], ["Clinic A", "Clinic", "Ikeja"]])

        analysis = service.analyze_file(path, skip_lines=1)

        assert analysis.headers == ("Name", "Type", "LGA")
        assert analysis.total_rows == 1

    def test_unrecognised_headers(self, service, write_csv) -> None:
        analysis = service.analyze_file(write_csv([["colour", "size"], ["red", "L"]]))

        assert analysis.mappable_to == "unknown"
        assert analysis.suggested_entity is None
        assert analysis.suggested_mappings == {}


class TestEntityCatalogue:
    def test_supported_entities_lists_every_kind(self, service) -> None:
        names = [entity["name"] for entity in service.supported_entities()]

        assert names[:2] == ["patients", "facilities"]
        assert len(names) == 8

    def test_entity_schema_describes_fields(self, service) -> None:
        schema = service.entity_schema("immunizations")
        fields = {field["name"]: field for field in schema["fields"]}

        assert fields["patient_id"]["references"] == "Patient"
        assert fields["patient_id"]["is_required"] is True
        assert fields["dose_number"]["data_type"] == "number"
        assert fields["dose_number"]["validation"] == {"min": 1}
        assert fields["vaccine_type"]["label"] == "Vaccine Type"
        assert schema["required_fields"][0] == "patient_id"

    def test_validate_field_mappings(self, service) -> None:
        report = service.validate_field_mappings({"Name": "name"}, "facilities")

        assert report.valid is False
        assert report.errors == (
            "Required field 'type' is not mapped",
            "Required field 'lga' is not mapped",
        )
