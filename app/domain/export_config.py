"""
app/domain/export_config.py

Per-entity export columns: storage field, human label, and how to read it.

Column order is the order of the human-readable header row. Derived columns
(patient_name, facility_name, disease_name) read eager-loaded relations.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache
from typing import Any, Callable, Iterable, Sequence

from app.domain.entity_config import EntityKind
from app.domain.errors import ExportConfigurationError
from db.base import Base
from db.models import (
    AntenatalCare,
    BirthStatistic,
    DeathStatistic,
    DiseaseCase,
    Facility,
    FamilyPlanningClient,
    Immunization,
    Patient,
)

Getter = Callable[[Any], Any]


@dataclass(frozen=True)
class ExportColumn:
    field: str
    label: str
    getter: Getter


@dataclass(frozen=True)
class EntityExportConfig:
    """
    Export layout for one entity.

    ``date_field`` overrides the date-range column; when None the export
    service picks the first well-known date column the model has.
    """

    entity: str
    model: type[Base]
    columns: tuple[ExportColumn, ...]
    default_fields: tuple[str, ...]
    eager_loads: tuple[str, ...] = ()
    date_field: str | None = None
    _by_field: dict[str, ExportColumn] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_field = {column.field: column for column in self.columns}
        unknown_defaults = [name for name in self.default_fields if name not in by_field]
        if unknown_defaults:
            raise ValueError(f"Export config {self.entity!r} has unknown default fields: {unknown_defaults}")
        object.__setattr__(self, "_by_field", by_field)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(column.field for column in self.columns)

    def resolve_columns(self, fields: Sequence[str] | None) -> list[ExportColumn]:
        """
        Return the columns for ``fields`` in the order given, or the defaults.

        Raises ExportConfigurationError for names this entity does not export.
        """

        requested = list(fields) if fields else list(self.default_fields)
        unknown = [name for name in requested if name not in self._by_field]
        if unknown:
            raise ExportConfigurationError(
                f"Unknown export fields for {self.entity}: {', '.join(unknown)}. "
                f"Valid: {', '.join(self.field_names)}"
            )
        return [self._by_field[name] for name in dict.fromkeys(requested)]


def format_export_value(value: Any) -> Any:
    """
    Normalise one value for tabular output.
    """

    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    return value


def map_to_fields(record: Any, columns: Iterable[ExportColumn]) -> dict[str, Any]:
    """
    Translate a persisted record into ``{label: value}`` for the given columns.
    """

    return {column.label: format_export_value(column.getter(record)) for column in columns}


# ---------------------------------------------------------------------------
# Column builders
# ---------------------------------------------------------------------------


def _attr(name: str, label: str) -> ExportColumn:
    return ExportColumn(field=name, label=label, getter=lambda record: getattr(record, name, None))


def _patient_name(record: Any) -> str:
    patient = getattr(record, "patient", None)
    return patient.full_name if patient is not None else ""


def _facility_name(record: Any) -> str:
    facility = getattr(record, "facility", None)
    return facility.name if facility is not None else ""


def _disease_name(record: Any) -> str:
    disease = getattr(record, "disease", None)
    return disease.name if disease is not None else ""


_ID = _attr("id", "ID")


def _linked_columns() -> tuple[ExportColumn, ...]:
    return (
        _attr("patient_id", "Patient ID"),
        ExportColumn("patient_name", "Patient Name", _patient_name),
        _attr("facility_id", "Facility ID"),
        ExportColumn("facility_name", "Facility Name", _facility_name),
    )


def _default_export_configs() -> list[EntityExportConfig]:
    return [
        EntityExportConfig(
            entity=EntityKind.PATIENTS.value,
            model=Patient,
            columns=(
                _ID,
                _attr("first_name", "First Name"),
                _attr("last_name", "Last Name"),
                _attr("gender", "Gender"),
                _attr("date_of_birth", "Date of Birth"),
                _attr("phone_number", "Phone Number"),
                _attr("email", "Email"),
                _attr("address", "Address"),
                _attr("next_of_kin", "Next of Kin"),
                _attr("blood_group", "Blood Group"),
                _attr("allergies", "Allergies"),
                _attr("chronic_conditions", "Chronic Conditions"),
                _attr("is_deceased", "Is Deceased"),
                _attr("date_of_death", "Date of Death"),
            ),
            default_fields=("id", "first_name", "last_name", "gender", "date_of_birth", "phone_number", "address"),
            # Ranges apply to registration time, not date_of_death.
            date_field="created_at",
        ),
        EntityExportConfig(
            entity=EntityKind.FACILITIES.value,
            model=Facility,
            columns=(
                _ID,
                _attr("name", "Name"),
                _attr("type", "Type"),
                _attr("lga", "LGA"),
                _attr("ward", "Ward"),
                _attr("address", "Address"),
                _attr("contact_person", "Contact Person"),
                _attr("phone_number", "Phone Number"),
                _attr("email", "Email"),
                _attr("is_active", "Is Active"),
            ),
            default_fields=("id", "name", "type", "lga", "ward", "address", "contact_person", "phone_number"),
        ),
        EntityExportConfig(
            entity=EntityKind.BIRTH_STATISTICS.value,
            model=BirthStatistic,
            columns=(
                _ID,
                *_linked_columns(),
                _attr("birth_date", "Birth Date"),
                _attr("birth_time", "Birth Time"),
                _attr("birth_weight", "Birth Weight (kg)"),
                _attr("delivery_type", "Delivery Type"),
                _attr("apgar_score", "APGAR Score"),
                _attr("complications", "Complications"),
                _attr("mother_id", "Mother ID"),
            ),
            default_fields=("id", "patient_id", "facility_id", "birth_date", "birth_weight", "delivery_type"),
            eager_loads=("patient", "facility"),
        ),
        EntityExportConfig(
            entity=EntityKind.DEATH_STATISTICS.value,
            model=DeathStatistic,
            columns=(
                _ID,
                *_linked_columns(),
                _attr("date_of_death", "Date of Death"),
                _attr("time_of_death", "Time of Death"),
                _attr("primary_cause_of_death", "Primary Cause of Death"),
                _attr("secondary_cause_of_death", "Secondary Cause of Death"),
                _attr("place_of_death", "Place of Death"),
                _attr("manner_of_death", "Manner of Death"),
            ),
            default_fields=(
                "id",
                "patient_id",
                "facility_id",
                "date_of_death",
                "primary_cause_of_death",
                "manner_of_death",
            ),
            eager_loads=("patient", "facility"),
        ),
        EntityExportConfig(
            entity=EntityKind.IMMUNIZATIONS.value,
            model=Immunization,
            columns=(
                _ID,
                *_linked_columns(),
                _attr("vaccine_type", "Vaccine Type"),
                _attr("vaccine_name", "Vaccine Name"),
                _attr("dose_number", "Dose Number"),
                _attr("administration_date", "Administration Date"),
                _attr("administered_by", "Administered By"),
                _attr("batch_number", "Batch Number"),
                _attr("expiry_date", "Expiry Date"),
                _attr("next_appointment", "Next Appointment"),
                _attr("status", "Status"),
            ),
            default_fields=(
                "id",
                "patient_id",
                "facility_id",
                "vaccine_type",
                "vaccine_name",
                "administration_date",
                "dose_number",
            ),
            eager_loads=("patient", "facility"),
        ),
        EntityExportConfig(
            entity=EntityKind.ANTENATAL_CARE.value,
            model=AntenatalCare,
            columns=(
                _ID,
                *_linked_columns(),
                _attr("registration_date", "Registration Date"),
                _attr("lmp", "Last Menstrual Period"),
                _attr("edd", "Expected Delivery Date"),
                _attr("gravida", "Gravida"),
                _attr("para", "Para"),
                _attr("status", "Status"),
                _attr("outcome", "Outcome"),
            ),
            default_fields=("id", "patient_id", "facility_id", "registration_date", "lmp", "edd", "status"),
            eager_loads=("patient", "facility"),
        ),
        EntityExportConfig(
            entity=EntityKind.DISEASE_CASES.value,
            model=DiseaseCase,
            columns=(
                _ID,
                _attr("patient_id", "Patient ID"),
                ExportColumn("patient_name", "Patient Name", _patient_name),
                _attr("disease_id", "Disease ID"),
                ExportColumn("disease_name", "Disease Name", _disease_name),
                _attr("facility_id", "Facility ID"),
                ExportColumn("facility_name", "Facility Name", _facility_name),
                _attr("reporting_date", "Reporting Date"),
                _attr("diagnosis_date", "Diagnosis Date"),
                _attr("onset_date", "Onset Date"),
                _attr("diagnosis_type", "Diagnosis Type"),
                _attr("severity", "Severity"),
                _attr("hospitalized", "Hospitalized"),
                _attr("outcome", "Outcome"),
                _attr("status", "Status"),
            ),
            default_fields=(
                "id",
                "patient_id",
                "disease_id",
                "facility_id",
                "reporting_date",
                "diagnosis_date",
                "severity",
                "status",
            ),
            eager_loads=("patient", "facility", "disease"),
        ),
        EntityExportConfig(
            entity=EntityKind.FAMILY_PLANNING_CLIENTS.value,
            model=FamilyPlanningClient,
            columns=(
                _ID,
                *_linked_columns(),
                _attr("registration_date", "Registration Date"),
                _attr("client_type", "Client Type"),
                _attr("marital_status", "Marital Status"),
                _attr("number_of_children", "Number of Children"),
                _attr("status", "Status"),
            ),
            default_fields=(
                "id",
                "patient_id",
                "facility_id",
                "registration_date",
                "client_type",
                "marital_status",
                "status",
            ),
            eager_loads=("patient", "facility"),
        ),
    ]


@lru_cache(maxsize=1)
def build_export_configs() -> dict[str, EntityExportConfig]:
    """
    Return export layouts keyed by entity name, in EntityKind order.
    """

    configs = {config.entity: config for config in _default_export_configs()}
    missing = [kind.value for kind in EntityKind if kind.value not in configs]
    if missing:
        raise ValueError(f"Missing export configuration for: {missing}")
    return configs
