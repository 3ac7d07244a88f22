"""
app/domain/entity_config.py

Static per-entity import rules and the registry that serves them.

The registry is built once per process and is read-only afterwards. Every
EntityKind must have exactly one configuration; construction fails
otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from app.domain.errors import UnsupportedEntityError
from db.base import Base
from db.models import (
    AntenatalCare,
    BirthStatistic,
    DeathStatistic,
    DiseaseCase,
    DiseaseRegistry,
    Facility,
    FamilyPlanningClient,
    Immunization,
    Patient,
)


class SemanticType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class EntityKind(str, Enum):
    PATIENTS = "patients"
    FACILITIES = "facilities"
    BIRTH_STATISTICS = "birth_statistics"
    DEATH_STATISTICS = "death_statistics"
    IMMUNIZATIONS = "immunizations"
    ANTENATAL_CARE = "antenatal_care"
    DISEASE_CASES = "disease_cases"
    FAMILY_PLANNING_CLIENTS = "family_planning_clients"


@dataclass(frozen=True)
class FieldRule:
    """
    Constraints applied to one field when it carries a value.

    A rule with no constraints still enables the declared-type check.
    """

    allowed_values: tuple[str, ...] = ()
    min_value: float | None = None
    max_value: float | None = None
    pattern: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.allowed_values:
            payload["allowed_values"] = list(self.allowed_values)
        if self.min_value is not None:
            payload["min"] = self.min_value
        if self.max_value is not None:
            payload["max"] = self.max_value
        if self.pattern is not None:
            payload["pattern"] = self.pattern
        return payload


@dataclass(frozen=True)
class ForeignKeyRule:
    """
    A field whose value must be the primary key of an existing row.
    """

    referenced_entity: str
    model: type[Base]
    referenced_field: str = "id"


@dataclass(frozen=True)
class EntityImportConfig:
    kind: EntityKind
    label: str
    description: str
    model: type[Base]
    required_fields: tuple[str, ...]
    data_types: Mapping[str, SemanticType]
    unique_fields: tuple[str, ...] = ()
    validations: Mapping[str, FieldRule] = field(default_factory=dict)
    foreign_keys: Mapping[str, ForeignKeyRule] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Nested maps are exposed as read-only views.
        object.__setattr__(self, "data_types", MappingProxyType(dict(self.data_types)))
        object.__setattr__(self, "validations", MappingProxyType(dict(self.validations)))
        object.__setattr__(self, "foreign_keys", MappingProxyType(dict(self.foreign_keys)))

        declared = set(self.data_types)
        undeclared = [
            name
            for name in (*self.required_fields, *self.unique_fields, *self.validations, *self.foreign_keys)
            if name not in declared
        ]
        if undeclared:
            raise ValueError(
                f"Entity {self.kind.value!r} references undeclared fields: {sorted(set(undeclared))}"
            )

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self.data_types)

    def type_of(self, field_name: str) -> SemanticType:
        return self.data_types.get(field_name, SemanticType.STRING)


class EntityRegistry:
    """
    Immutable lookup of import configurations by entity name.
    """

    def __init__(self, configs: Iterable[EntityImportConfig]) -> None:
        by_kind: dict[EntityKind, EntityImportConfig] = {}
        for config in configs:
            if config.kind in by_kind:
                raise ValueError(f"Duplicate import configuration for {config.kind.value!r}.")
            by_kind[config.kind] = config

        missing = [kind.value for kind in EntityKind if kind not in by_kind]
        if missing:
            raise ValueError(f"Missing import configuration for: {missing}")

        # Keep EntityKind declaration order for listings.
        self._configs: Mapping[str, EntityImportConfig] = MappingProxyType(
            {kind.value: by_kind[kind] for kind in EntityKind}
        )

    def get(self, entity: str) -> EntityImportConfig:
        config = self._configs.get(entity)
        if config is None:
            raise UnsupportedEntityError(entity)
        return config

    def __contains__(self, entity: object) -> bool:
        return entity in self._configs

    def __iter__(self) -> Iterator[EntityImportConfig]:
        return iter(self._configs.values())

    def __len__(self) -> int:
        return len(self._configs)

    def names(self) -> tuple[str, ...]:
        return tuple(self._configs)


# ---------------------------------------------------------------------------
# Shared rules
# ---------------------------------------------------------------------------

_S = SemanticType.STRING
_N = SemanticType.NUMBER
_D = SemanticType.DATE
_B = SemanticType.BOOLEAN

_PATIENT_FK = ForeignKeyRule(referenced_entity="Patient", model=Patient)
_FACILITY_FK = ForeignKeyRule(referenced_entity="Facility", model=Facility)
_DISEASE_FK = ForeignKeyRule(referenced_entity="DiseaseRegistry", model=DiseaseRegistry)

_TYPED = FieldRule()


def _facility_record(kind: EntityKind, **kwargs: Any) -> EntityImportConfig:
    """Build a config for a record that always belongs to a patient and a facility."""
    foreign_keys = {"patient_id": _PATIENT_FK, "facility_id": _FACILITY_FK}
    foreign_keys.update(kwargs.pop("foreign_keys", {}))
    return EntityImportConfig(kind=kind, foreign_keys=foreign_keys, **kwargs)


def _default_configs() -> list[EntityImportConfig]:
    return [
        EntityImportConfig(
            kind=EntityKind.PATIENTS,
            label="Patients",
            description="Patient demographic and medical information",
            model=Patient,
            required_fields=("first_name", "last_name", "gender", "date_of_birth"),
            data_types={
                "first_name": _S,
                "last_name": _S,
                "gender": _S,
                "date_of_birth": _D,
                "phone_number": _S,
                "email": _S,
                "address": _S,
                "next_of_kin": _S,
                "blood_group": _S,
                "allergies": _S,
                "chronic_conditions": _S,
                "is_deceased": _B,
                "date_of_death": _D,
            },
            validations={
                "gender": FieldRule(allowed_values=("Male", "Female")),
                "date_of_birth": _TYPED,
                "email": FieldRule(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"),
                "is_deceased": _TYPED,
                "date_of_death": _TYPED,
            },
        ),
        EntityImportConfig(
            kind=EntityKind.FACILITIES,
            label="Facilities",
            description="Healthcare facilities information",
            model=Facility,
            required_fields=("name", "type", "lga"),
            unique_fields=("name",),
            data_types={
                "name": _S,
                "type": _S,
                "lga": _S,
                "ward": _S,
                "address": _S,
                "contact_person": _S,
                "phone_number": _S,
                "email": _S,
                "is_active": _B,
            },
            validations={
                "type": FieldRule(allowed_values=("Hospital", "Clinic", "Health Center", "Dispensary")),
                "is_active": _TYPED,
            },
        ),
        _facility_record(
            EntityKind.BIRTH_STATISTICS,
            label="Birth Statistics",
            description="Birth records and statistics",
            model=BirthStatistic,
            required_fields=("patient_id", "facility_id", "birth_date"),
            data_types={
                "patient_id": _S,
                "facility_id": _S,
                "birth_date": _D,
                "birth_time": _S,
                "delivery_type": _S,
                "birth_weight": _N,
                "apgar_score": _S,
                "complications": _S,
                "mother_id": _S,
            },
            validations={
                "birth_date": _TYPED,
                "birth_weight": FieldRule(min_value=0, max_value=10),
                "delivery_type": FieldRule(allowed_values=("Vaginal", "Cesarean", "Assisted", "Other")),
            },
            foreign_keys={"mother_id": _PATIENT_FK},
        ),
        _facility_record(
            EntityKind.DEATH_STATISTICS,
            label="Death Statistics",
            description="Death records and statistics",
            model=DeathStatistic,
            required_fields=("patient_id", "facility_id", "date_of_death", "primary_cause_of_death"),
            data_types={
                "patient_id": _S,
                "facility_id": _S,
                "date_of_death": _D,
                "time_of_death": _S,
                "place_of_death": _S,
                "primary_cause_of_death": _S,
                "secondary_cause_of_death": _S,
                "manner_of_death": _S,
            },
            validations={
                "date_of_death": _TYPED,
                "manner_of_death": FieldRule(
                    allowed_values=(
                        "Natural",
                        "Accident",
                        "Suicide",
                        "Homicide",
                        "Undetermined",
                        "Pending Investigation",
                    )
                ),
            },
        ),
        _facility_record(
            EntityKind.IMMUNIZATIONS,
            label="Immunizations",
            description="Vaccination and immunization records",
            model=Immunization,
            required_fields=("patient_id", "facility_id", "vaccine_type", "vaccine_name", "administration_date"),
            data_types={
                "patient_id": _S,
                "facility_id": _S,
                "vaccine_type": _S,
                "vaccine_name": _S,
                "dose_number": _N,
                "administration_date": _D,
                "administered_by": _S,
                "batch_number": _S,
                "expiry_date": _D,
                "status": _S,
            },
            validations={
                "administration_date": _TYPED,
                "expiry_date": _TYPED,
                "dose_number": FieldRule(min_value=1),
                "status": FieldRule(allowed_values=("Scheduled", "Administered", "Missed", "Cancelled")),
            },
        ),
        _facility_record(
            EntityKind.ANTENATAL_CARE,
            label="Antenatal Care",
            description="Antenatal care and pregnancy records",
            model=AntenatalCare,
            required_fields=("patient_id", "facility_id", "registration_date", "lmp", "edd"),
            data_types={
                "patient_id": _S,
                "facility_id": _S,
                "registration_date": _D,
                "lmp": _D,
                "edd": _D,
                "gravida": _N,
                "para": _N,
                "status": _S,
            },
            validations={
                "registration_date": _TYPED,
                "lmp": _TYPED,
                "edd": _TYPED,
                "gravida": FieldRule(min_value=1),
                "para": FieldRule(min_value=0),
                "status": FieldRule(allowed_values=("Active", "Completed", "Transferred", "Lost to Follow-up")),
            },
        ),
        _facility_record(
            EntityKind.DISEASE_CASES,
            label="Disease Cases",
            description="Communicable disease case records",
            model=DiseaseCase,
            required_fields=("patient_id", "disease_id", "facility_id", "reporting_date", "diagnosis_date"),
            data_types={
                "patient_id": _S,
                "disease_id": _S,
                "facility_id": _S,
                "reporting_date": _D,
                "diagnosis_date": _D,
                "onset_date": _D,
                "diagnosis_type": _S,
                "severity": _S,
                "outcome": _S,
                "status": _S,
            },
            validations={
                "reporting_date": _TYPED,
                "diagnosis_date": _TYPED,
                "onset_date": _TYPED,
                "diagnosis_type": FieldRule(
                    allowed_values=("Clinical", "Laboratory", "Epidemiological", "Presumptive")
                ),
                "severity": FieldRule(allowed_values=("Mild", "Moderate", "Severe", "Critical")),
                "outcome": FieldRule(
                    allowed_values=("Recovered", "Recovering", "Deceased", "Unknown", "Lost to Follow-up")
                ),
                "status": FieldRule(allowed_values=("Active", "Resolved", "Deceased", "Lost to Follow-up")),
            },
            foreign_keys={"disease_id": _DISEASE_FK},
        ),
        _facility_record(
            EntityKind.FAMILY_PLANNING_CLIENTS,
            label="Family Planning Clients",
            description="Family planning client records",
            model=FamilyPlanningClient,
            required_fields=("patient_id", "facility_id", "registration_date", "client_type", "marital_status"),
            data_types={
                "patient_id": _S,
                "facility_id": _S,
                "registration_date": _D,
                "client_type": _S,
                "marital_status": _S,
                "number_of_children": _N,
                "status": _S,
            },
            validations={
                "registration_date": _TYPED,
                "client_type": FieldRule(allowed_values=("New Acceptor", "Continuing User", "Restart")),
                "marital_status": FieldRule(
                    allowed_values=("Single", "Married", "Divorced", "Widowed", "Separated", "Other")
                ),
                "number_of_children": FieldRule(min_value=0),
                "status": FieldRule(allowed_values=("Active", "Inactive", "Transferred", "Lost to Follow-up")),
            },
        ),
    ]


@lru_cache(maxsize=1)
def build_entity_registry() -> EntityRegistry:
    """
    Return the process-wide entity registry.
    """

    return EntityRegistry(_default_configs())
