"""
app/services/report_service.py

Aggregate PDF reports over imported health records.

Report types
------------
facility_summary      : one facility's record counts and top diseases (facility_id required).
disease_surveillance  : disease cases by disease, severity, outcome and facility.
maternal_health       : antenatal registrations and delivery types.
immunization_coverage : immunizations by vaccine type, dose, status and facility.

Each section is queried independently. A facility or disease id that does
not exist fails the whole report before any file is written.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.config import get_export_settings
from app.domain.data_import import ReportArtifact, ReportSection, ReportTable
from app.domain.errors import (
    ExportConfigurationError,
    ReportEntityNotFoundError,
    UnsupportedReportTypeError,
)
from app.renderers.pdf import write_report_pdf
from app.services.export_service import day_end, day_start, parse_date_bound, period_text, unique_filename
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

logger = logging.getLogger(__name__)

TOP_LIMIT = 10
_UNSPECIFIED = "Unspecified"


@dataclass(frozen=True)
class ReportOptions:
    facility_id: str | None = None
    disease_id: str | None = None
    date_from: date | str | None = None
    date_to: date | str | None = None


@dataclass(frozen=True)
class ReportType:
    name: str
    label: str
    title: str
    description: str
    required_params: tuple[str, ...] = ()


REPORT_TYPES: tuple[ReportType, ...] = (
    ReportType(
        name="facility_summary",
        label="Facility Summary",
        title="Healthcare Facility Summary Report",
        description="Summary of all health data for a specific facility",
        required_params=("facility_id",),
    ),
    ReportType(
        name="disease_surveillance",
        label="Disease Surveillance",
        title="Disease Surveillance Report",
        description="Analysis of disease cases and trends",
    ),
    ReportType(
        name="maternal_health",
        label="Maternal Health",
        title="Maternal Health Report",
        description="Analysis of antenatal care and birth statistics",
    ),
    ReportType(
        name="immunization_coverage",
        label="Immunization Coverage",
        title="Immunization Coverage Report",
        description="Analysis of immunization coverage and trends",
    ),
)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReportService:
    """
    Build report sections with grouped counts and render them to PDF.

    Read-only: no session commits are issued.
    """

    def __init__(self, *, export_dir: Path) -> None:
        self._export_dir = export_dir
        self._types = {report_type.name: report_type for report_type in REPORT_TYPES}
        self._builders: dict[str, Callable[[Session, _ResolvedOptions], list[ReportSection]]] = {
            "facility_summary": self._facility_summary,
            "disease_surveillance": self._disease_surveillance,
            "maternal_health": self._maternal_health,
            "immunization_coverage": self._immunization_coverage,
        }

    def supported_report_types(self) -> list[dict[str, Any]]:
        return [
            {
                "name": report_type.name,
                "label": report_type.label,
                "description": report_type.description,
                "required_params": list(report_type.required_params),
            }
            for report_type in REPORT_TYPES
        ]

    def generate_report(
        self,
        db: Session,
        report_type: str,
        options: ReportOptions | None = None,
    ) -> ReportArtifact:
        """
        Build and render one report.

        Raises
        ------
        UnsupportedReportTypeError: ``report_type`` is not registered.
        ExportConfigurationError:   a required option is missing or a date is invalid.
        ReportEntityNotFoundError:  the referenced facility or disease does not exist.
        """

        spec = self._types.get(report_type)
        if spec is None:
            raise UnsupportedReportTypeError(report_type)

        options = options or ReportOptions()
        for param in spec.required_params:
            if not getattr(options, param):
                raise ExportConfigurationError(f"{param} is required for {report_type} reports")

        resolved = _ResolvedOptions(
            facility_id=_parse_id(options.facility_id),
            facility_id_raw=options.facility_id,
            disease_id=_parse_id(options.disease_id),
            disease_id_raw=options.disease_id,
            date_from=parse_date_bound("date_from", options.date_from) if options.date_from else None,
            date_to=parse_date_bound("date_to", options.date_to) if options.date_to else None,
        )
        sections = self._builders[report_type](db, resolved)

        self._export_dir.mkdir(parents=True, exist_ok=True)
        filename = unique_filename(f"{report_type}_report", "pdf")
        path = self._export_dir / filename
        write_report_pdf(
            path,
            title=spec.title,
            subtitle_lines=[period_text(resolved.date_from, resolved.date_to)],
            sections=sections,
        )
        logger.info("Report generated type=%s sections=%d file=%s", report_type, len(sections), filename)
        return ReportArtifact(file_path=path, filename=filename, report_type=report_type)

    # ------------------------------------------------------------------
    # Report builders
    # ------------------------------------------------------------------

    def _facility_summary(self, db: Session, options: _ResolvedOptions) -> list[ReportSection]:
        facility = _require_facility(db, options)

        def created_between(model: Any) -> list[Any]:
            conditions = []
            if options.date_from is not None:
                conditions.append(model.created_at >= day_start(options.date_from))
            if options.date_to is not None:
                conditions.append(model.created_at <= day_end(options.date_to))
            return conditions

        def facility_count(model: Any) -> int:
            return _count(db, model, model.facility_id == facility.id, *created_between(model))

        statistics = ReportTable(
            headers=("Metric", "Count"),
            rows=[
                ("Patients", _count(db, Patient, *created_between(Patient))),
                ("Births", facility_count(BirthStatistic)),
                ("Deaths", facility_count(DeathStatistic)),
                ("Immunizations", facility_count(Immunization)),
                ("Antenatal Registrations", facility_count(AntenatalCare)),
                ("Disease Cases", facility_count(DiseaseCase)),
                ("Family Planning Clients", facility_count(FamilyPlanningClient)),
            ],
        )
        top_diseases = _grouped_counts(
            db,
            DiseaseRegistry.name,
            DiseaseCase.id,
            joins=(DiseaseCase.disease,),
            conditions=(DiseaseCase.facility_id == facility.id, *created_between(DiseaseCase)),
            by_count=True,
            limit=TOP_LIMIT,
        )

        return [
            ReportSection(
                title="Facility Information",
                text="\n".join(
                    [
                        f"Name: {facility.name}",
                        f"Type: {facility.type}",
                        f"LGA: {facility.lga}",
                        f"Address: {facility.address or ''}",
                        f"Contact Person: {facility.contact_person or ''}",
                        f"Phone: {facility.phone_number or ''}",
                    ]
                ),
            ),
            ReportSection(title="Summary Statistics", table=statistics),
            ReportSection(title="Top Diseases", table=ReportTable(("Disease", "Cases"), top_diseases)),
        ]

    def _disease_surveillance(self, db: Session, options: _ResolvedOptions) -> list[ReportSection]:
        disease_info = "All Diseases"
        if options.disease_id_raw:
            disease = db.get(DiseaseRegistry, options.disease_id) if options.disease_id else None
            if disease is None:
                raise ReportEntityNotFoundError("Disease", options.disease_id_raw)
            disease_info = f"Disease: {disease.name}"
        facility_info = _facility_info(db, options)

        conditions = _record_conditions(DiseaseCase, DiseaseCase.reporting_date, options)
        if options.disease_id is not None:
            conditions.append(DiseaseCase.disease_id == options.disease_id)

        by_disease = _grouped_counts(
            db, DiseaseRegistry.name, DiseaseCase.id, joins=(DiseaseCase.disease,), conditions=conditions, by_count=True
        )
        by_severity = _grouped_counts(db, DiseaseCase.severity, DiseaseCase.id, conditions=conditions)
        by_outcome = _grouped_counts(db, DiseaseCase.outcome, DiseaseCase.id, conditions=conditions)
        by_facility = _grouped_counts(
            db,
            Facility.name,
            DiseaseCase.id,
            joins=(DiseaseCase.facility,),
            conditions=conditions,
            by_count=True,
            limit=TOP_LIMIT,
        )

        return [
            ReportSection(
                title="Disease Surveillance Report",
                text="\n".join([disease_info, facility_info, _period_line(options)]),
            ),
            ReportSection(title="Disease Breakdown", table=ReportTable(("Disease", "Cases"), by_disease)),
            ReportSection(title="Severity Breakdown", table=ReportTable(("Severity", "Cases"), by_severity)),
            ReportSection(title="Outcome Breakdown", table=ReportTable(("Outcome", "Cases"), by_outcome)),
            ReportSection(title="Top Facilities", table=ReportTable(("Facility", "Cases"), by_facility)),
        ]

    def _maternal_health(self, db: Session, options: _ResolvedOptions) -> list[ReportSection]:
        facility_info = _facility_info(db, options)

        antenatal = _record_conditions(AntenatalCare, AntenatalCare.registration_date, options)
        births = _record_conditions(BirthStatistic, BirthStatistic.birth_date, options)

        registrations = _count(db, AntenatalCare, *antenatal)
        outcomes = _grouped_counts(db, AntenatalCare.outcome, AntenatalCare.id, conditions=antenatal)
        statuses = _grouped_counts(db, AntenatalCare.status, AntenatalCare.id, conditions=antenatal)
        delivery_types = _grouped_counts(db, BirthStatistic.delivery_type, BirthStatistic.id, conditions=births)
        by_facility = _grouped_counts(
            db,
            Facility.name,
            AntenatalCare.id,
            joins=(AntenatalCare.facility,),
            conditions=antenatal,
            by_count=True,
            limit=TOP_LIMIT,
        )

        summary = ReportTable(
            headers=("Metric", "Count"),
            rows=[
                ("Total Antenatal Registrations", registrations),
                ("Live Births", sum(count for _, count in delivery_types)),
            ],
        )
        return [
            ReportSection(title="Maternal Health Report", text="\n".join([facility_info, _period_line(options)])),
            ReportSection(title="Summary", table=summary),
            ReportSection(title="Antenatal Care Outcomes", table=ReportTable(("Outcome", "Count"), outcomes)),
            ReportSection(title="Antenatal Care Status", table=ReportTable(("Status", "Count"), statuses)),
            ReportSection(title="Delivery Types", table=ReportTable(("Delivery Type", "Count"), delivery_types)),
            ReportSection(title="Top Facilities", table=ReportTable(("Facility", "Registrations"), by_facility)),
        ]

    def _immunization_coverage(self, db: Session, options: _ResolvedOptions) -> list[ReportSection]:
        facility_info = _facility_info(db, options)
        conditions = _record_conditions(Immunization, Immunization.administration_date, options)

        total = _count(db, Immunization, *conditions)
        by_vaccine = _grouped_counts(db, Immunization.vaccine_type, Immunization.id, conditions=conditions, by_count=True)
        by_dose = _grouped_counts(db, Immunization.dose_number, Immunization.id, conditions=conditions)
        by_status = _grouped_counts(db, Immunization.status, Immunization.id, conditions=conditions)
        by_facility = _grouped_counts(
            db,
            Facility.name,
            Immunization.id,
            joins=(Immunization.facility,),
            conditions=conditions,
            by_count=True,
            limit=TOP_LIMIT,
        )

        return [
            ReportSection(title="Immunization Coverage Report", text="\n".join([facility_info, _period_line(options)])),
            ReportSection(title="Summary", table=ReportTable(("Metric", "Count"), [("Total Immunizations", total)])),
            ReportSection(title="Vaccine Type Distribution", table=ReportTable(("Vaccine Type", "Count"), by_vaccine)),
            ReportSection(title="Dose Distribution", table=ReportTable(("Dose Number", "Count"), by_dose)),
            ReportSection(title="Status Distribution", table=ReportTable(("Status", "Count"), by_status)),
            ReportSection(title="Top Facilities", table=ReportTable(("Facility", "Immunizations"), by_facility)),
        ]


# ---------------------------------------------------------------------------
# Query helpers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _ResolvedOptions:
    facility_id: uuid.UUID | None
    facility_id_raw: str | None
    disease_id: uuid.UUID | None
    disease_id_raw: str | None
    date_from: date | None
    date_to: date | None


def _parse_id(value: Any) -> uuid.UUID | None:
    if not value:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        return None


def _require_facility(db: Session, options: _ResolvedOptions) -> Facility:
    facility = db.get(Facility, options.facility_id) if options.facility_id is not None else None
    if facility is None:
        raise ReportEntityNotFoundError("Facility", options.facility_id_raw)
    return facility


def _facility_info(db: Session, options: _ResolvedOptions) -> str:
    if not options.facility_id_raw:
        return "All Facilities"
    return f"Facility: {_require_facility(db, options).name}"


def _period_line(options: _ResolvedOptions) -> str:
    return f"Period: {period_text(options.date_from, options.date_to).removeprefix('Period: ')}"


def _record_conditions(model: Any, date_column: Any, options: _ResolvedOptions) -> list[Any]:
    conditions: list[Any] = []
    if options.facility_id is not None:
        conditions.append(model.facility_id == options.facility_id)
    if options.date_from is not None:
        conditions.append(date_column >= options.date_from)
    if options.date_to is not None:
        conditions.append(date_column <= options.date_to)
    return conditions


def _count(db: Session, model: Any, *conditions: Any) -> int:
    stmt = select(func.count()).select_from(model)
    if conditions:
        stmt = stmt.where(*conditions)
    return int(db.scalar(stmt) or 0)


def _grouped_counts(
    db: Session,
    group_column: Any,
    count_column: Any,
    *,
    joins: tuple[Any, ...] = (),
    conditions: Any = (),
    by_count: bool = False,
    limit: int | None = None,
) -> list[tuple[Any, int]]:
    """
    Return ``(group value, count)`` pairs.

    Ordered by count descending when ``by_count``, else by group value.
    """

    count = func.count(count_column)
    stmt = select(group_column, count).select_from(count_column.class_)
    for relation in joins:
        stmt = stmt.join(relation)
    if conditions:
        stmt = stmt.where(*conditions)
    stmt = stmt.group_by(group_column)
    if by_count:
        stmt = stmt.order_by(count.desc(), group_column)
    else:
        stmt = stmt.order_by(group_column)
    if limit is not None:
        stmt = stmt.limit(limit)
    return [
        (_UNSPECIFIED if value is None else value, int(total))
        for value, total in db.execute(stmt).all()
    ]


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_report_service() -> ReportService:
    return ReportService(export_dir=get_export_settings().export_dir)
