"""
db/models/disease.py

Notifiable disease registry and reported disease cases.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin
from db.models.facility import Facility
from db.models.patient import Patient


class DiseaseRegistry(Base, CreatedAtMixin):
    __tablename__ = "disease_registry"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    icd_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_notifiable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("name", name="uq_disease_registry_name"),
    )

    def __repr__(self) -> str:
        return f"<DiseaseRegistry id={self.id} name={self.name!r}>"


class DiseaseCase(Base, CreatedAtMixin):
    __tablename__ = "disease_cases"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    )
    disease_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("disease_registry.id", ondelete="RESTRICT"),
        nullable=False,
    )
    facility_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("facilities.id", ondelete="RESTRICT"),
        nullable=False,
    )
    reporting_date: Mapped[date] = mapped_column(Date, nullable=False)
    diagnosis_date: Mapped[date] = mapped_column(Date, nullable=False)
    onset_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    diagnosis_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    severity: Mapped[str | None] = mapped_column(String(20), nullable=True)
    hospitalized: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    outcome: Mapped[str | None] = mapped_column(String(30), nullable=True)
    status: Mapped[str | None] = mapped_column(String(30), nullable=True)

    patient: Mapped[Patient] = relationship()
    disease: Mapped[DiseaseRegistry] = relationship()
    facility: Mapped[Facility] = relationship()

    __table_args__ = (
        Index("ix_disease_cases_disease_reporting", "disease_id", "reporting_date"),
        Index("ix_disease_cases_facility_reporting", "facility_id", "reporting_date"),
        Index("ix_disease_cases_patient_id", "patient_id"),
    )

    def __repr__(self) -> str:
        return f"<DiseaseCase id={self.id} disease_id={self.disease_id} reported={self.reporting_date}>"
