"""
db/models/immunization.py

Vaccine administrations.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin
from db.models.facility import Facility
from db.models.patient import Patient


class Immunization(Base, CreatedAtMixin):
    __tablename__ = "immunizations"

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
    facility_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("facilities.id", ondelete="RESTRICT"),
        nullable=False,
    )
    vaccine_type: Mapped[str] = mapped_column(String(80), nullable=False)
    vaccine_name: Mapped[str] = mapped_column(String(120), nullable=False)
    dose_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    administration_date: Mapped[date] = mapped_column(Date, nullable=False)
    administered_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    batch_number: Mapped[str | None] = mapped_column(String(80), nullable=True)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    next_appointment: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        comment="Scheduled | Administered | Missed | Cancelled",
    )

    patient: Mapped[Patient] = relationship()
    facility: Mapped[Facility] = relationship()

    __table_args__ = (
        Index("ix_immunizations_facility_date", "facility_id", "administration_date"),
        Index("ix_immunizations_vaccine_type", "vaccine_type"),
        Index("ix_immunizations_patient_id", "patient_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Immunization id={self.id} vaccine={self.vaccine_type!r} "
            f"dose={self.dose_number} date={self.administration_date}>"
        )
