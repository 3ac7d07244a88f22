"""
db/models/antenatal_care.py

Antenatal care registrations.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin
from db.models.facility import Facility
from db.models.patient import Patient


class AntenatalCare(Base, CreatedAtMixin):
    __tablename__ = "antenatal_care"

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
    registration_date: Mapped[date] = mapped_column(Date, nullable=False)
    lmp: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Last menstrual period",
    )
    edd: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Expected delivery date",
    )
    gravida: Mapped[int | None] = mapped_column(Integer, nullable=True)
    para: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str | None] = mapped_column(
        String(30),
        nullable=True,
        comment="Active | Completed | Transferred | Lost to Follow-up",
    )
    outcome: Mapped[str | None] = mapped_column(String(60), nullable=True)

    patient: Mapped[Patient] = relationship()
    facility: Mapped[Facility] = relationship()

    __table_args__ = (
        Index("ix_antenatal_care_facility_registration", "facility_id", "registration_date"),
        Index("ix_antenatal_care_patient_id", "patient_id"),
    )

    def __repr__(self) -> str:
        return f"<AntenatalCare id={self.id} registration_date={self.registration_date}>"
