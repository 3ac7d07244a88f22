"""
db/models/birth_statistic.py

Birth registrations recorded at a facility.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, Float, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin
from db.models.facility import Facility
from db.models.patient import Patient


class BirthStatistic(Base, CreatedAtMixin):
    __tablename__ = "birth_statistics"

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
    mother_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("patients.id", ondelete="SET NULL"),
        nullable=True,
    )
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    birth_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    delivery_type: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        comment="Vaginal | Cesarean | Assisted | Other",
    )
    birth_weight: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
        comment="Kilograms",
    )
    apgar_score: Mapped[str | None] = mapped_column(String(20), nullable=True)
    complications: Mapped[str | None] = mapped_column(Text, nullable=True)

    patient: Mapped[Patient] = relationship(foreign_keys=[patient_id])
    facility: Mapped[Facility] = relationship()
    mother: Mapped[Patient | None] = relationship(foreign_keys=[mother_id])

    __table_args__ = (
        Index("ix_birth_statistics_facility_birth_date", "facility_id", "birth_date"),
        Index("ix_birth_statistics_patient_id", "patient_id"),
    )

    def __repr__(self) -> str:
        return f"<BirthStatistic id={self.id} birth_date={self.birth_date}>"
