"""
db/models/death_statistic.py

Death registrations recorded at a facility.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin
from db.models.facility import Facility
from db.models.patient import Patient


class DeathStatistic(Base, CreatedAtMixin):
    __tablename__ = "death_statistics"

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
    date_of_death: Mapped[date] = mapped_column(Date, nullable=False)
    time_of_death: Mapped[str | None] = mapped_column(String(20), nullable=True)
    place_of_death: Mapped[str | None] = mapped_column(String(255), nullable=True)
    primary_cause_of_death: Mapped[str] = mapped_column(String(255), nullable=False)
    secondary_cause_of_death: Mapped[str | None] = mapped_column(String(255), nullable=True)
    manner_of_death: Mapped[str | None] = mapped_column(
        String(40),
        nullable=True,
        comment="Natural | Accident | Suicide | Homicide | Undetermined | Pending Investigation",
    )

    patient: Mapped[Patient] = relationship()
    facility: Mapped[Facility] = relationship()

    __table_args__ = (
        Index("ix_death_statistics_facility_date", "facility_id", "date_of_death"),
        Index("ix_death_statistics_patient_id", "patient_id"),
    )

    def __repr__(self) -> str:
        return f"<DeathStatistic id={self.id} date_of_death={self.date_of_death}>"
