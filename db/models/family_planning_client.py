"""
db/models/family_planning_client.py

Family planning client registrations.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin
from db.models.facility import Facility
from db.models.patient import Patient


class FamilyPlanningClient(Base, CreatedAtMixin):
    __tablename__ = "family_planning_clients"

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
    client_type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        comment="New Acceptor | Continuing User | Restart",
    )
    marital_status: Mapped[str] = mapped_column(String(20), nullable=False)
    number_of_children: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str | None] = mapped_column(String(30), nullable=True)

    patient: Mapped[Patient] = relationship()
    facility: Mapped[Facility] = relationship()

    __table_args__ = (
        Index("ix_family_planning_clients_facility_registration", "facility_id", "registration_date"),
        Index("ix_family_planning_clients_patient_id", "patient_id"),
    )

    def __repr__(self) -> str:
        return f"<FamilyPlanningClient id={self.id} client_type={self.client_type!r}>"
