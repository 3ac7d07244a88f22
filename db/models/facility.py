"""
db/models/facility.py

Health facilities that records are attributed to.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin


class Facility(Base, CreatedAtMixin):
    __tablename__ = "facilities"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        comment="Hospital | Clinic | Health Center | Dispensary",
    )
    lga: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        comment="Local government area",
    )
    ward: Mapped[str | None] = mapped_column(String(120), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("name", name="uq_facilities_name"),
        Index("ix_facilities_lga", "lga"),
        Index("ix_facilities_type", "type"),
    )

    def __repr__(self) -> str:
        return f"<Facility id={self.id} name={self.name!r} lga={self.lga!r}>"
