"""
db/base.py

Declarative base and the creation-time mixin shared by health record models.

Imported records are written once by bulk insert and never updated here, so
only the insert time is tracked. Exports and reports filter on it for
entities without a domain date (patients, facilities).
"""

from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for every health record table.
    """


class CreatedAtMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
