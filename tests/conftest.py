"""
tests/conftest.py

Shared fixtures: an in-memory SQLite database built from the ORM models,
seed helpers for parent records, and a CSV writer for upload files.
"""

from __future__ import annotations

import csv
import uuid
from collections.abc import Callable, Iterator, Sequence
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401  registers all ORM models on Base.metadata
from db.base import Base
from db.models import DiseaseRegistry, Facility, Patient


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session(engine: Engine) -> Iterator[Session]:
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    db = factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write rows to a CSV file under tmp_path and return its path."""

    def _write(rows: Sequence[Sequence[object]], name: str = "upload.csv") -> Path:
        path = tmp_path / name
        with path.open("w", encoding="utf-8", newline="") as handle:
            csv.writer(handle).writerows(rows)
        return path

    return _write


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------


def add_facility(db: Session, name: str = "General Hospital", **overrides: object) -> Facility:
    values: dict[str, object] = {"name": name, "type": "Hospital", "lga": "Ikeja"}
    values.update(overrides)
    facility = Facility(id=uuid.uuid4(), **values)
    db.add(facility)
    db.commit()
    return facility


def add_patient(db: Session, first_name: str = "Ada", last_name: str = "Obi", **overrides: object) -> Patient:
    values: dict[str, object] = {
        "first_name": first_name,
        "last_name": last_name,
        "gender": "Female",
        "date_of_birth": date(1990, 5, 17),
    }
    values.update(overrides)
    patient = Patient(id=uuid.uuid4(), **values)
    db.add(patient)
    db.commit()
    return patient


def add_disease(db: Session, name: str = "Malaria") -> DiseaseRegistry:
    disease = DiseaseRegistry(id=uuid.uuid4(), name=name, icd_code="B54")
    db.add(disease)
    db.commit()
    return disease
