"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.antenatal_care import AntenatalCare
from db.models.birth_statistic import BirthStatistic
from db.models.death_statistic import DeathStatistic
from db.models.disease import DiseaseCase, DiseaseRegistry
from db.models.facility import Facility
from db.models.family_planning_client import FamilyPlanningClient
from db.models.immunization import Immunization
from db.models.patient import Patient

__all__ = [
    "AntenatalCare",
    "BirthStatistic",
    "DeathStatistic",
    "DiseaseCase",
    "DiseaseRegistry",
    "Facility",
    "FamilyPlanningClient",
    "Immunization",
    "Patient",
]
