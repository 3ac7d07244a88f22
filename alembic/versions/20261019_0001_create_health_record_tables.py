"""create health record tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:30:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def _patient_fk(ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(
        "patient_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("patients.id", ondelete=ondelete),
        nullable=False,
    )


def _facility_fk() -> sa.Column:
    return sa.Column(
        "facility_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("facilities.id", ondelete="RESTRICT"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("gender", sa.String(length=20), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("phone_number", sa.String(length=40), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("next_of_kin", sa.String(length=255), nullable=True),
        sa.Column("blood_group", sa.String(length=10), nullable=True),
        sa.Column("allergies", sa.Text(), nullable=True),
        sa.Column("chronic_conditions", sa.Text(), nullable=True),
        sa.Column("is_deceased", sa.Boolean(), nullable=False),
        sa.Column("date_of_death", sa.Date(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_patients_last_name_first_name", "patients", ["last_name", "first_name"], unique=False)
    op.create_index("ix_patients_date_of_birth", "patients", ["date_of_birth"], unique=False)

    op.create_table(
        "facilities",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=40), nullable=False),
        sa.Column("lga", sa.String(length=120), nullable=False),
        sa.Column("ward", sa.String(length=120), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("contact_person", sa.String(length=255), nullable=True),
        sa.Column("phone_number", sa.String(length=40), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_facilities_name"),
    )
    op.create_index("ix_facilities_lga", "facilities", ["lga"], unique=False)
    op.create_index("ix_facilities_type", "facilities", ["type"], unique=False)

    op.create_table(
        "disease_registry",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("icd_code", sa.String(length=20), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_notifiable", sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_disease_registry_name"),
    )

    op.create_table(
        "birth_statistics",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _patient_fk(),
        _facility_fk(),
        sa.Column(
            "mother_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("patients.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("birth_date", sa.Date(), nullable=False),
        sa.Column("birth_time", sa.String(length=20), nullable=True),
        sa.Column("delivery_type", sa.String(length=20), nullable=True),
        sa.Column("birth_weight", sa.Float(), nullable=True),
        sa.Column("apgar_score", sa.String(length=20), nullable=True),
        sa.Column("complications", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_birth_statistics_facility_birth_date",
        "birth_statistics",
        ["facility_id", "birth_date"],
        unique=False,
    )
    op.create_index("ix_birth_statistics_patient_id", "birth_statistics", ["patient_id"], unique=False)

    op.create_table(
        "death_statistics",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _patient_fk(),
        _facility_fk(),
        sa.Column("date_of_death", sa.Date(), nullable=False),
        sa.Column("time_of_death", sa.String(length=20), nullable=True),
        sa.Column("place_of_death", sa.String(length=255), nullable=True),
        sa.Column("primary_cause_of_death", sa.String(length=255), nullable=False),
        sa.Column("secondary_cause_of_death", sa.String(length=255), nullable=True),
        sa.Column("manner_of_death", sa.String(length=40), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_death_statistics_facility_date",
        "death_statistics",
        ["facility_id", "date_of_death"],
        unique=False,
    )
    op.create_index("ix_death_statistics_patient_id", "death_statistics", ["patient_id"], unique=False)

    op.create_table(
        "immunizations",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _patient_fk(),
        _facility_fk(),
        sa.Column("vaccine_type", sa.String(length=80), nullable=False),
        sa.Column("vaccine_name", sa.String(length=120), nullable=False),
        sa.Column("dose_number", sa.Integer(), nullable=True),
        sa.Column("administration_date", sa.Date(), nullable=False),
        sa.Column("administered_by", sa.String(length=255), nullable=True),
        sa.Column("batch_number", sa.String(length=80), nullable=True),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("next_appointment", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_immunizations_facility_date",
        "immunizations",
        ["facility_id", "administration_date"],
        unique=False,
    )
    op.create_index("ix_immunizations_vaccine_type", "immunizations", ["vaccine_type"], unique=False)
    op.create_index("ix_immunizations_patient_id", "immunizations", ["patient_id"], unique=False)

    op.create_table(
        "antenatal_care",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _patient_fk(),
        _facility_fk(),
        sa.Column("registration_date", sa.Date(), nullable=False),
        sa.Column("lmp", sa.Date(), nullable=False),
        sa.Column("edd", sa.Date(), nullable=False),
        sa.Column("gravida", sa.Integer(), nullable=True),
        sa.Column("para", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=True),
        sa.Column("outcome", sa.String(length=60), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_antenatal_care_facility_registration",
        "antenatal_care",
        ["facility_id", "registration_date"],
        unique=False,
    )
    op.create_index("ix_antenatal_care_patient_id", "antenatal_care", ["patient_id"], unique=False)

    op.create_table(
        "disease_cases",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _patient_fk(),
        sa.Column(
            "disease_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("disease_registry.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        _facility_fk(),
        sa.Column("reporting_date", sa.Date(), nullable=False),
        sa.Column("diagnosis_date", sa.Date(), nullable=False),
        sa.Column("onset_date", sa.Date(), nullable=True),
        sa.Column("diagnosis_type", sa.String(length=30), nullable=True),
        sa.Column("severity", sa.String(length=20), nullable=True),
        sa.Column("hospitalized", sa.Boolean(), nullable=False),
        sa.Column("outcome", sa.String(length=30), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_disease_cases_disease_reporting",
        "disease_cases",
        ["disease_id", "reporting_date"],
        unique=False,
    )
    op.create_index(
        "ix_disease_cases_facility_reporting",
        "disease_cases",
        ["facility_id", "reporting_date"],
        unique=False,
    )
    op.create_index("ix_disease_cases_patient_id", "disease_cases", ["patient_id"], unique=False)

    op.create_table(
        "family_planning_clients",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _patient_fk(),
        _facility_fk(),
        sa.Column("registration_date", sa.Date(), nullable=False),
        sa.Column("client_type", sa.String(length=30), nullable=False),
        sa.Column("marital_status", sa.String(length=20), nullable=False),
        sa.Column("number_of_children", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_family_planning_clients_facility_registration",
        "family_planning_clients",
        ["facility_id", "registration_date"],
        unique=False,
    )
    op.create_index(
        "ix_family_planning_clients_patient_id",
        "family_planning_clients",
        ["patient_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_family_planning_clients_patient_id", table_name="family_planning_clients")
    op.drop_index("ix_family_planning_clients_facility_registration", table_name="family_planning_clients")
    op.drop_table("family_planning_clients")

    op.drop_index("ix_disease_cases_patient_id", table_name="disease_cases")
    op.drop_index("ix_disease_cases_facility_reporting", table_name="disease_cases")
    op.drop_index("ix_disease_cases_disease_reporting", table_name="disease_cases")
    op.drop_table("disease_cases")

    op.drop_index("ix_antenatal_care_patient_id", table_name="antenatal_care")
    op.drop_index("ix_antenatal_care_facility_registration", table_name="antenatal_care")
    op.drop_table("antenatal_care")

    op.drop_index("ix_immunizations_patient_id", table_name="immunizations")
    op.drop_index("ix_immunizations_vaccine_type", table_name="immunizations")
    op.drop_index("ix_immunizations_facility_date", table_name="immunizations")
    op.drop_table("immunizations")

    op.drop_index("ix_death_statistics_patient_id", table_name="death_statistics")
    op.drop_index("ix_death_statistics_facility_date", table_name="death_statistics")
    op.drop_table("death_statistics")

    op.drop_index("ix_birth_statistics_patient_id", table_name="birth_statistics")
    op.drop_index("ix_birth_statistics_facility_birth_date", table_name="birth_statistics")
    op.drop_table("birth_statistics")

    op.drop_table("disease_registry")

    op.drop_index("ix_facilities_type", table_name="facilities")
    op.drop_index("ix_facilities_lga", table_name="facilities")
    op.drop_table("facilities")

    op.drop_index("ix_patients_date_of_birth", table_name="patients")
    op.drop_index("ix_patients_last_name_first_name", table_name="patients")
    op.drop_table("patients")
