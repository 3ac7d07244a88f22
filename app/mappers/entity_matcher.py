"""
app/mappers/entity_matcher.py

Header normalization and target-entity suggestion for uploaded files.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

UNKNOWN_ENTITY = "unknown"
MATCH_THRESHOLD = 0.5

# Ordered: on equal scores the earlier entry wins.
ENTITY_SIGNATURES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("patient", ("first_name", "last_name", "gender", "date_of_birth")),
    ("facility", ("name", "type", "lga", "address")),
    ("birth_statistic", ("patient_id", "facility_id", "birth_date", "birth_weight")),
    ("death_statistic", ("patient_id", "facility_id", "date_of_death", "cause_of_death")),
    ("immunization", ("patient_id", "vaccine_type", "dose_number", "administration_date")),
    ("antenatal_care", ("patient_id", "facility_id", "registration_date", "edd")),
    ("disease_case", ("patient_id", "disease_id", "reporting_date", "diagnosis_date")),
    ("family_planning_client", ("patient_id", "facility_id", "registration_date", "client_type")),
)

# Signature name -> import entity name.
SIGNATURE_ENTITIES: dict[str, str] = {
    "patient": "patients",
    "facility": "facilities",
    "birth_statistic": "birth_statistics",
    "death_statistic": "death_statistics",
    "immunization": "immunizations",
    "antenatal_care": "antenatal_care",
    "disease_case": "disease_cases",
    "family_planning_client": "family_planning_clients",
}

_WHITESPACE = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """
    Lowercase a header and collapse whitespace runs to underscores.
    """

    return _WHITESPACE.sub("_", str(header).strip().lower())


def score_entities(normalized_headers: Iterable[str]) -> list[tuple[str, float]]:
    """
    Return ``(signature, score)`` for every signature, in table order.
    """

    present = set(normalized_headers)
    return [
        (name, sum(1 for field in signature if field in present) / len(signature))
        for name, signature in ENTITY_SIGNATURES
    ]


def suggest_entity(normalized_headers: Iterable[str]) -> str:
    """
    Suggest the entity whose signature best matches the headers.

    Returns ``"unknown"`` when no signature reaches the threshold.
    """

    best_name = UNKNOWN_ENTITY
    best_score = 0.0
    for name, score in score_entities(normalized_headers):
        if score > best_score:
            best_name = name
            best_score = score

    if best_score < MATCH_THRESHOLD:
        return UNKNOWN_ENTITY
    return best_name
