from __future__ import annotations

import unittest

from app.mappers.entity_matcher import (
    ENTITY_SIGNATURES,
    SIGNATURE_ENTITIES,
    UNKNOWN_ENTITY,
    normalize_header,
    score_entities,
    suggest_entity,
)


class TestNormalizeHeader(unittest.TestCase):
    def test_lowercases_and_joins_whitespace(self) -> None:
        self.assertEqual(normalize_header("  First   Name "), "first_name")
        self.assertEqual(normalize_header("Date of\tBirth"), "date_of_birth")


class TestSuggestEntity(unittest.TestCase):
    def test_patient_headers(self) -> None:
        headers = [normalize_header(h) for h in ("First Name", "Last Name", "Gender", "Date of Birth", "Phone")]

        self.assertEqual(suggest_entity(headers), "patient")

    def test_below_threshold_is_unknown(self) -> None:
        self.assertEqual(suggest_entity(["first_name", "colour", "shoe_size"]), UNKNOWN_ENTITY)
        self.assertEqual(suggest_entity([]), UNKNOWN_ENTITY)

    def test_half_match_reaches_threshold(self) -> None:
        self.assertEqual(suggest_entity(["first_name", "gender"]), "patient")

    def test_tie_goes_to_earlier_signature(self) -> None:
        # Both antenatal_care and family_planning_client score 3/4 here.
        headers = ["patient_id", "facility_id", "registration_date"]
        scores = dict(score_entities(headers))
        self.assertEqual(scores["antenatal_care"], scores["family_planning_client"])

        self.assertEqual(suggest_entity(headers), "antenatal_care")

    def test_is_deterministic(self) -> None:
        headers = ["patient_id", "vaccine_type", "dose_number", "administration_date"]
        results = {suggest_entity(headers) for _ in range(20)}

        self.assertEqual(results, {"immunization"})

    def test_every_signature_maps_to_an_import_entity(self) -> None:
        self.assertEqual({name for name, _ in ENTITY_SIGNATURES}, set(SIGNATURE_ENTITIES))


if __name__ == "__main__":
    unittest.main()
