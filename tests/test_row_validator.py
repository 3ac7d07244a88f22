from __future__ import annotations

import unittest

from app.domain.entity_config import build_entity_registry
from app.validators.row_validator import RowValidator


class TestRowValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = build_entity_registry()
        self.validator = RowValidator()

    def test_valid_patient_row(self) -> None:
        outcome = self.validator.validate(
            {
                "first_name": "Ada",
                "last_name": "Obi",
                "gender": "Female",
                "date_of_birth": "1990-05-17",
                "email": "ada@example.org",
            },
            self.registry.get("patients"),
        )

        self.assertTrue(outcome.valid)
        self.assertEqual(outcome.errors, ())

    def test_collects_every_error_in_order(self) -> None:
        outcome = self.validator.validate(
            {"first_name": "", "last_name": "Obi", "gender": "X", "date_of_birth": "not-a-date"},
            self.registry.get("patients"),
        )

        self.assertFalse(outcome.valid)
        self.assertEqual(
            outcome.errors,
            (
                "first_name is required",
                "gender must be one of: Male, Female",
                "date_of_birth must be a valid date",
            ),
        )

    def test_missing_required_value_skips_rule_checks(self) -> None:
        outcome = self.validator.validate(
            {"first_name": "Ada", "last_name": "Obi", "gender": "  ", "date_of_birth": "1990-05-17"},
            self.registry.get("patients"),
        )

        self.assertEqual(outcome.errors, ("gender is required",))

    def test_number_bounds(self) -> None:
        schema = self.registry.get("birth_statistics")
        row = {"patient_id": "p", "facility_id": "f", "birth_date": "2024-01-02"}

        too_heavy = self.validator.validate({**row, "birth_weight": "12.5"}, schema)
        negative = self.validator.validate({**row, "birth_weight": "-1"}, schema)
        not_numeric = self.validator.validate({**row, "birth_weight": "heavy"}, schema)

        self.assertEqual(too_heavy.errors, ("birth_weight must be at most 10",))
        self.assertEqual(negative.errors, ("birth_weight must be at least 0",))
        self.assertEqual(not_numeric.errors, ("birth_weight must be a valid number",))

    def test_allowed_values_compare_trimmed_text(self) -> None:
        schema = self.registry.get("facilities")
        outcome = self.validator.validate(
            {"name": "Clinic A", "type": " Clinic ", "lga": "Ikeja"},
            schema,
        )

        self.assertTrue(outcome.valid)

    def test_pattern_rule(self) -> None:
        outcome = self.validator.validate(
            {
                "first_name": "Ada",
                "last_name": "Obi",
                "gender": "Female",
                "date_of_birth": "1990-05-17",
                "email": "not-an-email",
            },
            self.registry.get("patients"),
        )

        self.assertEqual(outcome.errors, ("email does not match the required format",))

    def test_unmapped_optional_fields_are_ignored(self) -> None:
        outcome = self.validator.validate(
            {
                "patient_id": "p",
                "facility_id": "f",
                "vaccine_type": "BCG",
                "vaccine_name": "BCG",
                "administration_date": "2024-02-01",
            },
            self.registry.get("immunizations"),
        )

        self.assertTrue(outcome.valid)


if __name__ == "__main__":
    unittest.main()
