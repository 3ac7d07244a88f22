from __future__ import annotations

import unittest
from datetime import date

from app.domain.entity_config import SemanticType
from app.mappers.type_coercion import coerce, infer_type_from_header, try_coerce


class TestCoerce(unittest.TestCase):
    def test_empty_and_none_become_none_for_every_type(self) -> None:
        for semantic_type in SemanticType:
            self.assertIsNone(coerce("", semantic_type))
            self.assertIsNone(coerce(None, semantic_type))
            self.assertFalse(try_coerce("", semantic_type).failed)

    def test_string_is_returned_unchanged(self) -> None:
        self.assertEqual(coerce("  Lagos ", "string"), "  Lagos ")

    def test_numbers(self) -> None:
        self.assertEqual(coerce("42", "number"), 42)
        self.assertEqual(coerce("3.25", "number"), 3.25)
        self.assertEqual(coerce("1,250", "number"), 1250)
        self.assertIsNone(coerce("1_000", "number"))
        self.assertIsNone(coerce("2_5.0", "number"))
        self.assertIsNone(coerce("abc", "number"))
        self.assertTrue(try_coerce("abc", "number").failed)
        self.assertTrue(try_coerce("nan", "number").failed)

    def test_booleans(self) -> None:
        for truthy in ("true", "YES", "y", "1"):
            self.assertIs(coerce(truthy, "boolean"), True)
        for falsy in ("false", "No", "n", "0"):
            self.assertIs(coerce(falsy, "boolean"), False)
        self.assertTrue(try_coerce("maybe", "boolean").failed)

    def test_dates(self) -> None:
        self.assertEqual(coerce("2023-03-15", "date"), date(2023, 3, 15))
        self.assertEqual(coerce("2023-03-15T10:30:00Z", "date"), date(2023, 3, 15))
        self.assertEqual(coerce("03/15/2023", "date"), date(2023, 3, 15))
        self.assertIsNone(coerce("not a date", "date"))
        self.assertTrue(try_coerce("2023-13-45", "date").failed)


class TestInferTypeFromHeader(unittest.TestCase):
    def test_hints(self) -> None:
        self.assertIs(infer_type_from_header("date_of_birth"), SemanticType.DATE)
        self.assertIs(infer_type_from_header("DOB"), SemanticType.DATE)
        self.assertIs(infer_type_from_header("birth_weight"), SemanticType.NUMBER)
        self.assertIs(infer_type_from_header("dose_number"), SemanticType.NUMBER)
        self.assertIs(infer_type_from_header("is_active"), SemanticType.BOOLEAN)
        self.assertIs(infer_type_from_header("first_name"), SemanticType.STRING)

    def test_date_hint_wins_over_number_hint(self) -> None:
        self.assertIs(infer_type_from_header("number_update_date"), SemanticType.DATE)


if __name__ == "__main__":
    unittest.main()
