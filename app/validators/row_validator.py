"""
app/validators/row_validator.py

Row-level validation against an entity's import rules.

Rows are validated after column renaming and before coercion, so values
are still the strings read from the file.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Mapping

from app.domain.data_import import ValidationOutcome
from app.domain.entity_config import EntityImportConfig, FieldRule, SemanticType
from app.mappers.type_coercion import try_coerce


class RowValidator:
    """
    Validates one renamed row and collects every problem, in a fixed order.
    """

    def validate(self, row: Mapping[str, Any], schema: EntityImportConfig) -> ValidationOutcome:
        errors: list[str] = []

        for field_name in schema.required_fields:
            if self._is_blank(row.get(field_name)):
                errors.append(f"{field_name} is required")

        for field_name in schema.field_names:
            rule = schema.validations.get(field_name)
            if rule is None:
                continue
            value = row.get(field_name)
            if self._is_blank(value):
                continue
            errors.extend(self._check_rule(field_name, value, schema.type_of(field_name), rule))

        return ValidationOutcome(errors=tuple(errors))

    def _check_rule(
        self,
        field_name: str,
        value: Any,
        semantic_type: SemanticType,
        rule: FieldRule,
    ) -> list[str]:
        errors: list[str] = []

        coercion = try_coerce(value, semantic_type)
        if coercion.failed:
            errors.append(f"{field_name} must be a valid {semantic_type.value}")
        elif semantic_type is SemanticType.NUMBER:
            number = coercion.value
            if rule.min_value is not None and number < rule.min_value:
                errors.append(f"{field_name} must be at least {_format_bound(rule.min_value)}")
            if rule.max_value is not None and number > rule.max_value:
                errors.append(f"{field_name} must be at most {_format_bound(rule.max_value)}")

        text = str(value).strip()
        if rule.allowed_values and text not in rule.allowed_values:
            errors.append(f"{field_name} must be one of: {', '.join(rule.allowed_values)}")

        if rule.pattern is not None and not _compile(rule.pattern).search(text):
            errors.append(f"{field_name} does not match the required format")

        return errors

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        return str(value).strip() == ""


def _format_bound(bound: float) -> str:
    if float(bound).is_integer():
        return str(int(bound))
    return str(bound)


@lru_cache(maxsize=128)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)
