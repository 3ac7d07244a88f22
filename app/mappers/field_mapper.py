"""
app/mappers/field_mapper.py

Applies a source-column -> target-field mapping to raw rows.
"""

from __future__ import annotations

from typing import Mapping

from app.domain.data_import import RawRow, TransformedRow
from app.domain.entity_config import EntityImportConfig
from app.mappers.type_coercion import coerce


class FieldMapper:
    """
    Renames source columns to target fields and coerces them to their declared types.

    Mappings to fields the entity does not declare are ignored.
    """

    def __init__(self, *, mappings: Mapping[str, str], schema: EntityImportConfig) -> None:
        known = set(schema.field_names)
        self._schema = schema
        self._mappings = {
            source: target
            for source, target in mappings.items()
            if target in known
        }

    @property
    def mappings(self) -> dict[str, str]:
        return dict(self._mappings)

    def map_row(self, raw_row: RawRow) -> RawRow:
        """
        Return the row keyed by target field, values untouched.
        """

        return {target: raw_row.get(source) for source, target in self._mappings.items()}

    def transform(self, raw_row: RawRow) -> TransformedRow:
        """
        Return the row keyed by target field with coerced values.
        """

        return {
            target: coerce(value, self._schema.type_of(target))
            for target, value in self.map_row(raw_row).items()
        }
