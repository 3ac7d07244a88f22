"""
app/mappers package marker.
"""

from app.mappers.entity_matcher import normalize_header, suggest_entity
from app.mappers.field_mapper import FieldMapper
from app.mappers.type_coercion import coerce, infer_type_from_header, try_coerce

__all__ = [
    "FieldMapper",
    "coerce",
    "infer_type_from_header",
    "normalize_header",
    "suggest_entity",
    "try_coerce",
]
