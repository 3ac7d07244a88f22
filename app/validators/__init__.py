"""
app/validators package marker.
"""

from app.validators.mapping_validator import MappingErrorDetail, MappingValidationError, MappingValidator
from app.validators.row_validator import RowValidator

__all__ = [
    "MappingErrorDetail",
    "MappingValidationError",
    "MappingValidator",
    "RowValidator",
]
