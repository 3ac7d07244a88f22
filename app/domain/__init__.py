"""
app/domain package marker.
"""

from app.domain.data_import import FileAnalysis, ImportResult, RowError, ValidRow
from app.domain.entity_config import EntityImportConfig, EntityKind, EntityRegistry, SemanticType

__all__ = [
    "EntityImportConfig",
    "EntityKind",
    "EntityRegistry",
    "FileAnalysis",
    "ImportResult",
    "RowError",
    "SemanticType",
    "ValidRow",
]
