"""
app/services/data_import_service.py

Service layer for tabular data import orchestration.

Flow for one import:

    1. Resolve the entity configuration (unknown entity fails fast).
    2. Validate the mapping against required fields, then against the
       file header once it has been read. No data row is read before both
       checks pass.
    3. Stream rows through ImportPipeline (validate -> rename + coerce).
    4. Check every foreign key of the valid partition with batched lookups;
       rows with missing parents are moved to the error list.
    5. Bulk insert the survivors inside one transaction. Any database error
       rolls back every row and raises ImportPersistenceError.

The uploaded file is removed when the import finishes, whatever the outcome.
"""

from __future__ import annotations

import logging
import uuid
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_import_settings
from app.domain.data_import import (
    ColumnStats,
    FileAnalysis,
    ImportResult,
    MappingValidationReport,
    RowError,
    ValidRow,
)
from app.domain.entity_config import EntityImportConfig, EntityRegistry, build_entity_registry
from app.domain.errors import ImportPersistenceError
from app.mappers.entity_matcher import SIGNATURE_ENTITIES, normalize_header, suggest_entity
from app.mappers.field_mapper import FieldMapper
from app.mappers.type_coercion import infer_type_from_header
from app.repositories.health_record_repository import HealthRecordRepository
from app.services.file_readers import open_tabular_source
from app.services.import_pipeline import ImportPipeline
from app.validators.mapping_validator import MappingValidator
from app.validators.row_validator import RowValidator

logger = logging.getLogger(__name__)

ANALYSIS_SAMPLE_SIZE = 10
ANALYSIS_EXAMPLE_COUNT = 3


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class DataImportService:
    """
    Coordinates file analysis, mapping validation, row validation and persistence.
    """

    def __init__(
        self,
        *,
        registry: EntityRegistry,
        batch_size: int,
        log_validation_errors: bool,
        validator: RowValidator | None = None,
        mapping_validator: MappingValidator | None = None,
    ) -> None:
        self._registry = registry
        self._batch_size = max(1, batch_size)
        self._validator = validator or RowValidator()
        self._mapping_validator = mapping_validator or MappingValidator()
        self._pipeline = ImportPipeline(log_validation_errors=log_validation_errors)

    # ------------------------------------------------------------------
    # Entity catalogue
    # ------------------------------------------------------------------

    def supported_entities(self) -> list[dict[str, str]]:
        return [
            {"name": config.name, "label": config.label, "description": config.description}
            for config in self._registry
        ]

    def entity_schema(self, entity: str) -> dict[str, Any]:
        """
        Describe the importable fields of ``entity`` for mapping UIs.
        """

        config = self._registry.get(entity)
        fields = []
        for field_name, semantic_type in config.data_types.items():
            rule = config.validations.get(field_name)
            foreign_key = config.foreign_keys.get(field_name)
            fields.append(
                {
                    "name": field_name,
                    "label": _title_case(field_name),
                    "data_type": semantic_type.value,
                    "is_required": field_name in config.required_fields,
                    "is_unique": field_name in config.unique_fields,
                    "validation": rule.to_dict() if rule is not None else {},
                    "references": foreign_key.referenced_entity if foreign_key is not None else None,
                }
            )
        return {
            "entity": config.name,
            "label": config.label,
            "fields": fields,
            "required_fields": list(config.required_fields),
            "unique_fields": list(config.unique_fields),
        }

    def validate_field_mappings(self, mappings: Mapping[str, str], entity: str) -> MappingValidationReport:
        return self._mapping_validator.report(mappings=mappings, schema=self._registry.get(entity))

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze_file(
        self,
        file_path: str | Path,
        *,
        has_header_row: bool = True,
        skip_lines: int = 0,
    ) -> FileAnalysis:
        """
        Stream a file once, sampling the first rows for column statistics.
        """

        sample: list[dict[str, str | None]] = []
        total_rows = 0
        with open_tabular_source(file_path, has_header_row=has_header_row, skip_lines=skip_lines) as source:
            headers = source.headers
            for raw_row in source:
                total_rows += 1
                if len(sample) < ANALYSIS_SAMPLE_SIZE:
                    sample.append(raw_row)

        normalized = tuple(normalize_header(header) for header in headers)
        columns: dict[str, ColumnStats] = {}
        for header, normalized_name in zip(headers, normalized):
            values = [
                str(row.get(header)).strip()
                for row in sample
                if row.get(header) is not None and str(row.get(header)).strip() != ""
            ]
            columns[normalized_name] = ColumnStats(
                original_name=header,
                data_type=infer_type_from_header(normalized_name).value,
                examples=tuple(values[:ANALYSIS_EXAMPLE_COUNT]),
                non_empty_count=len(values),
                unique_count=len(set(values)),
            )

        mappable_to = suggest_entity(normalized)
        suggested_entity = SIGNATURE_ENTITIES.get(mappable_to)
        suggested_mappings: dict[str, str] = {}
        if suggested_entity is not None:
            known_fields = set(self._registry.get(suggested_entity).field_names)
            suggested_mappings = {
                header: normalized_name
                for header, normalized_name in zip(headers, normalized)
                if normalized_name in known_fields
            }

        logger.info(
            "Analyzed file path=%s rows=%d columns=%d suggestion=%s",
            Path(file_path).name,
            total_rows,
            len(headers),
            mappable_to,
        )
        return FileAnalysis(
            total_rows=total_rows,
            sample_size=len(sample),
            headers=tuple(headers),
            normalized_headers=normalized,
            columns=columns,
            mappable_to=mappable_to,
            suggested_entity=suggested_entity,
            suggested_mappings=suggested_mappings,
            sample_rows=sample,
        )

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_file(
        self,
        db: Session,
        file_path: str | Path,
        *,
        entity: str,
        mappings: Mapping[str, str],
        has_header_row: bool = True,
        skip_lines: int = 0,
    ) -> ImportResult:
        """
        Import one uploaded file into ``entity``.

        Raises:
            UnsupportedEntityError: ``entity`` has no configuration.
            MappingValidationError: a required field is unmapped, or a mapped
                source column is missing from the file header.
            UnsupportedFileFormatError / ImportFileError: unreadable file.
            ImportPersistenceError: the bulk insert failed and was rolled back.
        """

        path = Path(file_path)
        try:
            schema = self._registry.get(entity)
            warnings = self._mapping_validator.validate(mappings=mappings, schema=schema)
            mapper = FieldMapper(mappings=mappings, schema=schema)

            with open_tabular_source(path, has_header_row=has_header_row, skip_lines=skip_lines) as source:
                if source.headers:
                    self._mapping_validator.validate(
                        mappings=mapper.mappings,
                        schema=schema,
                        source_headers=source.headers,
                    )
                pipeline_result = self._pipeline.process(
                    source,
                    lambda raw_row: self._validator.validate(mapper.map_row(raw_row), schema),
                    mapper.transform,
                )

            accepted, referential_errors = self._check_foreign_keys(db, schema, pipeline_result.valid)
            errors = [*pipeline_result.invalid, *referential_errors]
            created = self._persist(
                db,
                schema,
                accepted,
                ImportResult(
                    total=pipeline_result.total,
                    valid_count=len(pipeline_result.valid),
                    invalid_count=len(pipeline_result.invalid),
                    created_count=0,
                    errors=errors,
                    warnings=warnings,
                ),
            )

            logger.info(
                "Import finished entity=%s total=%d valid=%d invalid=%d rejected_by_reference=%d created=%d",
                entity,
                pipeline_result.total,
                len(pipeline_result.valid),
                len(pipeline_result.invalid),
                len(referential_errors),
                created,
            )
            return ImportResult(
                total=pipeline_result.total,
                valid_count=len(pipeline_result.valid),
                invalid_count=len(pipeline_result.invalid),
                created_count=created,
                errors=errors,
                warnings=warnings,
            )
        finally:
            self._remove_upload(path)

    def _check_foreign_keys(
        self,
        db: Session,
        schema: EntityImportConfig,
        rows: list[ValidRow],
    ) -> tuple[list[ValidRow], list[RowError]]:
        """
        Split ``rows`` into rows whose references all exist and rows that fail.

        Accepted rows carry parsed UUID values for their foreign-key fields.
        """

        if not schema.foreign_keys or not rows:
            return rows, []

        repository = HealthRecordRepository(db)
        existing: dict[str, set[uuid.UUID]] = {}
        for field_name, rule in schema.foreign_keys.items():
            candidates = {
                parsed
                for row in rows
                if (parsed := _parse_uuid(row.values.get(field_name))) is not None
            }
            existing[field_name] = repository.existing_keys(rule.model, rule.referenced_field, candidates)

        accepted: list[ValidRow] = []
        rejected: list[RowError] = []
        for row in rows:
            messages: list[str] = []
            values = dict(row.values)
            for field_name, rule in schema.foreign_keys.items():
                raw_value = values.get(field_name)
                if raw_value is None:
                    continue
                parsed = _parse_uuid(raw_value)
                if parsed is None or parsed not in existing[field_name]:
                    messages.append(
                        f"Foreign key constraint failed: {field_name} references "
                        f"{rule.referenced_entity} but no record found with ID {raw_value}"
                    )
                    continue
                values[field_name] = parsed

            if messages:
                rejected.append(RowError(row=row.row, original=row.original, errors=tuple(messages)))
            else:
                accepted.append(ValidRow(row=row.row, original=row.original, values=values))

        return accepted, rejected

    def _persist(
        self,
        db: Session,
        schema: EntityImportConfig,
        rows: list[ValidRow],
        pending_result: ImportResult,
    ) -> int:
        if not rows:
            return 0

        # Unset cells are left out so column defaults apply.
        payloads = [
            {name: value for name, value in row.values.items() if value is not None}
            for row in rows
        ]
        repository = HealthRecordRepository(db)
        try:
            created = repository.bulk_insert(schema.model, payloads, batch_size=self._batch_size)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception(
                "Bulk insert failed entity=%s rows=%d; transaction rolled back",
                schema.name,
                len(payloads),
            )
            raise ImportPersistenceError(
                "Failed to persist imported rows; no rows were saved.",
                result=pending_result,
            ) from exc
        return created

    @staticmethod
    def _remove_upload(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to delete temporary upload path=%s: %s", path, exc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_uuid(value: Any) -> uuid.UUID | None:
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        return None


def _title_case(field_name: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in field_name.split("_"))


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_data_import_service() -> DataImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    settings = get_import_settings()
    return DataImportService(
        registry=build_entity_registry(),
        batch_size=settings.batch_size,
        log_validation_errors=settings.log_validation_errors,
    )
