"""
app/validators/mapping_validator.py

Validation for source-column -> target-field mappings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from app.domain.data_import import MappingValidationReport
from app.domain.entity_config import EntityImportConfig
from app.domain.errors import ImportConfigurationError


@dataclass(frozen=True)
class MappingErrorDetail:
    """
    Structured mapping error detail.
    """

    code: str
    message: str
    target_field: str | None = None
    source_column: str | None = None
    context: dict[str, Any] | None = None


class MappingValidationError(ImportConfigurationError):
    """
    Raised when a mapping cannot produce importable rows.
    """

    def __init__(self, *, message: str, errors: Sequence[MappingErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "target_field": error.target_field,
                    "source_column": error.source_column,
                    "context": error.context,
                }
                for error in self.errors
            ],
        }


class MappingValidator:
    """
    Checks a mapping against an entity's declared and required fields.

    Unknown target fields are warnings; they are dropped by the field mapper.
    """

    def check(
        self,
        *,
        mappings: Mapping[str, str],
        schema: EntityImportConfig,
        source_headers: Sequence[str] | None = None,
    ) -> tuple[list[MappingErrorDetail], list[str]]:
        errors: list[MappingErrorDetail] = []
        warnings: list[str] = []
        known_fields = set(schema.field_names)
        mapped_targets = list(mappings.values())

        for required in schema.required_fields:
            if required not in mapped_targets:
                errors.append(
                    MappingErrorDetail(
                        code="required_field_unmapped",
                        message=f"Required field '{required}' is not mapped",
                        target_field=required,
                    )
                )

        seen_targets: dict[str, str] = {}
        for source_column, target_field in mappings.items():
            if target_field not in known_fields:
                warnings.append(f"Unknown field '{target_field}' is mapped")
                continue
            if target_field in seen_targets:
                errors.append(
                    MappingErrorDetail(
                        code="duplicate_target_field",
                        message=f"Field '{target_field}' is mapped from more than one column",
                        target_field=target_field,
                        source_column=source_column,
                        context={"first_source_column": seen_targets[target_field]},
                    )
                )
                continue
            seen_targets[target_field] = source_column

        if source_headers is not None:
            headers_set = set(source_headers)
            for source_column, target_field in mappings.items():
                if source_column not in headers_set:
                    errors.append(
                        MappingErrorDetail(
                            code="unknown_source_column",
                            message=f"Mapped source column '{source_column}' does not exist in file headers",
                            target_field=target_field,
                            source_column=source_column,
                            context={"source_headers": list(source_headers)},
                        )
                    )

        return errors, warnings

    def report(
        self,
        *,
        mappings: Mapping[str, str],
        schema: EntityImportConfig,
    ) -> MappingValidationReport:
        errors, warnings = self.check(mappings=mappings, schema=schema)
        return MappingValidationReport(
            errors=tuple(error.message for error in errors),
            warnings=tuple(warnings),
        )

    def validate(
        self,
        *,
        mappings: Mapping[str, str],
        schema: EntityImportConfig,
        source_headers: Sequence[str] | None = None,
    ) -> list[str]:
        """
        Raise MappingValidationError on any error; return the warnings otherwise.
        """

        errors, warnings = self.check(mappings=mappings, schema=schema, source_headers=source_headers)
        if errors:
            raise MappingValidationError(
                message=f"Invalid field mappings: {', '.join(error.message for error in errors)}",
                errors=errors,
            )
        return warnings
