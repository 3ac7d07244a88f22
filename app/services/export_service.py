"""
app/services/export_service.py

Entity export service: query, flatten to human-labelled rows, render a file.

Filters
-------
dateFrom / dateTo : inclusive bounds on the entity's date column. The column
                    is the config override, else the first of
                    ``_DATE_FIELD_CANDIDATES`` the model has, else created_at.
page, limit, sortBy, sortOrder : accepted and ignored.
anything else     : equality filter on a model column.

Every public method is read-only; no session commits are issued.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from datetime import date, datetime, time, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Sequence

from sqlalchemy import Date, inspect as sa_inspect, select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql.elements import ColumnElement

from app.config import get_export_settings
from app.domain.data_import import ExportArtifact
from app.domain.entity_config import EntityRegistry, SemanticType, build_entity_registry
from app.domain.errors import ExportConfigurationError, UnsupportedEntityError
from app.domain.export_config import EntityExportConfig, build_export_configs, map_to_fields
from app.mappers.type_coercion import Coercion, try_coerce
from app.renderers.pdf import write_table_pdf
from app.renderers.tabular import write_csv, write_excel

logger = logging.getLogger(__name__)

EXPORT_FORMATS: dict[str, str] = {"csv": "csv", "excel": "xlsx", "pdf": "pdf"}

_DATE_FIELD_CANDIDATES: tuple[str, ...] = (
    "date",
    "registration_date",
    "administration_date",
    "reporting_date",
    "birth_date",
    "date_of_death",
)
_IGNORED_FILTERS: frozenset[str] = frozenset({"page", "limit", "sortBy", "sortOrder"})
_DATE_FROM = "dateFrom"
_DATE_TO = "dateTo"


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ExportService:
    """
    Export persisted records of one entity to CSV, Excel or PDF.
    """

    def __init__(
        self,
        *,
        export_dir: Path,
        max_rows: int,
        registry: EntityRegistry,
        configs: Mapping[str, EntityExportConfig],
    ) -> None:
        self._export_dir = export_dir
        self._max_rows = max(1, max_rows)
        self._registry = registry
        self._configs = configs

    def supported_entities(self) -> list[dict[str, Any]]:
        return [
            {
                "name": name,
                "label": self._registry.get(name).label,
                "fields": [{"name": column.field, "label": column.label} for column in config.columns],
                "default_fields": list(config.default_fields),
                "date_field": self.date_field_for(config),
            }
            for name, config in self._configs.items()
        ]

    def export_to_format(
        self,
        db: Session,
        *,
        entity: str,
        filters: Mapping[str, Any] | None = None,
        fields: Sequence[str] | None = None,
        format: str = "csv",
    ) -> ExportArtifact:
        """
        Render ``entity`` records matching ``filters`` to a new file.

        Raises
        ------
        UnsupportedEntityError:   ``entity`` has no export configuration.
        ExportConfigurationError: unknown format, field, or filter column,
                                  an unparseable date bound, or more matching
                                  records than the row cap.
        """

        extension = EXPORT_FORMATS.get(format)
        if extension is None:
            raise ExportConfigurationError(
                f"Unsupported export format {format!r}. Valid: {sorted(EXPORT_FORMATS)}"
            )
        config = self._configs.get(entity)
        if config is None:
            raise UnsupportedEntityError(entity)

        columns = config.resolve_columns(fields)
        stmt = self._build_query(config, filters or {})
        records = db.scalars(stmt).all()
        if len(records) > self._max_rows:
            raise ExportConfigurationError(
                f"Export of {entity} matches more than {self._max_rows} records. Narrow the filters."
            )
        rows = [map_to_fields(record, columns) for record in records]
        headers = [column.label for column in columns]

        self._export_dir.mkdir(parents=True, exist_ok=True)
        filename = unique_filename(f"{entity}_export", extension)
        path = self._export_dir / filename
        label = self._registry.get(entity).label
        if format == "csv":
            write_csv(path, headers, rows)
        elif format == "excel":
            write_excel(path, headers, rows, sheet_title=label)
        else:
            write_table_pdf(
                path,
                title=f"{label} Export",
                headers=headers,
                rows=rows,
                subtitle_lines=[_period_text(filters or {})],
            )

        logger.info(
            "Export entity=%s format=%s fields=%d rows=%d file=%s",
            entity,
            format,
            len(columns),
            len(rows),
            filename,
        )
        return ExportArtifact(
            file_path=path,
            filename=filename,
            entity=entity,
            format=format,
            record_count=len(rows),
        )

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------

    def date_field_for(self, config: EntityExportConfig) -> str:
        columns = sa_inspect(config.model).columns
        if config.date_field is not None:
            return config.date_field
        for candidate in _DATE_FIELD_CANDIDATES:
            if candidate in columns:
                return candidate
        return "created_at"

    def _build_query(self, config: EntityExportConfig, filters: Mapping[str, Any]) -> Any:
        model = config.model
        columns = sa_inspect(model).columns
        date_field = self.date_field_for(config)
        date_column = getattr(model, date_field)
        is_date_only = isinstance(columns[date_field].type, Date)

        stmt = select(model)
        conditions: list[ColumnElement[bool]] = []
        for key, value in filters.items():
            if key in _IGNORED_FILTERS or value is None or value == "":
                continue
            if key == _DATE_FROM:
                bound = parse_date_bound(key, value)
                conditions.append(date_column >= (bound if is_date_only else day_start(bound)))
                continue
            if key == _DATE_TO:
                bound = parse_date_bound(key, value)
                conditions.append(date_column <= (bound if is_date_only else day_end(bound)))
                continue
            if key not in columns:
                raise ExportConfigurationError(
                    f"Unknown filter {key!r} for {config.entity}. Valid columns: {', '.join(columns.keys())}"
                )
            conditions.append(getattr(model, key) == _filter_value(columns[key], value))

        if conditions:
            stmt = stmt.where(*conditions)
        for relation in config.eager_loads:
            stmt = stmt.options(selectinload(getattr(model, relation)))
        return stmt.order_by(date_column.desc(), model.id).limit(self._max_rows + 1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_date_bound(key: str, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    coerced: Coercion = try_coerce(str(value), SemanticType.DATE)
    if coerced.failed or coerced.value is None:
        raise ExportConfigurationError(f"{key} must be a valid date, got {value!r}")
    return coerced.value


def _filter_value(column: Any, value: Any) -> Any:
    python_type: type | None
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        python_type = None
    if python_type is uuid.UUID and not isinstance(value, uuid.UUID):
        try:
            return uuid.UUID(str(value))
        except ValueError as exc:
            raise ExportConfigurationError(f"Filter {column.key!r} must be a valid ID, got {value!r}") from exc
    if python_type is bool and isinstance(value, str):
        coerced = try_coerce(value, SemanticType.BOOLEAN)
        if coerced.failed:
            raise ExportConfigurationError(f"Filter {column.key!r} must be a boolean, got {value!r}")
        return coerced.value
    if python_type is date and isinstance(value, str):
        return parse_date_bound(column.key, value)
    return value


def day_start(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def day_end(d: date) -> datetime:
    return datetime.combine(d, time.max, tzinfo=timezone.utc)


def unique_filename(stem: str, extension: str) -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    return f"{stem}_{timestamp}_{secrets.token_hex(3)}.{extension}"


def _period_text(filters: Mapping[str, Any]) -> str:
    return period_text(filters.get(_DATE_FROM), filters.get(_DATE_TO))


def period_text(date_from: Any, date_to: Any) -> str:
    if date_from and date_to:
        return f"Period: {date_from} to {date_to}"
    if date_from:
        return f"From {date_from}"
    if date_to:
        return f"To {date_to}"
    return "All Time"


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_export_service() -> ExportService:
    settings = get_export_settings()
    return ExportService(
        export_dir=settings.export_dir,
        max_rows=settings.max_rows,
        registry=build_entity_registry(),
        configs=build_export_configs(),
    )
