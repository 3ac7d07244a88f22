"""
app/mappers/type_coercion.py

Cell-level type coercion for imported rows.

Missing-value policy: ``None`` and the empty string coerce to ``None`` for
every semantic type. A non-empty value that cannot be coerced also yields
``None`` from :func:`coerce`; :func:`try_coerce` reports that case as a
failure so the row validator can flag it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from app.domain.entity_config import SemanticType

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
)

TRUTHY_VALUES = frozenset({"true", "yes", "y", "1"})
FALSY_VALUES = frozenset({"false", "no", "n", "0"})

_DATE_HINTS: tuple[str, ...] = ("date", "dob")
_NUMBER_HINTS: tuple[str, ...] = ("age", "count", "number", "quantity", "amount", "weight", "height")
_BOOLEAN_HINTS: tuple[str, ...] = ("is_", "has_", "active", "enabled")


@dataclass(frozen=True)
class Coercion:
    """
    Coerced value plus whether a non-empty input was rejected.
    """

    value: Any
    failed: bool = False


def try_coerce(raw: Any, semantic_type: SemanticType | str) -> Coercion:
    """
    Coerce ``raw`` to ``semantic_type`` and report uncoercible input.
    """

    if raw is None:
        return Coercion(None)
    if isinstance(raw, str) and raw == "":
        return Coercion(None)

    kind = SemanticType(semantic_type)
    if kind is SemanticType.STRING:
        return Coercion(str(raw))

    parser = _PARSERS[kind]
    value = parser(raw)
    return Coercion(value, failed=value is None)


def coerce(raw: Any, semantic_type: SemanticType | str) -> Any:
    """
    Coerce one cell, treating empty and uncoercible input as ``None``.
    """

    return try_coerce(raw, semantic_type).value


def infer_type_from_header(header: str) -> SemanticType:
    """
    Guess a semantic type from a column name. Used only as a suggestion.
    """

    name = header.strip().lower()
    if any(hint in name for hint in _DATE_HINTS):
        return SemanticType.DATE
    if any(hint in name for hint in _NUMBER_HINTS):
        return SemanticType.NUMBER
    if any(hint in name for hint in _BOOLEAN_HINTS):
        return SemanticType.BOOLEAN
    return SemanticType.STRING


def _parse_date(raw: Any) -> date | None:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    text = str(raw).strip()
    if not text:
        return None

    normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _parse_number(raw: Any) -> int | float | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return raw if raw == raw and raw not in (float("inf"), float("-inf")) else None

    text = str(raw).strip().replace(",", "")
    if not text or "_" in text:
        return None

    try:
        return int(text)
    except ValueError:
        pass

    try:
        decimal_value = Decimal(text)
    except InvalidOperation:
        return None
    if not decimal_value.is_finite():
        return None
    return float(decimal_value)


def _parse_boolean(raw: Any) -> bool | None:
    if isinstance(raw, bool):
        return raw

    text = str(raw).strip().lower()
    if text in TRUTHY_VALUES:
        return True
    if text in FALSY_VALUES:
        return False
    return None


_PARSERS = {
    SemanticType.DATE: _parse_date,
    SemanticType.NUMBER: _parse_number,
    SemanticType.BOOLEAN: _parse_boolean,
}
