"""
app/repositories/health_record_repository.py

Persistence layer for imported health records.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from db.base import Base

_DEFAULT_BATCH_SIZE = 1000
_LOOKUP_CHUNK_SIZE = 500


class HealthRecordRepository:
    """
    Repository for existence checks and chunked bulk inserts.

    Methods never commit; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def existing_keys(
        self,
        model: type[Base],
        field: str,
        keys: Collection[Any],
    ) -> set[Any]:
        """
        Return the subset of ``keys`` present in ``model.field``.
        """

        if not keys:
            return set()

        column = getattr(model, field)
        distinct_keys = list(dict.fromkeys(keys))
        found: set[Any] = set()
        for start in range(0, len(distinct_keys), _LOOKUP_CHUNK_SIZE):
            chunk = distinct_keys[start : start + _LOOKUP_CHUNK_SIZE]
            found.update(self._session.scalars(select(column).where(column.in_(chunk))))
        return found

    def bulk_insert(
        self,
        model: type[Base],
        payloads: Sequence[dict[str, Any]],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert ``payloads`` into ``model`` in chunks of ``batch_size``.
        """

        if not payloads:
            return 0

        size = max(1, batch_size)
        inserted = 0
        for start in range(0, len(payloads), size):
            chunk = list(payloads[start : start + size])
            self._session.execute(insert(model), chunk)
            inserted += len(chunk)
        return inserted
