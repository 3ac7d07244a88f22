"""
app/services/import_pipeline.py

Row-by-row partition of a tabular source into valid and invalid rows.

The pipeline never persists anything and never opens a transaction. Any
exception raised by the source itself (I/O, decoding, CSV format)
propagates and no partial result is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from app.domain.data_import import (
    PipelineResult,
    RawRow,
    RowError,
    TransformedRow,
    ValidationOutcome,
    ValidRow,
)

logger = logging.getLogger(__name__)

ValidateFn = Callable[[RawRow], ValidationOutcome]
TransformFn = Callable[[RawRow], TransformedRow]


class ImportPipeline:
    """
    Streams rows through a validate step and a transform step.
    """

    def __init__(self, *, log_validation_errors: bool = False) -> None:
        self._log_validation_errors = log_validation_errors

    def process(
        self,
        rows: Iterable[RawRow],
        validate_fn: ValidateFn,
        transform_fn: TransformFn,
    ) -> PipelineResult:
        """
        Partition ``rows`` in arrival order.

        Row numbers are 1-based data-row ordinals. Invalid rows skip the
        transform. A ValueError raised by ``transform_fn`` rejects that row
        with the exception message.
        """

        valid: list[ValidRow] = []
        invalid: list[RowError] = []
        total = 0

        for raw_row in rows:
            total += 1
            outcome = validate_fn(raw_row)
            if not outcome.valid:
                self._reject(invalid, RowError(row=total, original=raw_row, errors=outcome.errors))
                continue

            try:
                values = transform_fn(raw_row)
            except ValueError as exc:
                self._reject(invalid, RowError(row=total, original=raw_row, errors=(str(exc),)))
                continue

            valid.append(ValidRow(row=total, original=raw_row, values=values))

        return PipelineResult(valid=valid, invalid=invalid, total=total)

    def _reject(self, invalid: list[RowError], error: RowError) -> None:
        if self._log_validation_errors:
            logger.warning("Import validation error row=%s errors=%s", error.row, "; ".join(error.errors))
        invalid.append(error)
