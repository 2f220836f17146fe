"""Validation and coercion of a single raw CSV row into a ``DataPoint``."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from metricview.exceptions import RowValidationError
from metricview.models import DataPoint

__all__ = ["REQUIRED_COLUMNS", "validate_row"]

REQUIRED_COLUMNS = ("experiment_id", "metric_name", "step", "value")

# Steps are stored and exported as Int64
MAX_STEP = 2**63 - 1


def _require_text(row: Mapping[str, Any], field: str, row_index: int) -> str:
    raw = row.get(field)
    if not isinstance(raw, str) or not raw:
        raise RowValidationError(row_index, field, "must be a non-empty string")
    return raw


def _parse_number(raw: Any) -> float | None:
    """Parse a cell as a number, returning None when it is not numeric.

    Empty cells and NaN are not numbers. Infinity (``inf``, ``Infinity``, with
    either sign) is accepted as a number; callers that need finite values
    check for it themselves.
    """
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def validate_row(row: Mapping[str, Any], row_index: int) -> DataPoint:
    """Validate one raw record and coerce it into a ``DataPoint``.

    Checks run in order and the first failure wins:
    experiment_id, metric_name, step, value.

    Args:
        row: Field bag keyed by column name (extra keys are ignored)
        row_index: 1-based data row index used in error messages

    Returns:
        DataPoint: The validated data point

    Raises:
        RowValidationError: If a field is missing or invalid. The message
            names the row index and the offending field.

    Examples:
        >>> validate_row({"experiment_id": "e1", "metric_name": "acc", "step": "0", "value": "0.5"}, 1)
        DataPoint(experiment_id='e1', metric_name='acc', step=0, value=0.5)
        >>> validate_row({"experiment_id": "e1", "metric_name": "acc", "step": "-1", "value": "0.5"}, 3)
        Traceback (most recent call last):
        ...
        metricview.exceptions.RowValidationError: Row 3: step must be a non-negative number
    """
    experiment_id = _require_text(row, "experiment_id", row_index)
    metric_name = _require_text(row, "metric_name", row_index)

    step = _parse_number(row.get("step"))
    if step is None or step < 0:
        raise RowValidationError(row_index, "step", "must be a non-negative number")
    if not step.is_integer() or step > MAX_STEP:
        raise RowValidationError(row_index, "step", "must be a non-negative integer")

    value = _parse_number(row.get("value"))
    if value is None:
        raise RowValidationError(row_index, "value", "must be a valid number")

    return DataPoint(
        experiment_id=experiment_id,
        metric_name=metric_name,
        step=int(step),
        value=value,
    )
