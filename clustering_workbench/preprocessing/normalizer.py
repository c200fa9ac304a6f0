"""
Numeric column normalization.

Statistics are computed over each full column before any row is rewritten;
nothing is carried over between calls.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..core.data_models import ColumnStats, NormalizationMode, NormalizationResult
from ..core.dataset import Dataset, copy_rows, parse_number
from ..core.exceptions import ValidationError


logger = logging.getLogger(__name__)


def _min_max(values: np.ndarray) -> Tuple[Callable[[float], float], ColumnStats]:
    low, high = (float(values.min()), float(values.max())) if values.size else (0.0, 0.0)
    span = high - low
    stats = ColumnStats(min=low, max=high, degenerate=span == 0)
    if span == 0:
        return (lambda x: 0.0), stats
    return (lambda x: (x - low) / span), stats


def _z_score(values: np.ndarray) -> Tuple[Callable[[float], float], ColumnStats]:
    # population std (ddof=0)
    mean = float(values.mean()) if values.size else 0.0
    std = float(values.std()) if values.size else 0.0
    stats = ColumnStats(mean=mean, std=std, degenerate=std == 0)
    if std == 0:
        return (lambda x: 0.0), stats
    return (lambda x: (x - mean) / std), stats


NORMALIZATION_STRATEGIES: Dict[NormalizationMode, Callable[[np.ndarray], Tuple[Callable[[float], float], ColumnStats]]] = {
    NormalizationMode.MIN_MAX: _min_max,
    NormalizationMode.Z_SCORE: _z_score,
}


def normalize(dataset: Dataset,
              numeric_columns: Sequence[str],
              mode: Optional[NormalizationMode] = None) -> NormalizationResult:
    """
    Scale numeric columns with min-max or z-score normalization.

    Constant columns are mapped to 0 for every row. Cells that are not finite
    numbers are written as 0.0 and counted in the column stats.

    Args:
        dataset: Rows to normalize; never mutated
        numeric_columns: Columns to scale
        mode: Normalization strategy, defaults to min-max

    Returns:
        NormalizationResult with the rewritten rows and per-column stats

    Raises:
        ValidationError: If the dataset is empty or the mode is unknown
    """
    try:
        mode = NormalizationMode(mode) if mode is not None else NormalizationMode.MIN_MAX
    except ValueError as e:
        raise ValidationError(f"Unknown normalization mode: {mode}", details={"operation": "normalize"}) from e
    if not dataset:
        raise ValidationError("Dataset cannot be empty", details={"operation": "normalize"})

    strategy = NORMALIZATION_STRATEGIES[mode]
    normalized = copy_rows(dataset)
    column_stats: Dict[str, ColumnStats] = {}
    warnings: List[str] = []

    for column in numeric_columns:
        parsed = [parse_number(row.get(column)) for row in dataset]
        finite = np.array([v for v in parsed if v is not None], dtype=float)
        transform, stats = strategy(finite)
        stats.non_finite_count = len(parsed) - finite.size

        for row, value in zip(normalized, parsed):
            row[column] = 0.0 if value is None else float(transform(value))

        if stats.degenerate:
            message = f"Column '{column}' is constant; normalized to 0 for every row"
            warnings.append(message)
            logger.warning(message)
        if stats.non_finite_count:
            message = f"Column '{column}' had {stats.non_finite_count} non-finite values coerced to 0.0"
            warnings.append(message)
            logger.warning(message)

        column_stats[column] = stats

    logger.info("Normalized %d columns with %s scaling", len(column_stats), mode.value)
    return NormalizationResult(dataset=normalized, mode=mode, column_stats=column_stats, warnings=warnings)
