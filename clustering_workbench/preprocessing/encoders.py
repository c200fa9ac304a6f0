"""
Categorical encoders.

Two interchangeable strategies share the contract
``(dataset, categorical_columns, config) -> EncodingResult``:

- label encoding assigns each distinct value its index in lexicographic order
- smart one-hot encoding expands each column into binary indicator columns,
  but excludes columns whose cardinality exceeds the configured threshold

High-cardinality one-hot expansion (e.g. near-unique identifiers) yields a
feature count approaching the row count, which destroys the clustering
signal; such columns are dropped and reported instead.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence

import pandas as pd

from ..core.config import WorkbenchConfig
from ..core.data_models import EncodingMode, EncodingResult, ExcludedColumn
from ..core.dataset import Dataset, categorical_frame, copy_rows, is_null, stringify
from ..core.exceptions import ValidationError
from .encoding_validator import validate_encoding


logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC = re.compile(r"[^0-9A-Za-z]+")


def distinct_values(dataset: Dataset, column: str) -> List[str]:
    """Sorted distinct stringified non-null values of a column."""
    return sorted({stringify(row[column]) for row in dataset
                   if column in row and not is_null(row[column])})


def label_encode(dataset: Dataset, categorical_columns: Sequence[str],
                 config: WorkbenchConfig) -> EncodingResult:
    """
    Replace each categorical value with its lexicographic ordinal.

    Nulls and values missing from the mapping encode to 0.
    """
    encoded = copy_rows(dataset)
    encoding_map: Dict[str, Dict[str, int]] = {}

    for column in categorical_columns:
        mapping = {value: index for index, value in enumerate(distinct_values(dataset, column))}
        encoding_map[column] = mapping

        for row in encoded:
            value = row.get(column)
            row[column] = 0 if is_null(value) else mapping.get(stringify(value), 0)

        logger.debug("Label encoded column '%s' with %d distinct values", column, len(mapping))

    return EncodingResult(dataset=encoded, mode=EncodingMode.LABEL, encoding_map=encoding_map)


def indicator_column_name(column: str, value: str, taken: set) -> str:
    """Build `<column>_<sanitizedValue>`, suffixing on collision."""
    sanitized = _NON_ALPHANUMERIC.sub("_", value).strip("_") or "blank"
    name = f"{column}_{sanitized}"
    candidate, suffix = name, 2
    while candidate in taken:
        candidate = f"{name}_{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate


def one_hot_encode(dataset: Dataset, categorical_columns: Sequence[str],
                   config: WorkbenchConfig) -> EncodingResult:
    """
    Expand categorical columns into indicator columns, excluding high-cardinality ones.

    Indicators come from ``pd.get_dummies`` over the stringified values and
    are renamed to ``<column>_<sanitizedValue>``. Columns whose cardinality
    exceeds ``config.one_hot_max_cardinality`` are dropped and recorded in
    ``excluded_columns`` rather than encoded.
    """
    threshold = config.one_hot_max_cardinality
    columns = list(categorical_columns)
    frame = categorical_frame(dataset, columns)
    encoded = copy_rows(dataset)
    encoding_map: Dict[str, Dict[str, str]] = {}
    new_columns: List[str] = []
    excluded: List[ExcludedColumn] = []
    warnings: List[str] = []
    taken = set()
    for row in dataset:
        taken.update(row.keys())

    for column in columns:
        values = sorted(frame[column].dropna().unique())

        if len(values) > threshold:
            reason = (f"Column '{column}' has {len(values)} distinct values, above the "
                      f"one-hot threshold of {threshold}; it was excluded to avoid a sparse, "
                      f"high-dimensional feature space")
            excluded.append(ExcludedColumn(name=column, cardinality=len(values),
                                           threshold=threshold, reason=reason))
            warnings.append(reason)
            logger.warning(reason)
            for row in encoded:
                row.pop(column, None)
            continue

        mapping = {value: indicator_column_name(column, value, taken) for value in values}
        encoding_map[column] = mapping
        new_columns.extend(mapping.values())

        # null cells leave every indicator at 0
        indicators = (pd.get_dummies(frame[column], dtype=int)
                      .reindex(columns=values, fill_value=0)
                      .rename(columns=mapping))
        for row, flags in zip(encoded, indicators.to_dict(orient="records")):
            row.pop(column, None)
            row.update({name: int(flag) for name, flag in flags.items()})

        logger.debug("One-hot encoded column '%s' into %d indicator columns", column, len(mapping))

    return EncodingResult(
        dataset=encoded,
        mode=EncodingMode.ONE_HOT,
        encoding_map=encoding_map,
        new_columns=new_columns,
        excluded_columns=excluded,
        warnings=warnings,
    )


ENCODING_STRATEGIES: Dict[EncodingMode, Callable[[Dataset, Sequence[str], WorkbenchConfig], EncodingResult]] = {
    EncodingMode.LABEL: label_encode,
    EncodingMode.ONE_HOT: one_hot_encode,
}


def encode(dataset: Dataset,
           categorical_columns: Sequence[str],
           mode: Optional[EncodingMode] = None,
           config: Optional[WorkbenchConfig] = None,
           numeric_columns: Optional[Sequence[str]] = None) -> EncodingResult:
    """
    Encode categorical columns with the selected strategy.

    Args:
        dataset: Rows to encode; never mutated
        categorical_columns: Columns to encode
        mode: Encoding strategy, defaults to ``config.encoding_mode``
        config: Workbench configuration
        numeric_columns: Numeric columns, used only for the sparsity projection

    Returns:
        EncodingResult with validation warnings and recommendations merged in

    Raises:
        ValidationError: If the dataset is empty or the mode is unknown
    """
    config = config or WorkbenchConfig()
    try:
        mode = EncodingMode(mode) if mode is not None else config.encoding_mode
    except ValueError as e:
        raise ValidationError(f"Unknown encoding mode: {mode}", details={"operation": "encode"}) from e

    if not dataset:
        raise ValidationError("Dataset cannot be empty", details={"operation": "encode"})

    strategy = ENCODING_STRATEGIES[mode]
    logger.info("Encoding %d categorical columns with %s strategy", len(categorical_columns), mode.value)

    validation = validate_encoding(dataset, categorical_columns, mode, config, numeric_columns)
    result = strategy(dataset, list(categorical_columns), config)

    # actual exclusions are reported by the strategy, so projected ones are not merged
    result.warnings = result.warnings + validation.warnings
    result.recommendations = result.recommendations + validation.recommendations
    return result
