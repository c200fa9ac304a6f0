"""
Dataset helpers shared by the preprocessing and clustering modules.

A dataset is an ordered list of row dicts mapping column name to a raw value
(number, text or null). These helpers centralize null detection, numeric
coercion and conversion to and from pandas frames supplied by the
file-reading layer.
"""

import math
import numbers
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

Dataset = List[Dict[str, Any]]

ID_COLUMN = "id"
CLUSTER_COLUMN = "cluster"
RESERVED_COLUMNS = (ID_COLUMN, CLUSTER_COLUMN)


def is_null(value: Any) -> bool:
    """Return True for None, NaN and empty or whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, np.floating) and np.isnan(value):
        return True
    return False


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a raw cell into a finite float.

    Numbers and numeric strings parse; booleans, nulls, non-numeric text and
    non-finite values return None.
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, numbers.Real):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_number(value: Any) -> float:
    """Coerce a raw cell to a float, mapping anything non-finite to 0.0."""
    number = parse_number(value)
    return 0.0 if number is None else number


def stringify(value: Any) -> str:
    """Stringify a categorical value; integral floats drop their fraction."""
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def column_names(dataset: Dataset, include_reserved: bool = False) -> List[str]:
    """Column names in first-appearance order across all rows."""
    seen: Dict[str, None] = {}
    for row in dataset:
        for name in row:
            if include_reserved or name not in RESERVED_COLUMNS:
                seen.setdefault(name, None)
    return list(seen)


def copy_rows(dataset: Dataset) -> Dataset:
    """Shallow-copy every row so callers' rows are never mutated."""
    return [dict(row) for row in dataset]


def records_from_frame(frame: pd.DataFrame, add_ids: bool = True) -> Dataset:
    """
    Convert a pandas DataFrame into a dataset.

    NaN cells become None and numpy scalars become Python scalars. When
    `add_ids` is set and the frame has no `id` column, a sequential `id`
    field is added to each row.

    Args:
        frame: Frame produced by the CSV/Excel reading layer
        add_ids: Whether to add the reserved synthetic id field

    Returns:
        List of row dicts
    """
    cleaned = frame.astype(object).where(pd.notna(frame), None)
    records: Dataset = []
    for index, row in enumerate(cleaned.to_dict(orient="records")):
        record = {str(key): (value.item() if isinstance(value, np.generic) else value)
                  for key, value in row.items()}
        if add_ids and ID_COLUMN not in record:
            record[ID_COLUMN] = index
        records.append(record)
    return records


def frame_from_records(dataset: Dataset) -> pd.DataFrame:
    """Convert a dataset into a pandas DataFrame for rendering or export."""
    return pd.DataFrame.from_records(dataset, columns=column_names(dataset, include_reserved=True))


def categorical_frame(dataset: Dataset, columns: List[str]) -> pd.DataFrame:
    """Stringified categorical values as a DataFrame, nulls as NA."""
    frame = pd.DataFrame.from_records(
        [{column: row.get(column) for column in columns} for row in dataset],
        columns=list(columns),
    )
    return frame.apply(lambda series: series.map(lambda v: pd.NA if is_null(v) else stringify(v)))
