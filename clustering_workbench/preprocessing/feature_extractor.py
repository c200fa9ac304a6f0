"""
Projection of dataset columns into a dense float feature matrix.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from ..core.dataset import Dataset, parse_number


logger = logging.getLogger(__name__)


@dataclass
class FeatureMatrix:
    """Dense features, one row per dataset row, columns in the requested order."""

    values: np.ndarray
    columns: List[str] = field(default_factory=list)
    coerced_count: int = 0

    @property
    def n_rows(self) -> int:
        return int(self.values.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.values.shape[1])


def extract_features(dataset: Dataset, columns: Sequence[str]) -> FeatureMatrix:
    """
    Build the feature matrix for the given columns.

    Values that do not coerce to a finite number become 0.0; rows are never
    dropped so the matrix stays aligned with the dataset and later cluster
    assignments.
    """
    columns = list(columns)
    values = np.zeros((len(dataset), len(columns)), dtype=float)
    coerced = 0

    for i, row in enumerate(dataset):
        for j, column in enumerate(columns):
            number = parse_number(row.get(column))
            if number is None:
                coerced += 1
            else:
                values[i, j] = number

    if coerced:
        logger.warning("Coerced %d non-finite feature values to 0.0 across %d rows",
                       coerced, len(dataset))
    logger.debug("Extracted feature matrix of shape %s", values.shape)
    return FeatureMatrix(values=values, columns=columns, coerced_count=coerced)
