"""
Column type inference for raw datasets.

A column is numeric iff every sampled non-null value parses to a finite
number; otherwise it is categorical. Columns with no non-null sampled value
are skipped entirely.
"""

import logging

from ..core.data_models import ColumnKind, ColumnProfile, ColumnTypes
from ..core.dataset import Dataset, column_names, is_null, parse_number, stringify


logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 100


def analyze_columns(dataset: Dataset, sample_size: int = DEFAULT_SAMPLE_SIZE) -> ColumnTypes:
    """
    Classify every non-reserved column as numeric or categorical.

    Args:
        dataset: Rows to analyze
        sample_size: Number of leading rows inspected per column

    Returns:
        ColumnTypes with disjoint numeric/categorical lists in appearance order
    """
    numeric, categorical, profiles = [], [], []
    sample_rows = dataset[:sample_size]

    for column in column_names(dataset):
        sample = [row[column] for row in sample_rows
                  if column in row and not is_null(row[column])]

        if not sample:
            logger.info("Skipping column '%s': no non-null values in first %d rows",
                        column, len(sample_rows))
            continue

        if all(parse_number(value) is not None for value in sample):
            numeric.append(column)
            profiles.append(ColumnProfile(name=column, kind=ColumnKind.NUMERIC,
                                          sampled_values=len(sample)))
        else:
            cardinality = len({stringify(row[column]) for row in dataset
                               if column in row and not is_null(row[column])})
            categorical.append(column)
            profiles.append(ColumnProfile(name=column, kind=ColumnKind.CATEGORICAL,
                                          cardinality=cardinality, sampled_values=len(sample)))

    logger.info("Column analysis found %d numeric and %d categorical columns",
                len(numeric), len(categorical))
    return ColumnTypes(numeric=numeric, categorical=categorical, profiles=profiles)
