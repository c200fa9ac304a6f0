"""
Non-fatal validation of categorical encodings.

Projects the post-encoding feature count, computes the sparsity ratio
(feature count / row count) and per-column uniqueness, and turns them into
warnings and recommendations. Nothing here blocks execution.
"""

import logging
from typing import Optional, Sequence

from ..core.config import WorkbenchConfig
from ..core.data_models import EncodingMode, EncodingValidation
from ..core.dataset import Dataset, categorical_frame


logger = logging.getLogger(__name__)


def validate_encoding(dataset: Dataset,
                      categorical_columns: Sequence[str],
                      mode: EncodingMode,
                      config: Optional[WorkbenchConfig] = None,
                      numeric_columns: Optional[Sequence[str]] = None) -> EncodingValidation:
    """
    Assess whether an encoding leaves a feature space fit for clustering.

    Args:
        dataset: Rows before encoding
        categorical_columns: Columns about to be encoded
        mode: Encoding strategy about to be applied
        config: Workbench configuration providing the thresholds
        numeric_columns: Numeric columns that will sit beside the encoded ones

    Returns:
        EncodingValidation with sparsity, uniqueness, warnings and recommendations
    """
    config = config or WorkbenchConfig()
    mode = EncodingMode(mode)
    row_count = len(dataset)
    columns = list(categorical_columns)

    uniqueness = {}
    cardinality = {}
    if columns and row_count:
        frame = categorical_frame(dataset, columns)
        for column in columns:
            non_null = frame[column].dropna()
            cardinality[column] = int(non_null.nunique())
            uniqueness[column] = float(cardinality[column] / len(non_null)) if len(non_null) else 0.0

    feature_count = len(numeric_columns or [])
    projected_exclusions, exclusion_warnings = [], []
    for column in columns:
        distinct = cardinality.get(column, 0)
        if mode == EncodingMode.LABEL:
            feature_count += 1
        elif distinct > config.one_hot_max_cardinality:
            projected_exclusions.append(column)
            exclusion_warnings.append(
                f"Column '{column}' ({distinct} distinct values) exceeds the one-hot threshold "
                f"of {config.one_hot_max_cardinality} and will be excluded"
            )
        else:
            feature_count += distinct

    sparsity_ratio = feature_count / row_count if row_count else 0.0
    warnings = []
    if sparsity_ratio > config.max_sparsity_ratio:
        warnings.append(
            f"Encoded feature count ({feature_count}) is {sparsity_ratio:.0%} of the row count "
            f"({row_count}); clusters may be dominated by sparsity"
        )

    recommendations = []
    for column, ratio in uniqueness.items():
        if ratio > config.high_uniqueness_ratio and cardinality[column] > 1:
            recommendations.append(
                f"Column '{column}' is too unique for clustering ({ratio:.0%} distinct values); "
                f"consider excluding it"
            )

    for message in warnings + exclusion_warnings:
        logger.warning(message)
    for message in recommendations:
        logger.info(message)

    return EncodingValidation(
        feature_count=feature_count,
        row_count=row_count,
        sparsity_ratio=sparsity_ratio,
        uniqueness=uniqueness,
        projected_exclusions=projected_exclusions,
        warnings=warnings,
        exclusion_warnings=exclusion_warnings,
        recommendations=recommendations,
    )
