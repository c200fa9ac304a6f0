"""
Clustering Workbench

A clustering engine for tabular datasets: column type inference, categorical
encoding, numeric normalization, multi-restart K-Means with result repair,
WCSS and Davies-Bouldin metrics, and elbow-method analysis.
"""

__version__ = "1.0.0"

from .core.config import WorkbenchConfig
from .core.data_models import (
    ClusterExperiment,
    ClusteringResult,
    ColumnTypes,
    ElbowReport,
    EncodingMode,
    EncodingResult,
    NormalizationMode,
    NormalizationResult,
)
from .core.exceptions import (
    WorkbenchError,
    ValidationError,
    ComputationError,
)
from .pipeline.workbench import ClusteringWorkbench, cluster, elbow, encode, normalize

__all__ = [
    "WorkbenchConfig",
    "ClusterExperiment",
    "ClusteringResult",
    "ColumnTypes",
    "ElbowReport",
    "EncodingMode",
    "EncodingResult",
    "NormalizationMode",
    "NormalizationResult",
    "WorkbenchError",
    "ValidationError",
    "ComputationError",
    "ClusteringWorkbench",
    "cluster",
    "elbow",
    "encode",
    "normalize",
]
