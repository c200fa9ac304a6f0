"""
Core data models for the clustering workbench.

This module defines the primary data structures exchanged with the
collaborating UI/file layer: column profiles, encoding and normalization
outcomes, clustering results and elbow reports.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, List, Union
from pydantic import BaseModel, Field, model_validator


class ColumnKind(str, Enum):
    """Kind of a dataset column as inferred from sampled values."""
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"


class EncodingMode(str, Enum):
    """Categorical encoding strategy."""
    LABEL = "label"
    ONE_HOT = "one_hot"


class NormalizationMode(str, Enum):
    """Numeric column scaling strategy."""
    MIN_MAX = "min_max"
    Z_SCORE = "z_score"


class ColumnProfile(BaseModel):
    """Inferred profile of a single column."""
    name: str = Field(..., min_length=1, description="Column name")
    kind: ColumnKind = Field(..., description="Inferred column kind")
    cardinality: Optional[int] = Field(default=None, ge=0, description="Distinct non-null values (categorical only)")
    sampled_values: int = Field(..., ge=0, description="Number of non-null values inspected")

    model_config = {
        "extra": "forbid",
        "frozen": True
    }


class ColumnTypes(BaseModel):
    """Disjoint numeric and categorical column lists for a dataset snapshot."""
    numeric: List[str] = Field(default_factory=list, description="Numeric column names in appearance order")
    categorical: List[str] = Field(default_factory=list, description="Categorical column names in appearance order")
    profiles: List[ColumnProfile] = Field(default_factory=list, description="Per-column profiles")

    model_config = {
        "extra": "forbid"
    }

    @model_validator(mode='after')
    def validate_disjoint(self):
        overlap = set(self.numeric) & set(self.categorical)
        if overlap:
            raise ValueError(f"Columns cannot be both numeric and categorical: {sorted(overlap)}")
        return self


class ExcludedColumn(BaseModel):
    """A categorical column dropped instead of being one-hot encoded."""
    name: str = Field(..., description="Excluded column name")
    cardinality: int = Field(..., ge=0, description="Distinct non-null values in the column")
    threshold: int = Field(..., ge=1, description="Cardinality threshold in effect")
    reason: str = Field(..., min_length=1, description="Human-readable exclusion reason")


class EncodingValidation(BaseModel):
    """
    Non-fatal quality assessment of a categorical encoding.

    Attributes:
        feature_count: Projected number of features after encoding
        row_count: Number of rows in the dataset
        sparsity_ratio: feature_count / row_count
        uniqueness: Distinct / non-null ratio per categorical column
        projected_exclusions: Columns one-hot encoding would exclude
        warnings: Human-readable warnings about the feature space
        exclusion_warnings: One warning per projected exclusion
        recommendations: Suggested actions, e.g. excluding near-unique columns
    """
    feature_count: int = Field(..., ge=0)
    row_count: int = Field(..., ge=0)
    sparsity_ratio: float = Field(..., ge=0.0)
    uniqueness: Dict[str, float] = Field(default_factory=dict)
    projected_exclusions: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    exclusion_warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class EncodingResult(BaseModel):
    """
    Result of categorical encoding.

    Attributes:
        dataset: Encoded copy of the dataset
        mode: Strategy that produced this result
        encoding_map: Per column, original value -> integer (label) or indicator column name (one-hot)
        new_columns: Indicator columns created by one-hot encoding
        excluded_columns: Columns dropped because of high cardinality
        warnings: Non-fatal warnings
        recommendations: Non-fatal recommendations
    """
    dataset: List[Dict[str, Any]]
    mode: EncodingMode
    encoding_map: Dict[str, Dict[str, Union[int, str]]] = Field(default_factory=dict)
    new_columns: List[str] = Field(default_factory=list)
    excluded_columns: List[ExcludedColumn] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    @property
    def feature_columns(self) -> List[str]:
        """Columns carrying encoded categorical features."""
        if self.mode == EncodingMode.ONE_HOT:
            return list(self.new_columns)
        return list(self.encoding_map.keys())


class ColumnStats(BaseModel):
    """Statistics of a numeric column computed before it was rewritten."""
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    std: Optional[float] = None
    degenerate: bool = Field(default=False, description="Column was constant and mapped to 0")
    non_finite_count: int = Field(default=0, ge=0, description="Cells coerced to 0.0")


class NormalizationResult(BaseModel):
    """Result of numeric normalization."""
    dataset: List[Dict[str, Any]]
    mode: NormalizationMode
    column_stats: Dict[str, ColumnStats] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)


class ClusteringResult(BaseModel):
    """
    Result of a K-Means clustering run released to the caller.

    Attributes:
        k: Number of clusters
        assignments: Cluster index per row, each in [0, k)
        centroids: Exactly k centroids of equal dimensionality
        cluster_sizes: Row count per cluster; sums to the row count, no zeros
        wcss: Within-cluster sum of squares
        davies_bouldin_index: Davies-Bouldin Index (0 when k <= 1)
        data: Copies of the input rows with a `cluster` field
        metrics: Additional quality metrics and run diagnostics
    """
    k: int = Field(..., ge=1)
    assignments: List[int]
    centroids: List[List[float]]
    cluster_sizes: List[int]
    wcss: float = Field(..., ge=0.0)
    davies_bouldin_index: float = Field(..., ge=0.0)
    data: List[Dict[str, Any]] = Field(default_factory=list)
    metrics: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode='after')
    def validate_structure(self):
        if len(self.centroids) != self.k:
            raise ValueError(f"Expected {self.k} centroids, got {len(self.centroids)}")
        if len({len(c) for c in self.centroids}) > 1:
            raise ValueError("Centroids must share the same dimensionality")
        if len(self.cluster_sizes) != self.k:
            raise ValueError(f"Expected {self.k} cluster sizes, got {len(self.cluster_sizes)}")
        if sum(self.cluster_sizes) != len(self.assignments):
            raise ValueError("Cluster sizes must sum to the number of assignments")
        if any(size == 0 for size in self.cluster_sizes):
            raise ValueError("Clustering result cannot contain an empty cluster")
        if any(not 0 <= a < self.k for a in self.assignments):
            raise ValueError("Cluster assignments must lie in [0, k)")
        return self


class ElbowReport(BaseModel):
    """
    Elbow-method sweep over caller-supplied k values.

    Attributes:
        k_values: Sorted, deduplicated k values
        wcss: WCSS per k
        dbi: Davies-Bouldin Index per k
        elbow_k: k at the WCSS elbow point, None for fewer than 3 k values
        dbi_optimal_k: k with the smallest strictly positive DBI
        estimated_k_values: k values whose entries came from the fallback policy
        warnings: Non-fatal warnings raised during the sweep
        created_at: When this report was built
    """
    k_values: List[int]
    wcss: List[float]
    dbi: List[float]
    elbow_k: Optional[int] = None
    dbi_optimal_k: Optional[int] = None
    estimated_k_values: List[int] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode='after')
    def validate_lengths(self):
        if not len(self.k_values) == len(self.wcss) == len(self.dbi):
            raise ValueError("k_values, wcss and dbi must have the same length")
        return self


class ClusterExperiment(BaseModel):
    """A named clustering experiment with a fixed k."""
    name: str = Field(..., min_length=1)
    k: int = Field(..., ge=1)


class ExperimentResult(BaseModel):
    """Outcome of one experiment in a batch; exactly one of result/error is set."""
    name: str
    k: int
    result: Optional[ClusteringResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


class PreprocessResult(BaseModel):
    """Outcome of analyze -> encode -> normalize in a single call."""
    dataset: List[Dict[str, Any]]
    column_types: ColumnTypes
    encoding: EncodingResult
    normalization: NormalizationResult
    feature_columns: List[str]
    warnings: List[str] = Field(default_factory=list)
