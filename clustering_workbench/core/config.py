"""
Unified configuration management for the clustering workbench.

This module provides the WorkbenchConfig class that manages all configurable
parameters with validation using Pydantic BaseModel for the entire engine.
"""

from typing import Dict, Any, Literal, Tuple
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator, model_validator
import warnings

from .data_models import EncodingMode, NormalizationMode
from .exceptions import ConfigurationError


class WorkbenchConfig(BaseModel):
    """
    Unified configuration class for the clustering workbench engine.

    **Configuration Categories:**

    1. **Column analysis** (`column_sample_size`):
       - Number of leading rows sampled when inferring column kinds

    2. **Categorical encoding**:
       - `encoding_mode`: label or one-hot strategy
       - `one_hot_max_cardinality`: columns above this cardinality are
         excluded from one-hot encoding instead of being expanded
       - `max_sparsity_ratio` / `high_uniqueness_ratio`: thresholds for the
         non-fatal encoding validation warnings

    3. **Normalization** (`normalization_mode`): min-max or z-score

    4. **K-Means runner**:
       - `kmeans_max_iterations`: iteration cap per attempt
       - `kmeans_init`: k-means++ or random initialization per attempt
       - `kmeans_attempts`: restart attempts per k
       - `base_seed` / `seed_step`: attempt seed is base_seed + attempt * seed_step
       - `centroid_tolerance`: centroid pairs closer than this are skipped by DBI

    5. **Elbow fallback policy**:
       - `fallback_wcss_shrink` / `fallback_dbi_growth`: bounds of the random
         factors applied to the previous entry when a k fails
       - `fallback_dbi_floor`, `fallback_seed`
       - `recommendation_tie_break`: which k wins when two candidates score equally

    6. **Tracking**: `log_level`, `enable_mlflow_logging`, `experiment_name`

    **Usage Examples:**

    ```python
    config = WorkbenchConfig()

    config = WorkbenchConfig(
        encoding_mode=EncodingMode.ONE_HOT,
        one_hot_max_cardinality=50,
        kmeans_attempts=5,
    )

    config = WorkbenchConfig.from_dict({"normalization_mode": "z_score"})
    ```
    """

    # Column analysis
    column_sample_size: int = Field(
        default=100,
        gt=0,
        description="Number of leading rows sampled per column for type inference"
    )

    # Categorical encoding
    encoding_mode: EncodingMode = Field(
        default=EncodingMode.LABEL,
        description="Categorical encoding strategy"
    )

    one_hot_max_cardinality: int = Field(
        default=10,
        ge=1,
        description="Columns with more distinct values are excluded from one-hot encoding"
    )

    max_sparsity_ratio: float = Field(
        default=0.5,
        gt=0.0,
        description="Feature count / row count above which a sparsity warning is emitted"
    )

    high_uniqueness_ratio: float = Field(
        default=0.9,
        gt=0.0,
        le=1.0,
        description="Distinct / non-null ratio above which a column is flagged as too unique"
    )

    # Normalization
    normalization_mode: NormalizationMode = Field(
        default=NormalizationMode.MIN_MAX,
        description="Numeric column scaling strategy"
    )

    # K-Means runner
    kmeans_max_iterations: int = Field(
        default=100,
        gt=0,
        description="Maximum Lloyd iterations per attempt"
    )

    kmeans_init: Literal["k-means++", "random"] = Field(
        default="k-means++",
        description="Centroid initialization of each restart attempt"
    )

    kmeans_attempts: int = Field(
        default=10,
        gt=0,
        description="Number of restart attempts per k"
    )

    base_seed: int = Field(
        default=42,
        ge=0,
        description="Seed of the first restart attempt"
    )

    seed_step: int = Field(
        default=1000,
        gt=0,
        description="Seed increment between restart attempts"
    )

    centroid_tolerance: float = Field(
        default=1e-12,
        ge=0.0,
        description="Centroid distances at or below this value are treated as coincident"
    )

    # Elbow fallback policy
    fallback_wcss_shrink: Tuple[float, float] = Field(
        default=(0.6, 0.8),
        description="Bounds of the factor applied to the previous WCSS when a k fails"
    )

    fallback_dbi_growth: Tuple[float, float] = Field(
        default=(1.05, 1.15),
        description="Bounds of the factor applied to the previous DBI when a k fails"
    )

    fallback_dbi_floor: float = Field(
        default=0.1,
        ge=0.0,
        description="Minimum DBI reported for an estimated k"
    )

    fallback_seed: int = Field(
        default=42,
        ge=0,
        description="Seed of the generator drawing fallback factors"
    )

    recommendation_tie_break: Literal["smallest_k", "largest_k"] = Field(
        default="smallest_k",
        description="Which k wins when elbow or DBI candidates tie"
    )

    # Tracking
    log_level: str = Field(
        default="INFO",
        description="Logging level for the workbench"
    )

    enable_mlflow_logging: bool = Field(
        default=True,
        description="Log parameters and metrics to the active MLflow run, if any"
    )

    experiment_name: str = Field(
        default="clustering-workbench",
        min_length=1,
        description="Name used to tag tracked operations"
    )

    model_config = {
        "validate_assignment": True,
        "extra": "forbid"
    }

    @field_validator('fallback_wcss_shrink')
    @classmethod
    def validate_wcss_shrink(cls, v):
        """Validate WCSS shrink factor bounds."""
        low, high = v
        if not 0.0 < low <= high <= 1.0:
            raise ValueError("fallback_wcss_shrink must satisfy 0 < low <= high <= 1")
        return v

    @field_validator('fallback_dbi_growth')
    @classmethod
    def validate_dbi_growth(cls, v):
        """Validate DBI growth factor bounds."""
        low, high = v
        if not 1.0 <= low <= high:
            raise ValueError("fallback_dbi_growth must satisfy 1 <= low <= high")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @model_validator(mode='after')
    def validate_sample_size(self):
        """Warn about settings that are valid but likely unhelpful."""
        if self.column_sample_size < 10:
            warnings.warn("column_sample_size < 10 may misclassify sparse numeric columns")
        return self

    def check_parameter_compatibility(self):
        """Check for parameter combinations that may cause issues."""
        if self.kmeans_attempts == 1:
            warnings.warn("kmeans_attempts == 1 disables restarts and may return a poor local optimum")
        if self.one_hot_max_cardinality > 50:
            warnings.warn("one_hot_max_cardinality > 50 may produce very sparse feature matrices")
        if self.kmeans_max_iterations < 10:
            warnings.warn("kmeans_max_iterations < 10 may stop before assignments converge")

    def get_mlflow_params(self) -> Dict[str, Any]:
        """Get parameters suitable for MLflow logging."""
        return {
            'column_sample_size': self.column_sample_size,
            'encoding_mode': self.encoding_mode.value,
            'one_hot_max_cardinality': self.one_hot_max_cardinality,
            'normalization_mode': self.normalization_mode.value,
            'kmeans_max_iterations': self.kmeans_max_iterations,
            'kmeans_init': self.kmeans_init,
            'kmeans_attempts': self.kmeans_attempts,
            'base_seed': self.base_seed,
            'seed_step': self.seed_step,
            'recommendation_tie_break': self.recommendation_tie_break,
            'experiment_name': self.experiment_name,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'WorkbenchConfig':
        """Create WorkbenchConfig from dictionary."""
        try:
            return cls(**config_dict)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid workbench configuration: {e.error_count()} error(s)",
                details={"errors": [err['msg'] for err in e.errors()]}
            ) from e

    def model_post_init(self, __context) -> None:
        """Post-initialization validation and warnings."""
        self.check_parameter_compatibility()
