"""
Core module providing shared infrastructure for the clustering workbench.

**Configuration Management:**
- `WorkbenchConfig`: Pydantic-based configuration with validation

**Data Models:**
- Pydantic models for column profiles, encoding and normalization outcomes,
  clustering results and elbow reports, validated on construction

**Exception Hierarchy:**
- `ValidationError` for bad input, raised before computation starts
- `ComputationError` when clustering cannot produce a valid result

**Usage Example:**
```python
from clustering_workbench.core import WorkbenchConfig, EncodingMode

config = WorkbenchConfig(encoding_mode=EncodingMode.ONE_HOT, one_hot_max_cardinality=50)
```
"""

from .config import WorkbenchConfig
from .data_models import (
    ColumnKind,
    EncodingMode,
    NormalizationMode,
    ColumnProfile,
    ColumnTypes,
    ExcludedColumn,
    EncodingValidation,
    EncodingResult,
    ColumnStats,
    NormalizationResult,
    ClusteringResult,
    ElbowReport,
    ClusterExperiment,
    ExperimentResult,
    PreprocessResult,
)
from .exceptions import (
    WorkbenchError,
    ConfigurationError,
    ValidationError,
    ComputationError,
    MLflowIntegrationError,
)

__all__ = [
    "WorkbenchConfig",
    "ColumnKind",
    "EncodingMode",
    "NormalizationMode",
    "ColumnProfile",
    "ColumnTypes",
    "ExcludedColumn",
    "EncodingValidation",
    "EncodingResult",
    "ColumnStats",
    "NormalizationResult",
    "ClusteringResult",
    "ElbowReport",
    "ClusterExperiment",
    "ExperimentResult",
    "PreprocessResult",
    "WorkbenchError",
    "ConfigurationError",
    "ValidationError",
    "ComputationError",
    "MLflowIntegrationError",
]
