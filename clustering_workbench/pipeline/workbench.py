"""
Main entry point of the clustering workbench engine.

This module implements the ClusteringWorkbench class that exposes the
engine's operations to the UI/file-parsing layer:

1. ``analyze``: infer numeric and categorical columns
2. ``encode``: label or smart one-hot encoding of categorical columns
3. ``normalize``: min-max or z-score scaling of numeric columns
4. ``cluster``: multi-restart K-Means for a single k
5. ``elbow``: WCSS/DBI sweep over explicit k values with recommendations
6. ``preprocess`` and ``run_experiments``: batch conveniences over the above

Execution is synchronous. An optional progress callback is invoked at phase
boundaries so a UI layer can repaint between long-running steps.
"""

import logging
from typing import Callable, Dict, Any, Iterable, List, Optional, Sequence

import numpy as np
from pydantic import ValidationError as PydanticValidationError

from ..core.config import WorkbenchConfig
from ..core.data_models import (
    ClusterExperiment, ClusteringResult, ColumnTypes, ElbowReport, EncodingMode,
    EncodingResult, ExperimentResult, NormalizationMode, NormalizationResult, PreprocessResult,
)
from ..core.dataset import CLUSTER_COLUMN, Dataset
from ..core.exceptions import ComputationError, MLflowIntegrationError, ValidationError, WorkbenchError
from ..clustering.elbow_analyzer import ElbowAnalyzer
from ..clustering.kmeans_runner import KMeansRunner
from ..clustering.metrics import cluster_sizes, davies_bouldin_index, quality_metrics
from ..mlflow_integration.logging_utils import PipelineLogger
from ..preprocessing import encoders, normalizer
from ..preprocessing.column_analyzer import analyze_columns
from ..preprocessing.feature_extractor import FeatureMatrix, extract_features


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class ClusteringWorkbench:
    """
    Facade over the preprocessing and clustering components.

    Every operation is pure with respect to its inputs: datasets are copied,
    never mutated, and each call derives its random state from explicit seeds
    in the configuration.
    """

    def __init__(self,
                 config: Optional[WorkbenchConfig] = None,
                 progress_callback: Optional[ProgressCallback] = None,
                 runner: Optional[KMeansRunner] = None):
        """
        Initialize the workbench.

        Args:
            config: Workbench configuration, defaults to WorkbenchConfig()
            progress_callback: Called with a phase name at each phase boundary
            runner: K-Means runner, defaults to one built from the configuration
        """
        self.config = config or WorkbenchConfig()
        self.progress_callback = progress_callback
        self.runner = runner or KMeansRunner(
            max_iterations=self.config.kmeans_max_iterations,
            attempts=self.config.kmeans_attempts,
            base_seed=self.config.base_seed,
            seed_step=self.config.seed_step,
            init=self.config.kmeans_init,
        )
        self.elbow_analyzer = ElbowAnalyzer(runner=self.runner, config=self.config,
                                            progress_callback=self._phase)
        self.tracker = PipelineLogger(
            "ClusteringWorkbench",
            log_level=self.config.log_level,
            enable_mlflow=self.config.enable_mlflow_logging,
        )

        logger.info("ClusteringWorkbench initialized with params: %s", self.config.get_mlflow_params())

    def analyze(self, dataset: Dataset) -> ColumnTypes:
        """Infer numeric and categorical columns from sampled values."""
        self._require_rows(dataset, "analyze")
        self._phase("analyze")
        return analyze_columns(dataset, self.config.column_sample_size)

    def encode(self,
               dataset: Dataset,
               categorical_columns: Sequence[str],
               mode: Optional[EncodingMode] = None,
               numeric_columns: Optional[Sequence[str]] = None) -> EncodingResult:
        """
        Encode categorical columns.

        Args:
            dataset: Rows to encode
            categorical_columns: Columns to encode
            mode: Encoding strategy, defaults to the configured one
            numeric_columns: Numeric columns, used for the sparsity projection

        Returns:
            EncodingResult with encoded rows, encoding map, exclusions and warnings
        """
        self._require_rows(dataset, "encode")
        self._phase("encode")
        result = encoders.encode(dataset, categorical_columns, mode, self.config, numeric_columns)
        self._track({"encoding_mode": result.mode.value,
                     "excluded_columns": len(result.excluded_columns)}, {}, "encode")
        return result

    def normalize(self,
                  dataset: Dataset,
                  numeric_columns: Sequence[str],
                  mode: Optional[NormalizationMode] = None) -> NormalizationResult:
        """Scale numeric columns with the selected or configured strategy."""
        self._require_rows(dataset, "normalize")
        self._phase("normalize")
        return normalizer.normalize(dataset, numeric_columns, mode or self.config.normalization_mode)

    def preprocess(self,
                   dataset: Dataset,
                   encoding_mode: Optional[EncodingMode] = None,
                   normalization_mode: Optional[NormalizationMode] = None) -> PreprocessResult:
        """
        Analyze, encode and normalize in one call.

        Encoded categorical features are normalized together with the
        numeric columns so that no feature dominates by scale.

        Raises:
            ValidationError: If the dataset is empty or yields no usable columns
        """
        column_types = self.analyze(dataset)
        encoding = self.encode(dataset, column_types.categorical, encoding_mode,
                               numeric_columns=column_types.numeric)

        feature_columns = list(column_types.numeric) + encoding.feature_columns
        if not feature_columns:
            raise ValidationError("Dataset has no usable numeric or categorical columns",
                                  details={"operation": "preprocess"})

        normalization = self.normalize(encoding.dataset, feature_columns, normalization_mode)
        return PreprocessResult(
            dataset=normalization.dataset,
            column_types=column_types,
            encoding=encoding,
            normalization=normalization,
            feature_columns=feature_columns,
            warnings=encoding.warnings + normalization.warnings,
        )

    def cluster(self, dataset: Dataset, columns: Sequence[str], k: int) -> ClusteringResult:
        """
        Run multi-restart K-Means for a single k.

        Args:
            dataset: Rows to cluster, usually normalized
            columns: Feature columns, in order
            k: Number of clusters

        Returns:
            ClusteringResult with labeled row copies

        Raises:
            ValidationError: For empty input, no columns, k outside [1, n] or
                fewer distinct feature vectors than k
            ComputationError: If no valid clustering could be produced
        """
        features = self._features(dataset, columns, "cluster")
        n = features.n_rows
        if not isinstance(k, (int, np.integer)) or isinstance(k, bool) or not 1 <= k <= n:
            raise ValidationError(f"Number of clusters must be between 1 and {n}",
                                  details={"k": k, "row_count": n})

        distinct = len(np.unique(features.values, axis=0))
        if distinct < k:
            raise ValidationError(
                f"Only {distinct} distinct feature vectors are available for {k} clusters",
                details={"k": k, "distinct_vectors": distinct}
            )

        with self.tracker.time_operation(f"cluster k={k}") as timed:
            self._phase("cluster")
            raw = self.runner.run(features.values, int(k))

            self._phase("report")
            result = self._build_result(dataset, features, raw, int(k))

        result.metrics["duration_seconds"] = timed.duration
        self._track({"k": k, "columns": len(features.columns)},
                    {"wcss": result.wcss, "davies_bouldin_index": result.davies_bouldin_index,
                     "silhouette_score": result.metrics.get("silhouette_score"),
                     "duration_seconds": timed.duration},
                    f"cluster_k{k}")
        return result

    def elbow(self, dataset: Dataset, columns: Sequence[str], k_values: Iterable[int]) -> ElbowReport:
        """
        Sweep k values and report WCSS, DBI and recommended k.

        Failures for an individual k are estimated rather than raised.

        Raises:
            ValidationError: For empty input, no columns or k values outside [1, n]
        """
        features = self._features(dataset, columns, "elbow")
        with self.tracker.time_operation("elbow sweep") as timed:
            self._phase("cluster")
            report = self.elbow_analyzer.analyze(features.values, k_values)

        self._phase("report")
        for k, wcss, dbi in zip(report.k_values, report.wcss, report.dbi):
            self._track({}, {"elbow_wcss": wcss, "elbow_dbi": dbi}, "", step=k)
        self._track({"k_values": report.k_values},
                    {"duration_seconds": timed.duration, "elbow_k": report.elbow_k,
                     "dbi_optimal_k": report.dbi_optimal_k},
                    "elbow")
        logger.info("Elbow analysis: elbow_k=%s, dbi_optimal_k=%s, estimated=%s",
                    report.elbow_k, report.dbi_optimal_k, report.estimated_k_values)
        return report

    def run_experiments(self,
                        dataset: Dataset,
                        columns: Sequence[str],
                        experiments: Sequence[ClusterExperiment]) -> List[ExperimentResult]:
        """
        Run a batch of named clustering experiments.

        A failing experiment records its error and the batch continues.
        """
        results: List[ExperimentResult] = []
        for experiment in experiments:
            self._phase(f"experiment:{experiment.name}")
            try:
                result = self.cluster(dataset, columns, experiment.k)
                results.append(ExperimentResult(name=experiment.name, k=experiment.k, result=result))
            except WorkbenchError as e:
                logger.warning("Experiment '%s' (k=%d) failed: %s", experiment.name, experiment.k, str(e))
                results.append(ExperimentResult(name=experiment.name, k=experiment.k, error=str(e)))

        logger.info("Completed %d experiments, %d succeeded",
                    len(results), sum(1 for r in results if r.succeeded))
        return results

    def _build_result(self, dataset: Dataset, features: FeatureMatrix, raw, k: int) -> ClusteringResult:
        sizes = cluster_sizes(raw.assignments, k)
        if any(size == 0 for size in sizes):
            raise ComputationError(
                f"Repaired clustering for k={k} still contains an empty cluster",
                details={"k": k, "cluster_sizes": sizes}
            )

        assignments = raw.assignments.tolist()
        metrics: Dict[str, Any] = quality_metrics(features.values, raw.assignments)
        metrics.update({
            'attempt': raw.attempt,
            'seed': raw.seed,
            'accepted_attempts': raw.accepted_attempts,
            'rejected_attempts': raw.rejected_attempts,
            'repairs': list(raw.repairs),
            'coerced_values': features.coerced_count,
        })

        try:
            return ClusteringResult(
                k=k,
                assignments=assignments,
                centroids=raw.centroids.tolist(),
                cluster_sizes=sizes,
                wcss=raw.wcss,
                davies_bouldin_index=davies_bouldin_index(
                    features.values, raw.assignments, raw.centroids, self.config.centroid_tolerance),
                data=[{**row, CLUSTER_COLUMN: label} for row, label in zip(dataset, assignments)],
                metrics=metrics,
            )
        except PydanticValidationError as e:
            raise ComputationError(
                f"Clustering for k={k} produced a structurally invalid result",
                details={"k": k, "errors": e.error_count()}
            ) from e

    def _features(self, dataset: Dataset, columns: Sequence[str], operation: str) -> FeatureMatrix:
        self._require_rows(dataset, operation)
        if not columns:
            raise ValidationError("No numeric columns available for clustering",
                                  details={"operation": operation})
        return extract_features(dataset, columns)

    @staticmethod
    def _require_rows(dataset: Dataset, operation: str) -> None:
        if not dataset:
            raise ValidationError("Dataset cannot be empty", details={"operation": operation})

    def _phase(self, name: str) -> None:
        logger.debug("Entering phase %s", name)
        if self.progress_callback:
            self.progress_callback(name)

    def _track(self, params: Dict[str, Any], metrics: Dict[str, Any], prefix: str,
               step: Optional[int] = None) -> None:
        try:
            self.tracker.set_tags({"experiment_name": self.config.experiment_name})
            if params:
                self.tracker.log_parameters(params, prefix=prefix)
            if metrics:
                self.tracker.log_metrics(metrics, step=step, prefix=prefix)
        except MLflowIntegrationError as e:
            logger.warning("Tracking failed, continuing without it: %s", str(e))


def encode(dataset: Dataset, categorical_columns: Sequence[str],
           mode: Optional[EncodingMode] = None,
           config: Optional[WorkbenchConfig] = None) -> EncodingResult:
    """Encode categorical columns with a one-off workbench."""
    return ClusteringWorkbench(config).encode(dataset, categorical_columns, mode)


def normalize(dataset: Dataset, numeric_columns: Sequence[str],
              mode: Optional[NormalizationMode] = None,
              config: Optional[WorkbenchConfig] = None) -> NormalizationResult:
    """Normalize numeric columns with a one-off workbench."""
    return ClusteringWorkbench(config).normalize(dataset, numeric_columns, mode)


def cluster(dataset: Dataset, columns: Sequence[str], k: int,
            config: Optional[WorkbenchConfig] = None) -> ClusteringResult:
    """Cluster a dataset with a one-off workbench."""
    return ClusteringWorkbench(config).cluster(dataset, columns, k)


def elbow(dataset: Dataset, columns: Sequence[str], k_values: Iterable[int],
          config: Optional[WorkbenchConfig] = None) -> ElbowReport:
    """Run an elbow analysis with a one-off workbench."""
    return ClusteringWorkbench(config).elbow(dataset, columns, k_values)
