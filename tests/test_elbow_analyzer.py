"""
Unit tests for the elbow analyzer
"""

import numpy as np
import pytest

from clustering_workbench.clustering.elbow_analyzer import (
    ElbowAnalyzer, find_dbi_optimum, find_elbow_point,
)
from clustering_workbench.clustering.kmeans_runner import KMeansRunner
from clustering_workbench.clustering.metrics import total_variance
from clustering_workbench.core.config import WorkbenchConfig
from clustering_workbench.core.exceptions import ComputationError, ValidationError


class FailingRunner:
    """Delegates to a real runner but fails for selected k values"""

    def __init__(self, failing_k):
        self.failing_k = set(failing_k)
        self.runner = KMeansRunner()

    def run(self, features, k, attempts=None):
        if k in self.failing_k:
            raise ComputationError(f"All attempts for k={k} were rejected", details={"k": k})
        return self.runner.run(features, k, attempts)


class TestRecommendations:
    """Test cases for elbow point and DBI optimum selection"""

    def test_elbow_needs_three_values(self):
        assert find_elbow_point([1, 2], [10.0, 5.0]) is None

    def test_elbow_point(self):
        assert find_elbow_point([1, 2, 3, 4], [100.0, 20.0, 15.0, 12.0]) == 2

    def test_elbow_tie_break(self):
        k_values, wcss = [1, 2, 3, 4], [10.0, 6.0, 3.0, 1.0]

        assert find_elbow_point(k_values, wcss, "smallest_k") == 2
        assert find_elbow_point(k_values, wcss, "largest_k") == 3

    def test_dbi_optimum_ignores_zero(self):
        assert find_dbi_optimum([1, 2, 3, 4], [0.0, 0.5, 0.3, 0.4]) == 3

    def test_dbi_optimum_tie_break(self):
        k_values, dbi = [1, 2, 3, 4], [0.0, 0.5, 0.3, 0.3]

        assert find_dbi_optimum(k_values, dbi, "smallest_k") == 3
        assert find_dbi_optimum(k_values, dbi, "largest_k") == 4

    def test_dbi_optimum_none_when_all_zero(self):
        assert find_dbi_optimum([1], [0.0]) is None


class TestElbowAnalyzer:
    """Test cases for ElbowAnalyzer.analyze"""

    def test_blobs_elbow_at_three(self, blob_features):
        report = ElbowAnalyzer().analyze(blob_features, range(1, 7))

        assert report.k_values == [1, 2, 3, 4, 5, 6]
        assert report.elbow_k == 3
        assert report.dbi_optimal_k == 3
        assert report.estimated_k_values == []
        assert report.warnings == []

    def test_wcss_non_increasing(self, blob_features):
        report = ElbowAnalyzer().analyze(blob_features, [1, 2, 3, 4, 5])

        for previous, current in zip(report.wcss, report.wcss[1:]):
            assert current <= previous + 1e-9
        assert report.elbow_k == 3

    def test_k_one_uses_total_variance(self, blob_features):
        report = ElbowAnalyzer().analyze(blob_features, [1])

        assert report.wcss[0] == pytest.approx(total_variance(blob_features))
        assert report.dbi == [0.0]
        assert report.elbow_k is None
        assert report.dbi_optimal_k is None

    def test_sorted_and_deduplicated(self, blob_features):
        report = ElbowAnalyzer().analyze(blob_features, [4, 2, 2, 1])

        assert report.k_values == [1, 2, 4]
        assert len(report.wcss) == len(report.dbi) == 3

    def test_failed_k_is_estimated(self, blob_features):
        analyzer = ElbowAnalyzer(runner=FailingRunner({3}))

        report = analyzer.analyze(blob_features, [1, 2, 3, 4])

        assert report.estimated_k_values == [3]
        assert len(report.warnings) == 1
        assert "k=3" in report.warnings[0]
        assert 0.6 * report.wcss[1] <= report.wcss[2] <= 0.8 * report.wcss[1]
        assert report.dbi[2] >= 0.1
        assert 1.05 * report.dbi[1] <= report.dbi[2] <= 1.15 * report.dbi[1]

    def test_failed_first_k_uses_total_variance(self, blob_features):
        analyzer = ElbowAnalyzer(runner=FailingRunner({2}))

        report = analyzer.analyze(blob_features, [2, 3])

        assert report.wcss[0] == pytest.approx(total_variance(blob_features) / 2)
        assert report.dbi[0] == 1.0

    def test_fallback_is_reproducible(self, blob_features):
        first = ElbowAnalyzer(runner=FailingRunner({3})).analyze(blob_features, [1, 2, 3])
        second = ElbowAnalyzer(runner=FailingRunner({3})).analyze(blob_features, [1, 2, 3])

        assert first.wcss == second.wcss
        assert first.dbi == second.dbi

    def test_empty_features_raise(self):
        with pytest.raises(ValidationError):
            ElbowAnalyzer().analyze(np.empty((0, 2)), [1, 2])

    def test_no_k_values_raise(self, blob_features):
        with pytest.raises(ValidationError):
            ElbowAnalyzer().analyze(blob_features, [])

    def test_out_of_range_k_raise(self, blob_features):
        with pytest.raises(ValidationError) as exc_info:
            ElbowAnalyzer().analyze(blob_features, [0, 2, 200])

        assert exc_info.value.details["invalid_k_values"] == [0, 200]

    @pytest.mark.parametrize("k_values, invalid", [
        ([1, 2.7, 3], [2.7]),
        ([1, "x"], ["x"]),
        ([True, 2], [True]),
    ])
    def test_non_integer_k_raise(self, blob_features, k_values, invalid):
        with pytest.raises(ValidationError) as exc_info:
            ElbowAnalyzer().analyze(blob_features, k_values)

        assert exc_info.value.details["invalid_k_values"] == invalid

    def test_numpy_integer_k_accepted(self, blob_features):
        report = ElbowAnalyzer().analyze(blob_features, np.arange(1, 4))

        assert report.k_values == [1, 2, 3]

    def test_runner_built_from_config(self):
        config = WorkbenchConfig(kmeans_attempts=3, base_seed=7, kmeans_init="random",
                                 enable_mlflow_logging=False)

        analyzer = ElbowAnalyzer(config=config)

        assert analyzer.runner.attempts == 3
        assert analyzer.runner.base_seed == 7
        assert analyzer.runner.optimizer.keywords == {"init": "random"}
