"""
Unit tests for the multi-restart K-Means runner
"""

import numpy as np
import pytest

from clustering_workbench.clustering.kmeans_runner import KMeansRunner, repair_clustering
from clustering_workbench.clustering.metrics import compute_wcss
from clustering_workbench.core.exceptions import ComputationError, ValidationError


class TestKMeansRunner:
    """Test cases for KMeansRunner.run"""

    def test_blobs_recovered(self, blob_features):
        raw = KMeansRunner().run(blob_features, 3)

        assert sorted(np.bincount(raw.assignments).tolist()) == [30, 30, 30]
        assert raw.centroids.shape == (3, 2)
        assert raw.repairs == []
        assert raw.wcss == pytest.approx(compute_wcss(blob_features, raw.assignments, raw.centroids))

    def test_attempt_seeds(self):
        runner = KMeansRunner(base_seed=42, seed_step=1000)

        assert [runner.attempt_seed(a) for a in range(3)] == [42, 1042, 2042]

    def test_deterministic(self, blob_features):
        first = KMeansRunner(init="random").run(blob_features, 4)
        second = KMeansRunner(init="random").run(blob_features, 4)

        np.testing.assert_array_equal(first.assignments, second.assignments)
        assert first.wcss == second.wcss

    def test_keeps_lowest_wcss_attempt(self):
        features = np.array([[0.0], [1.0], [10.0], [11.0]])
        seeds = []

        def optimizer(features, k, seed, max_iterations):
            seeds.append(seed)
            if seed == 1:
                return [0, 0, 1, 1], [[0.5], [10.5]]
            return [0, 1, 1, 1], [[0.0], [22.0 / 3]]

        raw = KMeansRunner(attempts=3, base_seed=0, seed_step=1, optimizer=optimizer).run(features, 2)

        assert seeds == [0, 1, 2]
        assert raw.attempt == 1
        assert raw.seed == 1
        assert raw.wcss == pytest.approx(1.0)
        assert raw.accepted_attempts == 3

    def test_rejects_empty_cluster_attempts(self):
        features = np.arange(6, dtype=float).reshape(-1, 1)

        def optimizer(features, k, seed, max_iterations):
            if seed == 0:
                return [0] * 6, [[2.5], [0.0]]
            return [0, 0, 0, 1, 1, 1], [[1.0], [4.0]]

        raw = KMeansRunner(attempts=2, base_seed=0, seed_step=1, optimizer=optimizer).run(features, 2)

        assert raw.attempt == 1
        assert raw.rejected_attempts == 1
        assert raw.accepted_attempts == 1

    def test_all_attempts_rejected_raises(self):
        features = np.arange(6, dtype=float).reshape(-1, 1)

        def optimizer(features, k, seed, max_iterations):
            return [0] * 6, [[2.5], [2.5]]

        with pytest.raises(ComputationError) as exc_info:
            KMeansRunner(attempts=4, optimizer=optimizer).run(features, 2)

        assert exc_info.value.details["attempts"] == 4
        assert len(exc_info.value.details["reasons"]) == 4

    def test_raising_optimizer_is_rejected(self):
        features = np.arange(6, dtype=float).reshape(-1, 1)

        def optimizer(features, k, seed, max_iterations):
            raise RuntimeError("boom")

        with pytest.raises(ComputationError):
            KMeansRunner(attempts=2, optimizer=optimizer).run(features, 2)

    def test_malformed_output_repaired(self, blob_features):
        """Test wrong-length labels and wrong-shape centroids are rebuilt"""
        def optimizer(features, k, seed, max_iterations):
            return [0, 1, 2], [[0.0, 0.0]]

        raw = KMeansRunner(attempts=1, optimizer=optimizer).run(blob_features, 3)

        assert len(raw.assignments) == len(blob_features)
        assert raw.assignments.tolist()[:6] == [0, 1, 2, 0, 1, 2]
        assert raw.centroids.shape == (3, 2)
        assert "assignments_rebuilt" in raw.repairs
        assert "centroids_recomputed" in raw.repairs
        assert raw.wcss == pytest.approx(compute_wcss(blob_features, raw.assignments, raw.centroids))

    def test_non_finite_centroids_zeroed(self):
        features = np.array([[0.0], [1.0], [10.0], [11.0]])

        def optimizer(features, k, seed, max_iterations):
            return [0, 0, 1, 1], [[np.nan], [10.5]]

        raw = KMeansRunner(attempts=1, optimizer=optimizer).run(features, 2)

        assert raw.centroids.tolist() == [[0.0], [10.5]]
        assert raw.repairs == ["non_finite_centroids_zeroed"]

    def test_short_assignments_repaired_not_rejected(self, blob_features):
        """Test a too-short label array is rebuilt instead of rejecting the attempt"""
        def optimizer(features, k, seed, max_iterations):
            return [0, 0], [[0.0, 0.0], [10.0, 0.0], [5.0, 8.66]]

        raw = KMeansRunner(attempts=2, optimizer=optimizer).run(blob_features, 3)

        assert raw.assignments.tolist() == [i % 3 for i in range(len(blob_features))]
        assert raw.centroids.tolist() == [[0.0, 0.0], [10.0, 0.0], [5.0, 8.66]]
        assert raw.repairs == ["assignments_rebuilt"]
        assert raw.accepted_attempts == 2
        assert raw.rejected_attempts == 0

    def test_missing_centroids_recomputed(self):
        features = np.array([[0.0], [10.0], [2.0], [12.0]])

        def optimizer(features, k, seed, max_iterations):
            return [i % k for i in range(len(features))], None

        raw = KMeansRunner(attempts=3, optimizer=optimizer).run(features, 2)

        assert raw.centroids.tolist() == [[1.0], [11.0]]
        assert raw.repairs == ["centroids_recomputed"]
        assert raw.wcss == pytest.approx(4.0)

    def test_explicit_attempts_respected(self):
        features = np.arange(6, dtype=float).reshape(-1, 1)
        seeds = []

        def optimizer(features, k, seed, max_iterations):
            seeds.append(seed)
            return [0, 0, 0, 1, 1, 1], [[1.0], [4.0]]

        KMeansRunner(attempts=3, base_seed=0, seed_step=1, optimizer=optimizer).run(features, 2, attempts=1)

        assert seeds == [0]

    @pytest.mark.parametrize("attempts", [0, -2])
    def test_attempts_below_one_raise(self, attempts):
        with pytest.raises(ValidationError):
            KMeansRunner().run(np.arange(6, dtype=float).reshape(-1, 1), 2, attempts=attempts)


class TestRepairClustering:
    """Test cases for repair_clustering"""

    def test_valid_input_unchanged(self):
        features = np.array([[0.0], [1.0]])

        labels, centers, repairs = repair_clustering([0, 1], [[0.0], [1.0]], features, 2,
                                                     np.random.default_rng(0))

        assert labels.tolist() == [0, 1]
        assert centers.tolist() == [[0.0], [1.0]]
        assert repairs == []

    def test_out_of_range_assignments_rebuilt(self):
        features = np.array([[0.0], [1.0], [2.0]])

        labels, _, repairs = repair_clustering([0, 7, 1], [[0.0], [1.5]], features, 2,
                                               np.random.default_rng(0))

        assert labels.tolist() == [0, 1, 0]
        assert repairs == ["assignments_rebuilt"]

    def test_empty_cluster_takes_random_point(self):
        features = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])

        _, centers, _ = repair_clustering([0, 0, 0], None, features, 2, np.random.default_rng(0))

        assert centers[0].tolist() == [1.0, 1.0]
        assert centers[1].tolist() in features.tolist()
