"""
Multi-restart K-Means runner with empty-cluster rejection and result repair.

Each restart attempt runs Lloyd iterations from an initialization seeded
with ``base_seed + attempt * seed_step``. Each attempt's output is passed
through ``repair_clustering`` first; repaired attempts that still leave a
cluster empty are rejected, and the lowest-WCSS accepted attempt is kept.
"""

import functools
import logging
import warnings
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

import numpy as np
from sklearn.cluster import KMeans
from sklearn.exceptions import ConvergenceWarning

from ..core.exceptions import ComputationError, ValidationError
from .metrics import compute_wcss


logger = logging.getLogger(__name__)

Optimizer = Callable[[np.ndarray, int, int, int], Tuple[Any, Any]]


def lloyd_optimizer(features: np.ndarray, k: int, seed: int, max_iterations: int,
                    init: str = "k-means++") -> Tuple[np.ndarray, np.ndarray]:
    """
    Single seeded Lloyd run from a k-means++ or random initialization.

    With ``tol=0`` iteration stops when assignments stop changing or when
    ``max_iterations`` is reached.
    """
    model = KMeans(
        n_clusters=k,
        init=init,
        n_init=1,
        max_iter=max_iterations,
        tol=0.0,
        random_state=seed,
        algorithm="lloyd",
    )
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ConvergenceWarning)
        labels = model.fit_predict(features)
    for warning in caught:
        logger.debug("K-Means (k=%d, seed=%d): %s", k, seed, warning.message)
    return labels, model.cluster_centers_


@dataclass
class RawClustering:
    """Repaired output of the runner, before it is wrapped into a ClusteringResult."""

    assignments: np.ndarray
    centroids: np.ndarray
    wcss: float
    attempt: int
    seed: int
    accepted_attempts: int
    rejected_attempts: int
    repairs: List[str] = field(default_factory=list)


def repair_clustering(assignments: Any,
                      centroids: Any,
                      features: np.ndarray,
                      k: int,
                      rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray, List[str]]:
    """
    Turn a possibly malformed optimizer output into a structurally valid one.

    - assignments of the wrong length, or with indices outside [0, k), are
      rebuilt round-robin (``i % k``)
    - centroids with the wrong count or dimensionality are recomputed as the
      mean of the assigned points; a cluster that is still empty takes a
      random feature vector drawn from ``rng``
    - non-finite centroid components are coerced to 0

    Args:
        assignments: Cluster index per point, as returned by the optimizer
        centroids: Centroid vectors, as returned by the optimizer
        features: Feature matrix of shape (n, d)
        k: Number of clusters
        rng: Generator used for the empty-cluster fallback

    Returns:
        Tuple of (assignments, centroids, names of the repairs applied)
    """
    features = np.asarray(features, dtype=float)
    n, d = features.shape
    repairs: List[str] = []

    try:
        labels = np.asarray(assignments, dtype=int).reshape(-1)
    except (TypeError, ValueError):
        labels = None

    if labels is None or len(labels) != n or (n and (labels.min() < 0 or labels.max() >= k)):
        logger.warning("Rebuilding malformed cluster assignments with round-robin fallback (k=%d, n=%d)", k, n)
        labels = np.arange(n) % k
        repairs.append("assignments_rebuilt")

    try:
        centers = np.asarray(centroids, dtype=float)
    except (TypeError, ValueError):
        centers = None

    if centers is None or centers.shape != (k, d):
        logger.warning("Recomputing malformed centroids from assignments (k=%d, d=%d)", k, d)
        centers = np.zeros((k, d))
        for cluster in range(k):
            members = features[labels == cluster]
            if len(members):
                centers[cluster] = members.mean(axis=0)
            elif n:
                centers[cluster] = features[rng.integers(n)]
        repairs.append("centroids_recomputed")

    if not np.all(np.isfinite(centers)):
        centers = np.nan_to_num(centers, nan=0.0, posinf=0.0, neginf=0.0)
        repairs.append("non_finite_centroids_zeroed")

    return labels, centers, repairs


class KMeansRunner:
    """
    Multi-restart K-Means with empty-cluster rejection.

    The optimizer is injectable so that alternative or instrumented Lloyd
    implementations can be used; it must accept
    ``(features, k, seed, max_iterations)`` and return ``(labels, centers)``.
    """

    def __init__(self,
                 max_iterations: int = 100,
                 attempts: int = 10,
                 base_seed: int = 42,
                 seed_step: int = 1000,
                 init: str = "k-means++",
                 optimizer: Optional[Optimizer] = None):
        """
        Initialize the runner.

        Args:
            max_iterations: Iteration cap per attempt
            attempts: Default number of restart attempts per k
            base_seed: Seed of attempt 0
            seed_step: Seed increment between attempts
            init: Initialization of the default optimizer, "k-means++" or "random"
            optimizer: Single-run optimizer, defaults to ``lloyd_optimizer``
        """
        self.max_iterations = max_iterations
        self.attempts = attempts
        self.base_seed = base_seed
        self.seed_step = seed_step
        self.optimizer = optimizer or functools.partial(lloyd_optimizer, init=init)

    def attempt_seed(self, attempt: int) -> int:
        return self.base_seed + attempt * self.seed_step

    def run(self, features: np.ndarray, k: int, attempts: Optional[int] = None) -> RawClustering:
        """
        Cluster ``features`` into ``k`` groups, keeping the best accepted attempt.

        Every attempt's output goes through ``repair_clustering`` before it
        is checked for empty clusters and scored, so a malformed optimizer
        result is repaired rather than discarded.

        Args:
            features: Feature matrix of shape (n, d)
            k: Number of clusters
            attempts: Restart attempts, defaults to the runner's setting

        Returns:
            RawClustering holding repaired assignments and centroids

        Raises:
            ValidationError: If ``attempts`` is below 1
            ComputationError: If every attempt was rejected or raised
        """
        features = np.asarray(features, dtype=float)
        attempts = self.attempts if attempts is None else attempts
        if attempts < 1:
            raise ValidationError("At least one K-Means attempt is required",
                                  details={"attempts": attempts})

        best = None
        rejected: List[str] = []

        for attempt in range(attempts):
            seed = self.attempt_seed(attempt)
            try:
                labels, centers = self.optimizer(features, k, seed, self.max_iterations)
                labels, centers, repairs = repair_clustering(
                    labels, centers, features, k, np.random.default_rng(seed))
                sizes = np.bincount(labels, minlength=k)
                if np.any(sizes == 0):
                    rejected.append(f"attempt {attempt}: {int(np.sum(sizes == 0))} empty cluster(s)")
                    logger.debug("Rejected attempt %d for k=%d: empty cluster", attempt, k)
                    continue
                score = compute_wcss(features, labels, centers)
            except Exception as e:
                rejected.append(f"attempt {attempt}: {e}")
                logger.warning("K-Means attempt %d for k=%d failed: %s", attempt, k, str(e))
                continue

            if best is None or score < best[0]:
                best = (score, attempt, seed, labels, centers, repairs)

        if best is None:
            raise ComputationError(
                f"All {attempts} K-Means attempts for k={k} were rejected",
                details={"k": k, "attempts": attempts, "reasons": rejected}
            )

        wcss, attempt, seed, assignments, centroids, repairs = best

        logger.info("K-Means k=%d: kept attempt %d (seed %d) with WCSS %.4f; %d accepted, %d rejected",
                    k, attempt, seed, wcss, attempts - len(rejected), len(rejected))

        return RawClustering(
            assignments=assignments,
            centroids=centroids,
            wcss=wcss,
            attempt=attempt,
            seed=seed,
            accepted_attempts=attempts - len(rejected),
            rejected_attempts=len(rejected),
            repairs=repairs,
        )
