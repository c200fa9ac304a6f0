"""
Elbow-method analysis over caller-supplied k values.

For each sorted, deduplicated k the analyzer reports WCSS and the
Davies-Bouldin Index, then derives two recommendations: the WCSS elbow point
and the k with the smallest strictly positive DBI. A k whose clustering
fails is estimated from its neighbour instead of aborting the sweep.
"""

import logging
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from ..core.config import WorkbenchConfig
from ..core.data_models import ElbowReport
from ..core.exceptions import ComputationError, ValidationError
from .kmeans_runner import KMeansRunner
from .metrics import compute_wcss, davies_bouldin_index, total_variance


logger = logging.getLogger(__name__)


def _pick(candidates: List[int], k_values: Sequence[int], tie_break: str) -> int:
    ks = [k_values[i] for i in candidates]
    return max(ks) if tie_break == "largest_k" else min(ks)


def find_elbow_point(k_values: Sequence[int], wcss: Sequence[float],
                     tie_break: str = "smallest_k") -> Optional[int]:
    """
    k at the interior point maximizing ``(w[i-1]-w[i]) - (w[i]-w[i+1])``.

    Returns None when fewer than three k values are available.
    """
    if len(k_values) < 3:
        return None

    scores = [(wcss[i - 1] - wcss[i]) - (wcss[i] - wcss[i + 1]) for i in range(1, len(wcss) - 1)]
    best = max(scores)
    candidates = [i + 1 for i, score in enumerate(scores) if np.isclose(score, best)]
    return _pick(candidates, k_values, tie_break)


def find_dbi_optimum(k_values: Sequence[int], dbi: Sequence[float],
                     tie_break: str = "smallest_k") -> Optional[int]:
    """k with the smallest strictly positive DBI, None if no DBI is positive."""
    positive = [(i, value) for i, value in enumerate(dbi) if value > 0]
    if not positive:
        return None

    best = min(value for _, value in positive)
    candidates = [i for i, value in positive if np.isclose(value, best)]
    return _pick(candidates, k_values, tie_break)


class ElbowAnalyzer:
    """Sweeps k values through the K-Means runner and metric calculator."""

    def __init__(self, runner: Optional[KMeansRunner] = None, config: Optional[WorkbenchConfig] = None,
                 progress_callback: Optional[Callable[[str], None]] = None):
        self.config = config or WorkbenchConfig()
        self.progress_callback = progress_callback
        self.runner = runner or KMeansRunner(
            max_iterations=self.config.kmeans_max_iterations,
            attempts=self.config.kmeans_attempts,
            base_seed=self.config.base_seed,
            seed_step=self.config.seed_step,
            init=self.config.kmeans_init,
        )

    def analyze(self, features: np.ndarray, k_values: Iterable[int]) -> ElbowReport:
        """
        Compute WCSS and DBI for every requested k.

        Args:
            features: Feature matrix of shape (n, d)
            k_values: Explicit k values, any order, duplicates allowed

        Returns:
            ElbowReport with per-k metrics and recommendations

        Raises:
            ValidationError: If features are empty, a k is not an integer or
                a k lies outside [1, n]
        """
        features = np.asarray(features, dtype=float)
        k_values = list(k_values)
        not_integer = [k for k in k_values if isinstance(k, bool) or not isinstance(k, (int, np.integer))]
        if not_integer:
            raise ValidationError(
                "k values must be integers",
                details={"invalid_k_values": not_integer}
            )
        ks = sorted({int(k) for k in k_values})
        n = len(features)

        if n == 0:
            raise ValidationError("Feature matrix cannot be empty", details={"operation": "elbow"})
        if not ks:
            raise ValidationError("At least one k value is required", details={"operation": "elbow"})
        out_of_range = [k for k in ks if not 1 <= k <= n]
        if out_of_range:
            raise ValidationError(
                f"k values must lie in [1, {n}]",
                details={"invalid_k_values": out_of_range, "row_count": n}
            )

        rng = np.random.default_rng(self.config.fallback_seed)
        wcss_values: List[float] = []
        dbi_values: List[float] = []
        estimated: List[int] = []
        warnings: List[str] = []

        for k in ks:
            if self.progress_callback:
                self.progress_callback(f"elbow:k={k}")
            if k == 1:
                wcss_values.append(total_variance(features))
                dbi_values.append(0.0)
                logger.info("Elbow k=1: WCSS=%.4f (total variance), DBI=0", wcss_values[-1])
                continue

            try:
                raw = self.runner.run(features, k)
                wcss = compute_wcss(features, raw.assignments, raw.centroids)
                dbi = davies_bouldin_index(features, raw.assignments, raw.centroids,
                                           self.config.centroid_tolerance)
            except ComputationError as e:
                wcss, dbi = self._fallback(features, k, wcss_values, dbi_values, rng)
                estimated.append(k)
                message = f"k={k} could not be clustered ({e.message}); WCSS and DBI were estimated"
                warnings.append(message)
                logger.warning(message)

            wcss_values.append(wcss)
            dbi_values.append(dbi)
            logger.info("Elbow k=%d: WCSS=%.4f, DBI=%.4f", k, wcss, dbi)

        tie_break = self.config.recommendation_tie_break
        return ElbowReport(
            k_values=ks,
            wcss=wcss_values,
            dbi=dbi_values,
            elbow_k=find_elbow_point(ks, wcss_values, tie_break),
            dbi_optimal_k=find_dbi_optimum(ks, dbi_values, tie_break),
            estimated_k_values=estimated,
            warnings=warnings,
        )

    def _fallback(self, features: np.ndarray, k: int, wcss_values: List[float],
                  dbi_values: List[float], rng: np.random.Generator):
        """Estimate WCSS/DBI for a failed k from the previous entry or total variance."""
        if wcss_values:
            shrink = rng.uniform(*self.config.fallback_wcss_shrink)
            growth = rng.uniform(*self.config.fallback_dbi_growth)
            wcss = wcss_values[-1] * shrink
            dbi = max(self.config.fallback_dbi_floor, (dbi_values[-1] or 1.0) * growth)
        else:
            wcss = total_variance(features) / k
            dbi = 1.0
        return float(wcss), float(dbi)
