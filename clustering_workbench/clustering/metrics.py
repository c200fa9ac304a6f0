"""
Cluster-quality metrics.

WCSS and the Davies-Bouldin Index are computed against the centroids that
are released to the caller rather than recomputed from the labels, so the
reported metrics always describe the returned result.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import numpy as np
from sklearn.metrics import calinski_harabasz_score, silhouette_score


logger = logging.getLogger(__name__)


def _as_arrays(features, assignments, centroids):
    features = np.asarray(features, dtype=float)
    assignments = np.asarray(assignments, dtype=int)
    centroids = np.asarray(centroids, dtype=float)
    n = min(len(features), len(assignments))
    return features[:n], assignments[:n], centroids


def compute_wcss(features, assignments, centroids) -> float:
    """
    Within-cluster sum of squares.

    Points whose cluster index is outside [0, k) are skipped.
    """
    features, assignments, centroids = _as_arrays(features, assignments, centroids)
    k = len(centroids)
    valid = (assignments >= 0) & (assignments < k)
    if not np.any(valid):
        return 0.0
    diffs = features[valid] - centroids[assignments[valid]]
    return float(np.sum(diffs * diffs))


def total_variance(features) -> float:
    """WCSS of a single cluster centred on the global column-wise mean."""
    features = np.asarray(features, dtype=float)
    if features.size == 0:
        return 0.0
    diffs = features - features.mean(axis=0)
    return float(np.sum(diffs * diffs))


def cluster_sizes(assignments, k: int) -> List[int]:
    """Number of points per cluster index in [0, k)."""
    assignments = np.asarray(assignments, dtype=int)
    valid = assignments[(assignments >= 0) & (assignments < k)]
    return np.bincount(valid, minlength=k).astype(int).tolist()


def davies_bouldin_index(features, assignments, centroids, tolerance: float = 1e-12) -> float:
    """
    Davies-Bouldin Index; lower means more compact, better separated clusters.

    Defined as 0 for k <= 1. Scatter S_i is the mean Euclidean distance of a
    cluster's points to its centroid (0 if empty). Centroid pairs whose
    distance is at or below ``tolerance`` are skipped, and a cluster with no
    valid pair contributes 0. The sum is divided by k.
    """
    features, assignments, centroids = _as_arrays(features, assignments, centroids)
    k = len(centroids)
    if k <= 1:
        return 0.0

    scatter = np.zeros(k)
    for i in range(k):
        members = features[assignments == i]
        if len(members):
            scatter[i] = float(np.mean(np.linalg.norm(members - centroids[i], axis=1)))

    separation = np.linalg.norm(centroids[:, None, :] - centroids[None, :, :], axis=2)

    total = 0.0
    for i in range(k):
        ratios = [(scatter[i] + scatter[j]) / separation[i, j]
                  for j in range(k) if j != i and separation[i, j] > tolerance]
        if ratios:
            total += max(ratios)
    return float(total / k)


def _safe_metric(name: str, func: Callable[[], Any]) -> Optional[float]:
    try:
        return float(func())
    except Exception as exc:  # pragma: no cover
        logger.warning("Failed to calculate %s score: %s", name, exc)
        return None


def quality_metrics(features, assignments) -> Dict[str, Optional[float]]:
    """Silhouette and Calinski-Harabasz scores, None where undefined."""
    features = np.asarray(features, dtype=float)
    assignments = np.asarray(assignments, dtype=int)
    n_labels = len(np.unique(assignments))

    if not 2 <= n_labels <= len(features) - 1:
        return {'silhouette_score': None, 'calinski_harabasz_score': None}

    return {
        'silhouette_score': _safe_metric(
            "silhouette", lambda: silhouette_score(features, assignments)),
        'calinski_harabasz_score': _safe_metric(
            "calinski_harabasz", lambda: calinski_harabasz_score(features, assignments)),
    }
