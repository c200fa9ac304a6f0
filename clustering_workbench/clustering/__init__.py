"""
Clustering components for the clustering workbench.

This module contains the multi-restart K-Means runner with its repair pass,
the cluster-quality metrics and the elbow-method analyzer.
"""

from .kmeans_runner import KMeansRunner, RawClustering, lloyd_optimizer, repair_clustering
from .metrics import cluster_sizes, compute_wcss, davies_bouldin_index, quality_metrics, total_variance
from .elbow_analyzer import ElbowAnalyzer, find_dbi_optimum, find_elbow_point

__all__ = [
    'KMeansRunner',
    'RawClustering',
    'lloyd_optimizer',
    'repair_clustering',
    'cluster_sizes',
    'compute_wcss',
    'davies_bouldin_index',
    'quality_metrics',
    'total_variance',
    'ElbowAnalyzer',
    'find_dbi_optimum',
    'find_elbow_point',
]
