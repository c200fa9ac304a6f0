"""
Pipeline components for the clustering workbench.

This module contains the ClusteringWorkbench facade and the module-level
operations exposed to the UI/file-parsing layer.
"""

from .workbench import ClusteringWorkbench, cluster, elbow, encode, normalize

__all__ = ['ClusteringWorkbench', 'cluster', 'elbow', 'encode', 'normalize']
