"""
MLflow integration for the clustering workbench.
"""

from .logging_utils import PipelineLogger, TimedOperation

__all__ = ['PipelineLogger', 'TimedOperation']
