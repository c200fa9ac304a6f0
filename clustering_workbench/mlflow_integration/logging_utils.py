"""
Logging utilities for the clustering workbench.

This module provides structured logging with plain text formatting and
MLflow integration. Parameters and metrics reach MLflow only while the
caller has an active run; the workbench never starts runs itself.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

import mlflow

from ..core.exceptions import MLflowIntegrationError


class PipelineLogger:
    """
    Centralized logging utility for workbench components.

    Wraps a ``pipeline.<component>`` logger and mirrors parameters and
    metrics to the active MLflow run when tracking is enabled.
    """

    def __init__(self, component_name: str, log_level: Union[str, int] = logging.INFO,
                 enable_mlflow: bool = True):
        """
        Initialize the pipeline logger.

        Args:
            component_name: Name of the component using this logger
            log_level: Logging level (default: INFO)
            enable_mlflow: Whether to mirror parameters and metrics to MLflow
        """
        self.component_name = component_name
        self.enable_mlflow = enable_mlflow
        self.logger = logging.getLogger(f"pipeline.{component_name}")
        self.logger.setLevel(log_level)

    def _is_mlflow_active(self) -> bool:
        return self.enable_mlflow and mlflow.active_run() is not None

    def log_parameters(self, params: Dict[str, Any], prefix: str = "") -> None:
        """
        Log parameters locally and to the active MLflow run.

        Args:
            params: Dictionary of parameters to log
            prefix: Optional prefix for parameter names

        Raises:
            MLflowIntegrationError: If MLflow rejects the parameters
        """
        payload = {(f"{prefix}.{name}" if prefix else name): value for name, value in params.items()}
        for name, value in payload.items():
            self.logger.info("Parameter %s: %s", name, value)

        if not self._is_mlflow_active():
            return
        try:
            mlflow.log_params({name: str(value) if not isinstance(value, (str, int, float, bool)) else value
                               for name, value in payload.items()})
        except Exception as e:
            raise MLflowIntegrationError(
                f"Failed to log parameters for {self.component_name}: {str(e)}",
                details={"component": self.component_name, "operation": "log_parameters"}
            ) from e

    def log_metrics(self, metrics: Dict[str, Optional[Union[int, float]]],
                    step: Optional[int] = None, prefix: str = "") -> None:
        """
        Log numeric metrics locally and to the active MLflow run.

        None values are skipped.

        Raises:
            MLflowIntegrationError: If MLflow rejects the metrics
        """
        payload = {(f"{prefix}.{name}" if prefix else name): float(value)
                   for name, value in metrics.items() if value is not None}
        step_info = f" (step {step})" if step is not None else ""
        for name, value in payload.items():
            self.logger.info("Metric %s: %.6g%s", name, value, step_info)

        if not self._is_mlflow_active():
            return
        try:
            mlflow.log_metrics(payload, step=step)
        except Exception as e:
            raise MLflowIntegrationError(
                f"Failed to log metrics for {self.component_name}: {str(e)}",
                details={"component": self.component_name, "operation": "log_metrics"}
            ) from e

    def set_tags(self, tags: Dict[str, Any]) -> None:
        """
        Tag the active MLflow run.

        Raises:
            MLflowIntegrationError: If MLflow rejects the tags
        """
        if not self._is_mlflow_active():
            return
        try:
            mlflow.set_tags({name: str(value) for name, value in tags.items()})
        except Exception as e:
            raise MLflowIntegrationError(
                f"Failed to set tags for {self.component_name}: {str(e)}",
                details={"component": self.component_name, "operation": "set_tags"}
            ) from e

    def time_operation(self, operation_name: str) -> 'TimedOperation':
        """Context manager measuring the wall-clock duration of ``operation_name``."""
        return TimedOperation(self, operation_name)

    def info(self, message: str) -> None:
        """Log info message."""
        self.logger.info(f"[{self.component_name}] {message}")

    def warning(self, message: str) -> None:
        """Log warning message."""
        self.logger.warning(f"[{self.component_name}] {message}")


class TimedOperation:
    """
    Times a block of work for a PipelineLogger.

    The duration is available as ``duration`` after the block exits, so the
    caller can report it as a metric next to the operation's results.
    """

    def __init__(self, logger: PipelineLogger, operation_name: str):
        self.logger = logger
        self.operation_name = operation_name
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None

    def __enter__(self) -> 'TimedOperation':
        self.start_time = datetime.now()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.end_time = datetime.now()
        if exc_type is None:
            self.logger.info(f"{self.operation_name} finished in {self.duration:.3f}s")
        else:
            self.logger.warning(f"{self.operation_name} aborted after {self.duration:.3f}s: {exc_val}")

    @property
    def duration(self) -> Optional[float]:
        """Duration in seconds, None while the block is still running."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None
