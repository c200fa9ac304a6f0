"""
Shared exception hierarchy for the clustering workbench.

This module defines a unified exception hierarchy used across the
preprocessing, clustering and pipeline modules to provide consistent
error handling.
"""


class WorkbenchError(Exception):
    """Base exception for all workbench-related errors.

    This is the root exception class that all other workbench exceptions
    inherit from. It provides a consistent interface for error handling
    across the entire project.
    """

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} (Details: {details_str})"
        return self.message


class ConfigurationError(WorkbenchError):
    """Exception raised for configuration-related errors.

    This exception is raised when there are issues with:
    - Invalid configuration parameters
    - Configuration validation failures
    """
    pass


class ValidationError(WorkbenchError):
    """Exception raised for input validation errors.

    This exception is raised before any computation starts when:
    - The dataset is empty
    - No numeric or otherwise usable columns are available
    - The requested cluster count is outside [1, row count]
    - Fewer distinct feature vectors exist than requested clusters
    """
    pass


class ComputationError(WorkbenchError):
    """Exception raised when clustering cannot produce a valid result.

    This exception is raised when:
    - Every restart attempt for a given k was rejected or raised
    - A repaired result still contains an empty cluster
    """
    pass


class MLflowIntegrationError(WorkbenchError):
    """Exception raised for MLflow integration errors.

    This exception is raised when parameter or metric logging to an
    active MLflow run fails.
    """
    pass
