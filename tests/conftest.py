"""
Shared fixtures for the clustering workbench tests
"""

import numpy as np
import pytest

from clustering_workbench.core.config import WorkbenchConfig


BLOB_CENTERS = np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 8.66]])


@pytest.fixture
def blob_features():
    """Three well-separated equilateral blobs, 30 points each"""
    rng = np.random.default_rng(7)
    return np.vstack([center + rng.normal(scale=0.5, size=(30, 2)) for center in BLOB_CENTERS])


@pytest.fixture
def blob_dataset(blob_features):
    """Blob features as dataset rows with a synthetic id"""
    return [{"id": i, "x": float(x), "y": float(y)} for i, (x, y) in enumerate(blob_features)]


@pytest.fixture
def mixed_dataset():
    """Small dataset with numeric, categorical, null and empty columns"""
    cities = ["Seoul", "Busan", "Seoul", "Incheon", "Busan", "Seoul", "Daegu", "Busan"]
    return [
        {
            "id": i,
            "age": 20 + 5 * i,
            "income": str(1000 * (i + 1)),
            "city": cities[i],
            "grade": None if i == 3 else ("A" if i % 2 else "B"),
            "notes": None,
        }
        for i in range(len(cities))
    ]


@pytest.fixture
def config():
    """Default configuration with MLflow tracking off"""
    return WorkbenchConfig(enable_mlflow_logging=False)
