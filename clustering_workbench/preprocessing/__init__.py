"""
Preprocessing components for the clustering workbench.

This module contains column type inference, categorical encoding with its
validation pass, numeric normalization and feature extraction.
"""

from .column_analyzer import analyze_columns
from .encoders import encode, label_encode, one_hot_encode
from .encoding_validator import validate_encoding
from .normalizer import normalize
from .feature_extractor import FeatureMatrix, extract_features

__all__ = [
    'analyze_columns',
    'encode',
    'label_encode',
    'one_hot_encode',
    'validate_encoding',
    'normalize',
    'FeatureMatrix',
    'extract_features',
]
