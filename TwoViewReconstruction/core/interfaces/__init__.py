"""
Core interfaces.

This module defines the abstract base classes (contracts) that the
estimators of this package follow, and the result container they return.
"""

from .base_estimator import (
    BaseEstimator,
    RANSACEstimator,
    EstimationResult,
    EstimationStatus
)


__all__ = [
    'BaseEstimator',
    'RANSACEstimator',
    'EstimationResult',
    'EstimationStatus',
]
