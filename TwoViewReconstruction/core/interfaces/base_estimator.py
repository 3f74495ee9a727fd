"""
Base interface for all estimation algorithms.

This defines the contract for algorithms that estimate geometric relationships
(fundamental matrix, two-view pose and structure).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum
import numpy as np
from ...logger import get_logger

logger = get_logger("core.interfaces")


class EstimationStatus(Enum):
    """Status codes for estimation results"""
    SUCCESS = "success"
    INSUFFICIENT_POINTS = "insufficient_points"
    DEGENERATE_CONFIG = "degenerate_configuration"
    NO_SOLUTION = "no_solution"
    NO_CONSISTENT_HYPOTHESIS = "no_consistent_hypothesis"
    NUMERICAL_INSTABILITY = "numerical_instability"
    INVALID_INPUT = "invalid_input"
    FAILED = "failed"


@dataclass
class EstimationResult:
    """
    Result of an estimation algorithm.

    Attributes:
        success: Whether estimation succeeded
        status: Status code from EstimationStatus
        model: Estimated model (e.g., fundamental matrix, reconstruction)
        inliers: Boolean mask of inlier points
        num_inliers: Number of inlier points
        residuals: Residual errors for each point
        confidence: Confidence score [0, 1]
        metadata: Additional algorithm-specific information
    """
    success: bool
    status: EstimationStatus
    model: Optional[Any] = None
    inliers: Optional[np.ndarray] = None
    num_inliers: int = 0
    residuals: Optional[np.ndarray] = None
    confidence: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success

    def get_inlier_ratio(self) -> float:
        """
        Get ratio of inliers to total points.

        Returns:
            float: Inlier ratio [0, 1]
        """
        if self.inliers is None:
            return 0.0

        total = len(self.inliers)
        return self.num_inliers / total if total > 0 else 0.0

    def log_summary(self):
        """Log estimation result summary"""
        logger.info("ESTIMATION RESULT")
        logger.info(f"Status: {self.status.value}")
        logger.info(f"Inliers: {self.num_inliers}")

        if self.inliers is not None:
            logger.info(f"Inlier ratio: {self.get_inlier_ratio():.2%}")

        if self.confidence > 0:
            logger.info(f"Confidence: {self.confidence:.3f}")

        if self.residuals is not None and len(self.residuals) > 0:
            logger.info(f"Mean residual: {np.mean(self.residuals):.3f}")
            logger.info(f"Median residual: {np.median(self.residuals):.3f}")

        for key, value in self.metadata.items():
            logger.info(f"  {key}: {value}")


class BaseEstimator(ABC):
    """
    Abstract base class for all estimation algorithms.

    This provides a common interface for algorithms that estimate
    geometric relationships from point correspondences.

    Examples:
        - FundamentalMatrixEstimator
        - TwoViewReconstructor
    """

    def __init__(self, **config):
        """
        Initialize estimator with configuration.

        Args:
            **config: Algorithm-specific configuration parameters
        """
        self.config = config

    # ========================================================================
    # CORE ESTIMATION METHOD (Required)
    # ========================================================================

    @abstractmethod
    def estimate(self, *args, **kwargs) -> EstimationResult:
        """
        Perform estimation.

        Arguments depend on the specific estimation algorithm.

        Returns:
            EstimationResult: Estimation result with model and metadata
        """
        pass

    # ========================================================================
    # VALIDATION METHODS (Required)
    # ========================================================================

    @abstractmethod
    def validate_input(self, *args, **kwargs) -> Tuple[bool, str]:
        """
        Validate input data before estimation.

        Returns:
            Tuple[bool, str]: (is_valid, error_message)
        """
        pass

    @abstractmethod
    def validate_result(self, result: EstimationResult) -> bool:
        """
        Validate estimation result.

        Args:
            result: Estimation result to validate

        Returns:
            bool: True if result is valid
        """
        pass

    # ========================================================================
    # INFORMATION METHODS
    # ========================================================================

    def get_min_points(self) -> int:
        """Minimum number of point correspondences required"""
        return 0

    def get_algorithm_name(self) -> str:
        return self.__class__.__name__

    # ========================================================================
    # UTILITY METHODS
    # ========================================================================

    def estimate_with_validation(self, *args, **kwargs) -> EstimationResult:
        """
        Estimate with automatic input validation.

        Returns:
            EstimationResult: Estimation result
        """
        is_valid, error_msg = self.validate_input(*args, **kwargs)

        if not is_valid:
            return EstimationResult(
                success=False,
                status=EstimationStatus.INSUFFICIENT_POINTS,
                metadata={'error': error_msg}
            )

        result = self.estimate(*args, **kwargs)

        if result.success and not self.validate_result(result):
            result.success = False
            result.status = EstimationStatus.FAILED
            result.metadata['validation_failed'] = True

        return result

    def __repr__(self) -> str:
        return f"{self.get_algorithm_name()}(config={self.config})"


class RANSACEstimator(BaseEstimator):
    """
    Base class for RANSAC-based estimators.

    The robust sampling loop itself may be delegated (e.g. to OpenCV);
    subclasses provide the per-point residual used to report and
    re-check inliers.
    """

    def __init__(self,
                 threshold: float = 1.0,
                 confidence: float = 0.99,
                 max_iterations: int = 1000,
                 **config):
        """
        Initialize RANSAC estimator.

        Args:
            threshold: Inlier threshold (e.g., epipolar distance in pixels)
            confidence: Desired confidence level
            max_iterations: Maximum RANSAC iterations
            **config: Additional configuration
        """
        super().__init__(**config)
        self.threshold = threshold
        self.confidence = confidence
        self.max_iterations = max_iterations

    @abstractmethod
    def compute_residuals(self, model: Any, *points: np.ndarray) -> np.ndarray:
        """
        Compute residuals for all points given a model.

        Args:
            model: Estimated model
            *points: All point correspondences

        Returns:
            np.ndarray: Residuals for each point
        """
        pass

    def get_inliers(self, residuals: np.ndarray,
                    threshold: Optional[float] = None) -> Tuple[np.ndarray, int]:
        """
        Get inlier mask from residuals.

        Args:
            residuals: Residual errors
            threshold: Overrides the estimator threshold when given

        Returns:
            Tuple[np.ndarray, int]: (inlier_mask, num_inliers)
        """
        threshold = self.threshold if threshold is None else threshold
        inlier_mask = residuals < threshold
        num_inliers = int(np.sum(inlier_mask))
        return inlier_mask, num_inliers
