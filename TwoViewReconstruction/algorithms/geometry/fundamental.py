"""
Robust fundamental matrix estimation
====================================

Fits the fundamental matrix F (x2^T F x1 = 0) to raw correspondences with
OpenCV's RANSAC fundamental-matrix solver, then re-fits F on the RANSAC
inliers with the normalized 8-point algorithm. The inlier threshold scales
with the magnitude of the image coordinates so the same configuration works
for pixel and normalized coordinates alike.
"""

from typing import Optional, Tuple

import cv2
import numpy as np

from ...config import FundamentalConfig
from ...core.exceptions import DegenerateConfigurationError, ReconstructionError
from ...core.interfaces import EstimationResult, EstimationStatus, RANSACEstimator
from ...logger import get_logger
from ...utils import PointsLike, as_mask, validate_correspondences, to_homogeneous

logger = get_logger("fundamental")

# Below this count cv2.findFundamentalMat replaces RANSAC by LMedS
OPENCV_RANSAC_MIN_POINTS = 15
EIGHT_POINT_MIN_POINTS = 8


class FundamentalMatrixEstimator(RANSACEstimator):
    """
    RANSAC fundamental matrix estimator with a scale-adaptive threshold.

    The threshold is threshold_ratio * max |coordinate| over both point sets,
    and is recomputed for every call to estimate().
    """

    def __init__(self, config: Optional[FundamentalConfig] = None):
        self.fundamental_config = config or FundamentalConfig()
        super().__init__(
            threshold=0.0,
            confidence=self.fundamental_config.confidence,
            max_iterations=self.fundamental_config.max_iterations,
            threshold_ratio=self.fundamental_config.threshold_ratio,
            min_points=self.fundamental_config.min_points
        )

    def get_min_points(self) -> int:
        return self.fundamental_config.min_points

    def adaptive_threshold(self, pts1: np.ndarray, pts2: np.ndarray) -> float:
        """RANSAC distance threshold for this pair of point sets"""
        max_value = max(np.max(np.abs(pts1)), np.max(np.abs(pts2)))
        return self.fundamental_config.threshold_ratio * float(max_value)

    def validate_input(self, pts1: PointsLike, pts2: PointsLike) -> Tuple[bool, str]:
        try:
            validate_correspondences(pts1, pts2, self.get_min_points())
        except ReconstructionError as e:
            return False, str(e)
        return True, ""

    def validate_result(self, result: EstimationResult) -> bool:
        F = result.model
        if F is None or F.shape != (3, 3) or not np.all(np.isfinite(F)):
            return False
        singular_values = np.linalg.svd(F, compute_uv=False)
        if singular_values[0] <= 0:
            return False
        return singular_values[2] / singular_values[0] < 1e-4

    def estimate(self, pts1: PointsLike, pts2: PointsLike) -> EstimationResult:
        """
        Estimate F and the inlier mask from raw correspondences.

        The RANSAC model is re-fitted on its inliers with the normalized
        8-point algorithm. With exactly 8 correspondences, or when OpenCV's
        small-sample path (fewer than 15 points) finds no model, F is the
        8-point fit of all correspondences.

        Args:
            pts1: Points in first image (Nx2)
            pts2: Points in second image (Nx2)

        Returns:
            EstimationResult with model=F (3x3) and inliers as a boolean (N,) mask

        Raises:
            InsufficientCorrespondencesError: Mismatched lengths or < min_points
            DegenerateConfigurationError: The robust fit found no model
        """
        pts1, pts2 = validate_correspondences(pts1, pts2, self.get_min_points())

        threshold = self.adaptive_threshold(pts1, pts2)
        if threshold <= 0:
            raise DegenerateConfigurationError("All correspondences are at the image origin")

        logger.debug(f"Fitting F to {len(pts1)} correspondences "
                     f"(threshold={threshold:.4f}, confidence={self.confidence})")

        if len(pts1) == EIGHT_POINT_MIN_POINTS:
            method = '8POINT'
            F = self._eight_point(pts1, pts2)
            inliers = np.ones(len(pts1), dtype=bool)
        else:
            method = 'RANSAC'
            F, inliers = self._ransac(pts1, pts2, threshold)

            if F is None and len(pts1) < OPENCV_RANSAC_MIN_POINTS:
                logger.debug(f"No robust model from {len(pts1)} correspondences, "
                             f"falling back to the 8-point fit")
                method = '8POINT'
                F = self._eight_point(pts1, pts2)
                if F is not None:
                    inliers, _ = self.get_inliers(self.compute_residuals(F, pts1, pts2), threshold)

        if F is None:
            raise DegenerateConfigurationError(
                "Fundamental matrix estimation returned no model - possibly degenerate configuration"
            )

        num_inliers = int(np.sum(inliers))
        if num_inliers == 0:
            raise DegenerateConfigurationError("Fundamental matrix fit has no inliers")

        if method == 'RANSAC' and num_inliers >= EIGHT_POINT_MIN_POINTS:
            refined = self._eight_point(pts1[inliers], pts2[inliers])
            if refined is not None:
                F = refined

        residuals = self.compute_residuals(F, pts1, pts2)
        _, within_threshold = self.get_inliers(residuals, threshold)
        logger.debug(f"{within_threshold} correspondences within {threshold:.4f} of their epipolar lines")

        logger.info(f"Fundamental matrix ({method}): {num_inliers}/{len(pts1)} inliers "
                    f"({num_inliers / len(pts1):.1%})")

        return EstimationResult(
            success=True,
            status=EstimationStatus.SUCCESS,
            model=F,
            inliers=inliers,
            num_inliers=num_inliers,
            residuals=residuals,
            confidence=self.confidence,
            metadata={
                'threshold': threshold,
                'num_points': len(pts1),
                'method': method
            }
        )

    def _ransac(self, pts1: np.ndarray, pts2: np.ndarray,
                threshold: float) -> Tuple[Optional[np.ndarray], Optional[np.ndarray]]:
        try:
            F, mask = cv2.findFundamentalMat(
                pts1, pts2,
                method=cv2.FM_RANSAC,
                ransacReprojThreshold=threshold,
                confidence=self.confidence,
                maxIters=self.max_iterations
            )
        except cv2.error as e:
            raise DegenerateConfigurationError(f"Fundamental matrix estimation failed: {e}") from e

        if F is None or mask is None or F.shape != (3, 3):
            return None, None
        return F, as_mask(mask, len(pts1))

    @staticmethod
    def _eight_point(pts1: np.ndarray, pts2: np.ndarray) -> Optional[np.ndarray]:
        """Normalized 8-point least-squares fit, None when OpenCV finds no model"""
        try:
            F, _ = cv2.findFundamentalMat(pts1, pts2, method=cv2.FM_8POINT)
        except cv2.error as e:
            raise DegenerateConfigurationError(f"8-point fundamental matrix fit failed: {e}") from e

        if F is None or F.shape != (3, 3) or not np.all(np.isfinite(F)):
            return None
        return F

    def compute_residuals(self, F: np.ndarray, pts1: np.ndarray, pts2: np.ndarray) -> np.ndarray:
        """
        Symmetric epipolar distance: max of the point-to-epipolar-line
        distances in both images, for every correspondence.
        """
        x1 = to_homogeneous(pts1)
        x2 = to_homogeneous(pts2)

        lines2 = x1 @ F.T      # F x1, epipolar lines in image 2
        lines1 = x2 @ F        # F^T x2, epipolar lines in image 1
        algebraic = np.abs(np.sum(x2 * lines2, axis=1))

        norm2 = np.hypot(lines2[:, 0], lines2[:, 1])
        norm1 = np.hypot(lines1[:, 0], lines1[:, 1])

        with np.errstate(divide='ignore', invalid='ignore'):
            d2 = np.where(norm2 > 0, algebraic / norm2, np.inf)
            d1 = np.where(norm1 > 0, algebraic / norm1, np.inf)

        return np.maximum(d1, d2)


def estimate_fundamental(pts1: PointsLike, pts2: PointsLike,
                         config: Optional[FundamentalConfig] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convenience function for robust fundamental matrix estimation

    Args:
        pts1: Points in first image (Nx2)
        pts2: Points in second image (Nx2)
        config: Estimation parameters (defaults: ratio 0.006, confidence 0.99)

    Returns:
        (F, inlier_mask) with F 3x3 and inlier_mask a boolean (N,) array
    """
    result = FundamentalMatrixEstimator(config).estimate(pts1, pts2)
    return result.model, result.inliers
