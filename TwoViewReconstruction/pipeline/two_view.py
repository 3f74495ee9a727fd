"""
Two-view reconstruction pipeline
================================

correspondences -> robust F + inlier mask -> E -> 4 x (R, T)
    -> triangulate/score every hypothesis -> (inlier mask, points, R, T)
"""

from typing import Optional, Tuple

import numpy as np

from ..algorithms.geometry.essential import assess_essential_matrix, essential_from_fundamental
from ..algorithms.geometry.fundamental import FundamentalMatrixEstimator
from ..algorithms.geometry.pose import rotation_angle_deg
from ..algorithms.selection import HypothesisSelector
from ..config import ReconstructionConfig
from ..core.exceptions import InvalidIntrinsicsError, ReconstructionError
from ..core.interfaces import BaseEstimator, EstimationResult, EstimationStatus
from ..core.structures import ReconstructionResult
from ..logger import get_logger
from ..utils import PointsLike, validate_correspondences

logger = get_logger("pipeline")


def _as_intrinsics(K: np.ndarray, name: str) -> np.ndarray:
    K = np.asarray(K, dtype=np.float64)
    if K.shape != (3, 3) or not np.all(np.isfinite(K)):
        raise InvalidIntrinsicsError(f"{name} must be a finite 3x3 matrix, got {K.shape}")
    if abs(np.linalg.det(K)) == 0.0:
        raise InvalidIntrinsicsError(f"{name} is singular")
    return K


class TwoViewReconstructor(BaseEstimator):
    """
    Relative pose and sparse structure from two calibrated views.

    Stateless between calls: every call to reconstruct() depends only on its
    arguments and the configuration given at construction.

    Example:
        >>> reconstructor = TwoViewReconstructor()
        >>> result = reconstructor.reconstruct(pts1, K1, pts2, K2)
        >>> result.R, result.T, result.points.shape
    """

    def __init__(self, config: Optional[ReconstructionConfig] = None):
        self.reconstruction_config = config or ReconstructionConfig()
        super().__init__(**self.reconstruction_config.to_dict())

        self.fundamental_estimator = FundamentalMatrixEstimator(self.reconstruction_config.fundamental)
        self.selector = HypothesisSelector(
            self.reconstruction_config.selection,
            self.reconstruction_config.triangulation,
            self.reconstruction_config.decomposition
        )

    def get_min_points(self) -> int:
        return self.fundamental_estimator.get_min_points()

    def validate_input(self, pts1: PointsLike, K1: np.ndarray,
                       pts2: PointsLike, K2: np.ndarray) -> Tuple[bool, str]:
        try:
            validate_correspondences(pts1, pts2, self.get_min_points())
            _as_intrinsics(K1, "K1")
            _as_intrinsics(K2, "K2")
        except ReconstructionError as e:
            return False, str(e)
        return True, ""

    def validate_result(self, result: EstimationResult) -> bool:
        reconstruction = result.model
        if reconstruction is None:
            return False
        return int(np.count_nonzero(reconstruction.inlier_mask)) == reconstruction.num_points

    def reconstruct(self, pts1: PointsLike, K1: np.ndarray,
                    pts2: PointsLike, K2: np.ndarray) -> ReconstructionResult:
        """
        Recover the relative pose and the 3D points of two views.

        Args:
            pts1: Pixel points in first image (Nx2)
            K1: Intrinsics of the first camera (3x3)
            pts2: Pixel points in second image (Nx2)
            K2: Intrinsics of the second camera (3x3)

        Returns:
            ReconstructionResult; points are in the frame of camera 1 and
            T has unit norm

        Raises:
            InsufficientCorrespondencesError: Bad or too few correspondences
            InvalidIntrinsicsError: K1 or K2 is not a finite invertible 3x3 matrix
            DegenerateConfigurationError: The robust fit failed
            NumericalDegeneracyError: Degenerate triangulation or projection
            PoseDecompositionError: E has no valid decomposition
            NoConsistentHypothesisError: No hypothesis passes the cheirality test
        """
        pts1, pts2 = validate_correspondences(pts1, pts2, self.get_min_points())
        K1 = _as_intrinsics(K1, "K1")
        K2 = _as_intrinsics(K2, "K2")

        logger.info(f"Two-view reconstruction from {len(pts1)} correspondences")

        fundamental = self.fundamental_estimator.estimate(pts1, pts2)
        F, inliers = fundamental.model, fundamental.inliers

        E = essential_from_fundamental(F, K1, K2)
        quality = assess_essential_matrix(E)
        logger.debug(f"Essential matrix singular values: {quality['singular_values']}")

        selection, points, refined_mask = self.selector.select(pts1, K1, pts2, K2, E, inliers)
        best = selection.best

        logger.info(f"Recovered pose {best.hypothesis}: rotation "
                    f"{rotation_angle_deg(best.candidate.R):.2f} deg, "
                    f"{len(points)} points")

        return ReconstructionResult(
            inlier_mask=refined_mask,
            points=points,
            R=best.candidate.R,
            T=best.candidate.T,
            F=F,
            E=E,
            selection=selection
        )

    def estimate(self, pts1: PointsLike, K1: np.ndarray,
                 pts2: PointsLike, K2: np.ndarray) -> EstimationResult:
        """
        Same as reconstruct(), reporting failures as an EstimationResult
        instead of raising.
        """
        try:
            reconstruction = self.reconstruct(pts1, K1, pts2, K2)
        except ReconstructionError as e:
            logger.warning(f"Two-view reconstruction failed: {e}")
            metadata = {'error': str(e)}
            selection = getattr(e, 'selection', None)
            if selection is not None:
                metadata['selection'] = selection
            return EstimationResult(success=False, status=e.status, metadata=metadata)

        num_inliers = reconstruction.num_points
        result = EstimationResult(
            success=True,
            status=EstimationStatus.SUCCESS,
            model=reconstruction,
            inliers=reconstruction.inlier_mask,
            num_inliers=num_inliers,
            confidence=self.fundamental_estimator.confidence,
            metadata={
                'hypothesis': str(reconstruction.selection.selected),
                'rotation_angle_deg': rotation_angle_deg(reconstruction.R),
            }
        )
        result.log_summary()
        return result


def reconstruct(pts1: PointsLike, K1: np.ndarray,
                pts2: PointsLike, K2: np.ndarray,
                config: Optional[ReconstructionConfig] = None
                ) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    End-to-end two-view reconstruction.

    Args:
        pts1: Pixel points in first image (Nx2)
        K1: Intrinsics of the first camera (3x3)
        pts2: Pixel points in second image (Nx2)
        K2: Intrinsics of the second camera (3x3)
        config: Pipeline configuration

    Returns:
        (inlier_mask, points, R, T)
    """
    return TwoViewReconstructor(config).reconstruct(pts1, K1, pts2, K2).as_tuple()
