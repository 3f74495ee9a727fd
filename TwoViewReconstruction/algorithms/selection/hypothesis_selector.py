"""
Pose hypothesis selection
=========================

Every one of the four (R, T) hypotheses of an essential matrix is scored by
triangulating the full inlier set and checking cheirality (positive depth in
both cameras). The first hypothesis, in decomposition order, whose in-front
fraction exceeds the configured ratio in both views is selected.
Reprojection errors are computed for every hypothesis as diagnostics only;
they do not take part in the decision.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ...config import PoseDecompositionConfig, SelectionConfig, TriangulationConfig
from ...core.exceptions import (
    InsufficientCorrespondencesError,
    NoConsistentHypothesisError,
    PoseDecompositionError
)
from ...core.structures import HypothesisScore, HypothesisSelection, PoseCandidate
from ...logger import get_logger
from ...utils import PointsLike, apply_mask, as_mask, masked_indices, validate_correspondences
from ..geometry.pose import decompose_pose
from ..geometry.projection import get_projection, reprojection_errors, transform_point
from ..geometry.triangulation import triangulate_set

logger = get_logger("selection")


class HypothesisSelector:
    """
    Chooses the physically valid relative pose among the four hypotheses.

    Args:
        config: Selection threshold and hypothesis-level parallelism
        triangulation_config: Parameters of the per-hypothesis triangulation
        decomposition_config: Parameters of the essential matrix decomposition
    """

    def __init__(self,
                 config: Optional[SelectionConfig] = None,
                 triangulation_config: Optional[TriangulationConfig] = None,
                 decomposition_config: Optional[PoseDecompositionConfig] = None):
        self.config = config or SelectionConfig()
        self.triangulation_config = triangulation_config or TriangulationConfig()
        self.decomposition_config = decomposition_config or PoseDecompositionConfig()

    def evaluate(self, candidate: PoseCandidate,
                 pts1: np.ndarray, K1: np.ndarray,
                 pts2: np.ndarray, K2: np.ndarray) -> HypothesisScore:
        """
        Triangulate the correspondences under one hypothesis and score it.

        Args:
            candidate: Pose hypothesis of the second camera
            pts1, pts2: Inlier correspondences (Nx2, N > 0)
            K1, K2: Camera intrinsics

        Returns:
            HypothesisScore with the cloud, cheirality flags and error metrics
        """
        R, T = candidate.R, candidate.T
        points = triangulate_set(pts1, K1, pts2, K2, R, T, self.triangulation_config)

        depth1 = points[:, 2]
        depth2 = transform_point(points, R, T)[:, 2]
        in_front1 = depth1 > 0.0
        in_front2 = depth2 > 0.0

        P1 = np.asarray(K1, dtype=np.float64) @ get_projection(np.eye(3), np.zeros(3))
        P2 = np.asarray(K2, dtype=np.float64) @ get_projection(R, T)

        score = HypothesisScore(
            candidate=candidate,
            points=points,
            in_front=in_front1 & in_front2,
            in_front_ratio1=float(np.mean(in_front1)),
            in_front_ratio2=float(np.mean(in_front2)),
            reprojection_error1=float(np.mean(reprojection_errors(points, pts1, P1))),
            reprojection_error2=float(np.mean(reprojection_errors(points, pts2, P2))),
        )

        logger.info(f"{score.hypothesis}: {len(points)} points, in front "
                    f"({score.in_front_ratio1:.2f}, {score.in_front_ratio2:.2f}), "
                    f"reprojection error ({score.reprojection_error1:.3f}, "
                    f"{score.reprojection_error2:.3f})")
        return score

    def evaluate_all(self, candidates: Sequence[PoseCandidate],
                     pts1: np.ndarray, K1: np.ndarray,
                     pts2: np.ndarray, K2: np.ndarray) -> List[HypothesisScore]:
        """Score every hypothesis; the result keeps the order of candidates"""
        def evaluate_one(candidate):
            return self.evaluate(candidate, pts1, K1, pts2, K2)

        if self.config.max_workers and self.config.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                return list(executor.map(evaluate_one, candidates))
        return [evaluate_one(candidate) for candidate in candidates]

    def choose(self, scores: Sequence[HypothesisScore]) -> HypothesisSelection:
        """First hypothesis whose in-front ratio exceeds the threshold in both views"""
        selection = HypothesisSelection(scores=list(scores))
        for score in scores:
            if score.passes(self.config.min_in_front_ratio):
                selection.selected = score.hypothesis
                break
        return selection

    def select(self, pts1: PointsLike, K1: np.ndarray,
               pts2: PointsLike, K2: np.ndarray,
               E: np.ndarray,
               inlier_mask: np.ndarray) -> Tuple[HypothesisSelection, np.ndarray, np.ndarray]:
        """
        Select the pose hypothesis and build the final cloud and mask.

        Args:
            pts1, pts2: All correspondences (Nx2); only the inliers are used
            K1, K2: Camera intrinsics
            E: Essential matrix
            inlier_mask: Robust-fit inlier mask (N,)

        Returns:
            (selection, points, refined_mask): the diagnostics, the cloud of
            the selected hypothesis restricted to points in front of both
            cameras (Mx3), and inlier_mask AND cheirality (N,), with
            refined_mask.sum() == M

        Raises:
            InsufficientCorrespondencesError: The inlier set is empty
            PoseDecompositionError: E yields no proper rotation
            NoConsistentHypothesisError: No hypothesis passes the cheirality test
        """
        pts1, pts2 = validate_correspondences(pts1, pts2)
        mask = as_mask(inlier_mask, len(pts1))

        indices = masked_indices(mask)
        if len(indices) == 0:
            raise InsufficientCorrespondencesError("No inlier correspondences to triangulate")

        inlier_pts1 = apply_mask(pts1, mask)
        inlier_pts2 = apply_mask(pts2, mask)

        candidates = decompose_pose(E, self.decomposition_config)
        if not candidates:
            raise PoseDecompositionError("Essential matrix has no valid (R, T) decomposition")

        scores = self.evaluate_all(candidates, inlier_pts1, K1, inlier_pts2, K2)
        selection = self.choose(scores)

        if not selection.success:
            logger.warning(f"No hypothesis has more than {self.config.min_in_front_ratio:.0%} "
                           f"of the points in front of both cameras")
            raise NoConsistentHypothesisError("Couldn't find a consistent point cloud",
                                              selection=selection)

        best = selection.best
        points = best.points[best.in_front]

        refined_mask = mask.copy()
        refined_mask[indices] &= best.in_front

        assert int(np.count_nonzero(refined_mask)) == len(points)

        logger.info(f"Selected {best.hypothesis}: {len(points)}/{len(indices)} "
                    f"inliers in front of both cameras")

        return selection, points, refined_mask


def select_hypothesis(pts1: PointsLike, K1: np.ndarray,
                      pts2: PointsLike, K2: np.ndarray,
                      E: np.ndarray, inlier_mask: np.ndarray,
                      config: Optional[SelectionConfig] = None,
                      triangulation_config: Optional[TriangulationConfig] = None
                      ) -> Tuple[HypothesisSelection, np.ndarray, np.ndarray]:
    """Convenience wrapper around HypothesisSelector.select"""
    selector = HypothesisSelector(config, triangulation_config)
    return selector.select(pts1, K1, pts2, K2, E, inlier_mask)
