import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional


class PoseHypothesis(IntEnum):
    """
    The four (rotation, translation) pairs extracted from an essential matrix.

    The integer value is the position of the hypothesis in the fixed
    decomposition order; downstream bookkeeping indexes by it:
    - RT1: (R1, T1)
    - RT2: (R1, T2)
    - RT3: (R2, T1)
    - RT4: (R2, T2)
    with R1 = U W Vt, R2 = U Wt Vt, T1 = U[:, 2], T2 = -T1.
    """
    RT1 = 0
    RT2 = 1
    RT3 = 2
    RT4 = 3

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class PoseCandidate:
    """One relative pose hypothesis of the second camera w.r.t. the first"""
    hypothesis: PoseHypothesis
    R: np.ndarray  # 3x3, det == +1
    T: np.ndarray  # 3x1


@dataclass
class IterativeTriangulationInfo:
    """Diagnostics of one reweighted triangulation"""
    iterations: int
    converged: bool
    weights: tuple  # Final (w1, w2) depth weights


@dataclass
class HypothesisScore:
    """
    Cheirality and reprojection statistics of one pose hypothesis.

    Attributes:
        candidate: The evaluated pose hypothesis
        points: Triangulated cloud of the inlier correspondences (Nx3)
        in_front: Per-point flag, positive depth in both views (N,)
        in_front_ratio1: Fraction of points with positive depth in view 1
        in_front_ratio2: Fraction of points with positive depth in view 2
        reprojection_error1: Mean reprojection error in view 1 (pixels)
        reprojection_error2: Mean reprojection error in view 2 (pixels)
    """
    candidate: PoseCandidate
    points: np.ndarray
    in_front: np.ndarray
    in_front_ratio1: float
    in_front_ratio2: float
    reprojection_error1: float
    reprojection_error2: float

    @property
    def hypothesis(self) -> PoseHypothesis:
        return self.candidate.hypothesis

    def passes(self, min_in_front_ratio: float) -> bool:
        return (self.in_front_ratio1 > min_in_front_ratio and
                self.in_front_ratio2 > min_in_front_ratio)


@dataclass
class HypothesisSelection:
    """All evaluated hypotheses and the one that was selected (if any)"""
    scores: List[HypothesisScore]
    selected: Optional[PoseHypothesis] = None

    @property
    def success(self) -> bool:
        return self.selected is not None

    @property
    def best(self) -> Optional[HypothesisScore]:
        if self.selected is None:
            return None
        return self.scores[int(self.selected)]

    def summary_frame(self) -> pd.DataFrame:
        """Per-hypothesis diagnostics as a table, one row per hypothesis"""
        rows = []
        for score in self.scores:
            rows.append({
                'hypothesis': str(score.hypothesis),
                'num_points': len(score.points),
                'num_in_front': int(np.sum(score.in_front)),
                'in_front_ratio1': score.in_front_ratio1,
                'in_front_ratio2': score.in_front_ratio2,
                'reprojection_error1': score.reprojection_error1,
                'reprojection_error2': score.reprojection_error2,
                'selected': score.hypothesis == self.selected,
            })
        return pd.DataFrame(rows).set_index('hypothesis')


@dataclass
class ReconstructionResult:
    """
    Output of the end-to-end two-view reconstruction.

    Attributes:
        inlier_mask: Robust-fit inliers AND cheirality-passing points, aligned
            with the input correspondences
        points: 3D points (Mx3), M == inlier_mask.sum(), in the frame of camera 1
        R: Rotation of camera 2 relative to camera 1
        T: Translation of camera 2 relative to camera 1 (unit norm)
        F: Fundamental matrix from the robust fit
        E: Essential matrix after singular value correction
        selection: Diagnostics of all four hypotheses
    """
    inlier_mask: np.ndarray
    points: np.ndarray
    R: np.ndarray
    T: np.ndarray
    F: np.ndarray
    E: np.ndarray
    selection: HypothesisSelection = field(repr=False, default=None)

    @property
    def num_points(self) -> int:
        return len(self.points)

    def as_tuple(self):
        """(inlier_mask, points, R, T)"""
        return self.inlier_mask, self.points, self.R, self.T
