"""
Two-view triangulation
======================

Linear (DLT-style) triangulation solves the 4x3 system obtained from the
cross-product form of x ~ P X for both views. The iterative variant
reweights each view's equations by the projective depth P[2] . X of the
previous estimate, which moves the solution from the algebraic optimum
towards the reprojection-error optimum (Hartley & Sturm, "Triangulation",
CVIU 1997, iterative linear method).
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from ...config import TriangulationConfig
from ...core.exceptions import NumericalDegeneracyError
from ...core.structures import IterativeTriangulationInfo
from ...logger import get_logger
from ...utils import PointsLike, as_points, is_close, validate_correspondences
from .projection import get_projection

logger = get_logger("triangulation")


def _linear_system(x1: np.ndarray, P1: np.ndarray,
                   x2: np.ndarray, P2: np.ndarray,
                   w1: float = 1.0, w2: float = 1.0) -> Tuple[np.ndarray, np.ndarray]:
    """Inhomogeneous 4x3 system A X = B, each view's rows divided by its weight"""
    A = np.vstack([
        (x1[0] * P1[2, :3] - P1[0, :3]) / w1,
        (x1[1] * P1[2, :3] - P1[1, :3]) / w1,
        (x2[0] * P2[2, :3] - P2[0, :3]) / w2,
        (x2[1] * P2[2, :3] - P2[1, :3]) / w2,
    ])
    B = -np.array([
        [(x1[0] * P1[2, 3] - P1[0, 3]) / w1],
        [(x1[1] * P1[2, 3] - P1[1, 3]) / w1],
        [(x2[0] * P2[2, 3] - P2[0, 3]) / w2],
        [(x2[1] * P2[2, 3] - P2[1, 3]) / w2],
    ])
    return A, B


def _solve(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    _, X = cv2.solve(A, B, flags=cv2.DECOMP_SVD)
    return X.reshape(3)


def _as_projection(P: np.ndarray) -> np.ndarray:
    P = np.asarray(P, dtype=np.float64)
    assert P.shape == (3, 4)
    return P


def triangulate_point(x1: np.ndarray, P1: np.ndarray,
                      x2: np.ndarray, P2: np.ndarray) -> np.ndarray:
    """
    Linear triangulation of one correspondence.

    Args:
        x1: Point in first view (2,)
        P1: Projection matrix of first view (3x4)
        x2: Point in second view (2,)
        P2: Projection matrix of second view (3x4)

    Returns:
        3D point (3,)
    """
    P1, P2 = _as_projection(P1), _as_projection(P2)
    x1 = np.asarray(x1, dtype=np.float64).reshape(2)
    x2 = np.asarray(x2, dtype=np.float64).reshape(2)

    A, B = _linear_system(x1, P1, x2, P2)
    return _solve(A, B)


def iterative_triangulate_point(x1: np.ndarray, P1: np.ndarray,
                                x2: np.ndarray, P2: np.ndarray,
                                config: Optional[TriangulationConfig] = None,
                                full_output: bool = False
                                ) -> Union[np.ndarray, Tuple[np.ndarray, IterativeTriangulationInfo]]:
    """
    Iteratively reweighted linear triangulation of one correspondence.

    Starts from the linear solution and re-solves with each view's equations
    divided by the previous estimate's depth weight w = P[2] . X, until both
    weights stop changing or config.max_iterations re-solves were made.

    Args:
        x1: Point in first view (2,)
        P1: Projection matrix of first view (3x4)
        x2: Point in second view (2,)
        P2: Projection matrix of second view (3x4)
        config: Iteration cap and degeneracy tolerance
        full_output: Also return IterativeTriangulationInfo

    Returns:
        3D point (3,), or (point, info) when full_output is true

    Raises:
        NumericalDegeneracyError: A depth weight is zero (point at infinity
            or on a camera plane)
    """
    config = config or TriangulationConfig()
    P1, P2 = _as_projection(P1), _as_projection(P2)
    x1 = np.asarray(x1, dtype=np.float64).reshape(2)
    x2 = np.asarray(x2, dtype=np.float64).reshape(2)

    A, B = _linear_system(x1, P1, x2, P2)
    X = _solve(A, B)

    w1, w2 = 1.0, 1.0
    iterations = 0
    converged = False

    for _ in range(config.max_iterations):
        Xh = np.append(X, 1.0)
        p2x1 = float(P1[2] @ Xh)
        p2x2 = float(P2[2] @ Xh)

        if is_close(w1, p2x1) and is_close(w2, p2x2):
            converged = True
            break

        w1, w2 = p2x1, p2x2
        if abs(w1) <= config.degenerate_weight_tolerance or abs(w2) <= config.degenerate_weight_tolerance:
            raise NumericalDegeneracyError(
                f"Zero depth weight ({w1:.3g}, {w2:.3g}) while triangulating {x1} <-> {x2}"
            )

        A, B = _linear_system(x1, P1, x2, P2, w1, w2)
        X = _solve(A, B)
        iterations += 1

    if full_output:
        return X, IterativeTriangulationInfo(iterations=iterations,
                                             converged=converged,
                                             weights=(w1, w2))
    return X


def triangulate_points(pts1: PointsLike, P1: np.ndarray,
                       pts2: PointsLike, P2: np.ndarray,
                       iterative: bool = True,
                       config: Optional[TriangulationConfig] = None) -> np.ndarray:
    """
    Triangulate every correspondence independently.

    Args:
        pts1: Points in first view (Nx2)
        P1: Projection matrix of first view (3x4)
        pts2: Points in second view (Nx2)
        P2: Projection matrix of second view (3x4)
        iterative: Use reweighted triangulation instead of the linear solve
        config: Triangulation parameters; max_workers > 1 spreads the points
            over a thread pool

    Returns:
        3D points (Nx3), index-aligned with the correspondences
    """
    config = config or TriangulationConfig()
    pts1, pts2 = validate_correspondences(pts1, pts2)
    P1, P2 = _as_projection(P1), _as_projection(P2)

    if iterative:
        def solve_one(i):
            return iterative_triangulate_point(pts1[i], P1, pts2[i], P2, config)
    else:
        def solve_one(i):
            return triangulate_point(pts1[i], P1, pts2[i], P2)

    indices = range(len(pts1))
    if config.max_workers and config.max_workers > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
            points = list(executor.map(solve_one, indices))
    else:
        points = [solve_one(i) for i in indices]

    logger.debug(f"Triangulated {len(points)} points "
                 f"({'iterative' if iterative else 'linear'})")

    return np.array(points, dtype=np.float64).reshape(-1, 3)


def normalize_points(pts: PointsLike, K: np.ndarray) -> np.ndarray:
    """
    Map pixel coordinates to calibrated camera rays: K^-1 [x, y, 1]^T.

    Args:
        pts: Image points (Nx2)
        K: Camera intrinsics (3x3)

    Returns:
        Normalized image coordinates (Nx2)
    """
    pts = as_points(pts)
    K = np.asarray(K, dtype=np.float64)
    assert K.shape == (3, 3)

    rays = np.hstack([pts, np.ones((len(pts), 1))]) @ np.linalg.inv(K).T

    assert all(is_close(w, 1.0) for w in rays[:, 2]), "K^-1 changed the homogeneous coordinate"
    return rays[:, :2]


def triangulate_set(pts1: PointsLike, K1: np.ndarray,
                    pts2: PointsLike, K2: np.ndarray,
                    R: np.ndarray, T: np.ndarray,
                    config: Optional[TriangulationConfig] = None) -> np.ndarray:
    """
    Triangulate pixel correspondences for a known relative pose.

    The first camera is [I | 0] and the second [R | T]; the points are first
    normalized by the inverse intrinsics and then triangulated with the
    iterative method.

    Args:
        pts1: Pixel points in first image (Nx2)
        K1: Intrinsics of the first camera (3x3)
        pts2: Pixel points in second image (Nx2)
        K2: Intrinsics of the second camera (3x3)
        R: Rotation of the second camera (3x3)
        T: Translation of the second camera (3x1)
        config: Triangulation parameters

    Returns:
        3D points (Nx3) in the frame of the first camera
    """
    R = np.asarray(R, dtype=np.float64)
    T = np.asarray(T, dtype=np.float64)
    assert R.shape == (3, 3)
    assert T.size == 3

    pts1, pts2 = validate_correspondences(pts1, pts2)

    P1 = get_projection(np.eye(3), np.zeros(3))
    P2 = get_projection(R, T)

    assert np.shape(K1)[1] == P1.shape[0] and np.shape(K2)[1] == P2.shape[0]

    normalized1 = normalize_points(pts1, K1)
    normalized2 = normalize_points(pts2, K2)

    return triangulate_points(normalized1, P1, normalized2, P2, iterative=True, config=config)
