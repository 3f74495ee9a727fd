"""
Projection of 3D points into a camera, the dual of triangulation.
"""

import numpy as np

from ...core.exceptions import NumericalDegeneracyError
from ...utils import as_points, to_homogeneous


def get_projection(R: np.ndarray, T: np.ndarray) -> np.ndarray:
    """
    Build the 3x4 extrinsic projection matrix [R | T]

    Args:
        R: Rotation (3x3)
        T: Translation (3x1 or 3,)

    Returns:
        P (3x4)
    """
    R = np.asarray(R, dtype=np.float64)
    T = np.asarray(T, dtype=np.float64).reshape(3, 1)
    assert R.shape == (3, 3)
    return np.hstack([R, T])


def transform_point(X: np.ndarray, R: np.ndarray, T: np.ndarray) -> np.ndarray:
    """Rigidly transform a 3D point (or Nx3 points) into another frame: R X + T"""
    X = np.asarray(X, dtype=np.float64)
    T = np.asarray(T, dtype=np.float64).reshape(3)
    return X @ np.asarray(R, dtype=np.float64).T + T


def project_point(X: np.ndarray, P: np.ndarray) -> np.ndarray:
    """
    Project one 3D point with a 3x4 projection matrix.

    Args:
        X: 3D point (3,)
        P: Projection matrix (3x4), typically K [R | T]

    Returns:
        Image coordinates (2,)

    Raises:
        NumericalDegeneracyError: The point lies on the camera plane (w == 0)
    """
    P = np.asarray(P, dtype=np.float64)
    assert P.shape == (3, 4)

    X = np.asarray(X, dtype=np.float64).reshape(3)
    wx, wy, w = P @ np.append(X, 1.0)

    if w == 0.0:
        raise NumericalDegeneracyError(f"Point {X} projects with w == 0 (on the camera plane)")

    return np.array([wx / w, wy / w])


def project_points(points: np.ndarray, P: np.ndarray) -> np.ndarray:
    """
    Project a sequence of 3D points with a 3x4 projection matrix.

    Args:
        points: 3D points (Nx3)
        P: Projection matrix (3x4)

    Returns:
        Image coordinates (Nx2), index-aligned with points

    Raises:
        NumericalDegeneracyError: Any point projects with w == 0
    """
    P = np.asarray(P, dtype=np.float64)
    assert P.shape == (3, 4)

    points = as_points(points, dim=3)
    projected = to_homogeneous(points) @ P.T
    w = projected[:, 2]

    if np.any(w == 0.0):
        bad = np.flatnonzero(w == 0.0)
        raise NumericalDegeneracyError(f"Points {bad.tolist()} project with w == 0")

    return projected[:, :2] / w[:, None]


def project_with_pose(X: np.ndarray, R: np.ndarray, T: np.ndarray, K: np.ndarray) -> np.ndarray:
    """Project one 3D point through P = K [R | T]"""
    K = np.asarray(K, dtype=np.float64)
    P = get_projection(R, T)
    assert K.shape[1] == P.shape[0]
    return project_point(X, K @ P)


def project_points_with_pose(points: np.ndarray, R: np.ndarray, T: np.ndarray,
                             K: np.ndarray) -> np.ndarray:
    """Project 3D points (Nx3) through P = K [R | T]"""
    K = np.asarray(K, dtype=np.float64)
    P = get_projection(R, T)
    assert K.shape[1] == P.shape[0]
    return project_points(points, K @ P)


def reprojection_errors(points: np.ndarray, observed: np.ndarray, P: np.ndarray) -> np.ndarray:
    """
    Euclidean distance between observed image points and the projections
    of their 3D points.

    Args:
        points: 3D points (Nx3)
        observed: Observed image points (Nx2)
        P: Projection matrix (3x4)

    Returns:
        Per-point reprojection errors (N,)
    """
    observed = as_points(observed)
    projected = project_points(points, P)
    assert projected.shape == observed.shape
    return np.linalg.norm(projected - observed, axis=1)
