from typing import Sequence, Tuple, Union

import numpy as np

from .config import NUMERIC_TOLERANCE
from .core.exceptions import InsufficientCorrespondencesError

PointsLike = Union[np.ndarray, Sequence[Sequence[float]]]


def is_close(a: float, b: float, tolerance: float = NUMERIC_TOLERANCE) -> bool:
    """Absolute-tolerance equality used throughout the geometry modules"""
    return abs(a - b) <= tolerance


def as_points(points: PointsLike, dim: int = 2, name: str = "points") -> np.ndarray:
    """
    Coerce a sequence of points to a contiguous (N, dim) float64 array.

    Accepts (N, dim), (N, 1, dim) (OpenCV layout) and lists of tuples.

    Raises:
        InsufficientCorrespondencesError: If the points are not dim-dimensional
            or contain non-finite values
    """
    array = np.asarray(points, dtype=np.float64)

    if array.size == 0:
        return np.empty((0, dim), dtype=np.float64)

    if array.ndim == 3 and array.shape[1] == 1:
        array = array.reshape(-1, array.shape[2])

    if array.ndim == 1 and array.shape[0] == dim:
        array = array.reshape(1, dim)

    if array.ndim != 2 or array.shape[1] != dim:
        raise InsufficientCorrespondencesError(
            f"{name} must have shape (N, {dim}), got {array.shape}"
        )

    if not np.all(np.isfinite(array)):
        raise InsufficientCorrespondencesError(f"{name} contain NaN or inf values")

    return np.ascontiguousarray(array)


def validate_correspondences(pts1: PointsLike, pts2: PointsLike,
                             min_points: int = 1) -> Tuple[np.ndarray, np.ndarray]:
    """
    Validate two parallel sequences of 2D correspondences.

    Args:
        pts1: Points in first image (Nx2)
        pts2: Points in second image (Nx2)
        min_points: Minimum number of correspondences required

    Returns:
        Both sequences as (N, 2) float64 arrays

    Raises:
        InsufficientCorrespondencesError: Mismatched lengths, malformed points
            or fewer than min_points correspondences
    """
    pts1 = as_points(pts1, name="pts1")
    pts2 = as_points(pts2, name="pts2")

    if len(pts1) != len(pts2):
        raise InsufficientCorrespondencesError(
            f"Mismatched correspondence lengths: {len(pts1)} != {len(pts2)}"
        )

    if len(pts1) < min_points:
        raise InsufficientCorrespondencesError(
            f"Insufficient correspondences: {len(pts1)} < {min_points}"
        )

    return pts1, pts2


def as_mask(mask, length: int) -> np.ndarray:
    """Boolean (N,) view of an OpenCV-style (N, 1) uint8 mask"""
    mask = np.asarray(mask).ravel().astype(bool)
    if len(mask) != length:
        raise InsufficientCorrespondencesError(
            f"Inlier mask length {len(mask)} does not match {length} correspondences"
        )
    return mask


def apply_mask(values: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Keep the entries of an index-aligned sequence where mask is true"""
    assert len(values) == len(mask)
    return values[np.asarray(mask, dtype=bool)]


def masked_indices(mask: np.ndarray) -> np.ndarray:
    """Original indices of the true entries of a mask"""
    return np.flatnonzero(np.asarray(mask, dtype=bool))


def to_homogeneous(points: np.ndarray) -> np.ndarray:
    """Append a column of ones: (N, d) -> (N, d + 1)"""
    return np.hstack([points, np.ones((len(points), 1))])
