"""
Rotation validation utilities
"""

import numpy as np
from scipy.spatial.transform import Rotation

from ....config import NUMERIC_TOLERANCE


def is_valid_rotation(R: np.ndarray, tolerance: float = NUMERIC_TOLERANCE) -> bool:
    """
    Check if matrix is a proper rotation matrix

    Args:
        R: Matrix to check
        tolerance: Absolute numerical tolerance

    Returns:
        True if R is 3x3, orthogonal and det(R) == +1
    """
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        return False

    # R^T R = I
    if not np.allclose(R.T @ R, np.eye(3), atol=tolerance):
        return False

    return abs(np.linalg.det(R) - 1.0) <= tolerance


def rotation_angle_deg(R: np.ndarray) -> float:
    """
    Rotation angle of a rotation matrix

    Args:
        R: Rotation matrix

    Returns:
        Rotation angle in degrees
    """
    return float(np.degrees(Rotation.from_matrix(R).magnitude()))
