"""
Essential matrix construction from a fundamental matrix and known intrinsics.
"""

from typing import Dict

import numpy as np

from ...logger import get_logger

logger = get_logger("essential")


def _constant(matrix) -> np.ndarray:
    array = np.array(matrix, dtype=np.float64)
    array.setflags(write=False)
    return array


# Singular value pattern of a valid essential matrix
D = _constant([[1, 0, 0],
               [0, 1, 0],
               [0, 0, 0]])


def essential_from_fundamental(F: np.ndarray, K1: np.ndarray, K2: np.ndarray) -> np.ndarray:
    """
    Lift a fundamental matrix to an essential matrix.

    Computes E = K2^T F K1 and projects it onto the essential manifold by
    replacing its singular values with (1, 1, 0): E' = U diag(1, 1, 0) Vt.

    Args:
        F: Fundamental matrix (3x3), x2^T F x1 = 0
        K1: Intrinsics of the first camera (3x3)
        K2: Intrinsics of the second camera (3x3)

    Returns:
        Corrected essential matrix (3x3)
    """
    F = np.asarray(F, dtype=np.float64)
    K1 = np.asarray(K1, dtype=np.float64)
    K2 = np.asarray(K2, dtype=np.float64)

    # K2.T is on the left, so K2 rows must match F rows
    assert K2.shape[0] == F.shape[0] and F.shape[1] == K1.shape[0]
    assert F.shape == (3, 3)

    E = K2.T @ F @ K1

    U, S, Vt = np.linalg.svd(E)
    logger.debug(f"Uncorrected essential singular values: {S}")

    assert U.shape[1] == D.shape[0] and D.shape[1] == Vt.shape[0]
    return U @ D @ Vt


def assess_essential_matrix(E: np.ndarray) -> Dict:
    """
    Assess how close a matrix is to a valid essential matrix

    Args:
        E: Essential matrix

    Returns:
        Quality assessment dictionary
    """
    if E is None or np.shape(E) != (3, 3):
        return {
            'quality_score': 0.0,
            'is_valid': False,
            'warnings': ['Matrix is None or wrong shape']
        }

    S = np.linalg.svd(E, compute_uv=False)
    s1, s2, s3 = S
    warnings_list = []
    quality_score = 0.0

    # Ideal: two equal singular values, one zero
    if s1 > 1e-12:
        sigma_ratio = s2 / s1
        sigma3_ratio = s3 / s1

        if abs(sigma_ratio - 1.0) < 0.1:
            quality_score += 0.5
        else:
            warnings_list.append(f'Singular values not equal: s2/s1 = {sigma_ratio:.3f}')

        if sigma3_ratio < 0.1:
            quality_score += 0.3
        else:
            warnings_list.append(f'Third singular value too large: s3/s1 = {sigma3_ratio:.3f}')
    else:
        sigma_ratio = sigma3_ratio = 0.0
        warnings_list.append('Degenerate matrix: largest singular value near zero')

    rank = int(np.linalg.matrix_rank(E, tol=max(s1, 1.0) * 1e-6))
    if rank == 2:
        quality_score += 0.2
    else:
        warnings_list.append(f'Matrix rank is {rank}, should be 2')

    return {
        'quality_score': quality_score,
        'is_valid': len(warnings_list) == 0,
        'singular_values': S.tolist(),
        'sigma_ratio': float(sigma_ratio),
        'sigma3_ratio': float(sigma3_ratio),
        'matrix_rank': rank,
        'warnings': warnings_list
    }
