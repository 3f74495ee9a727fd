"""
Essential matrix decomposition into relative pose hypotheses
=============================================================

An essential matrix E = U diag(1, 1, 0) Vt factors into four (R, T) pairs:
R in {U W Vt, U Wt Vt} and T in {+u3, -u3}, where u3 is the last column of U.
Only one of them puts the scene in front of both cameras; picking it is the
job of the hypothesis selector.
"""

from typing import List, Optional

import numpy as np

from ....config import PoseDecompositionConfig
from ....core.structures import PoseCandidate, PoseHypothesis
from ....logger import get_logger
from ....utils import is_close
from .validators import is_valid_rotation

logger = get_logger("pose")


def _constant(matrix) -> np.ndarray:
    array = np.array(matrix, dtype=np.float64)
    array.setflags(write=False)
    return array


W = _constant([[0, -1, 0],
               [1,  0, 0],
               [0,  0, 1]])


def decompose_pose(E: np.ndarray,
                   config: Optional[PoseDecompositionConfig] = None) -> List[PoseCandidate]:
    """
    Extract the four (R, T) hypotheses from an essential matrix.

    When U W Vt is a reflection (det == -1) the essential matrix is negated
    and decomposed again, at most config.max_sign_retries times.

    Args:
        E: Essential matrix (3x3), already projected onto the essential manifold
        config: Decomposition parameters

    Returns:
        Four PoseCandidate in the fixed order RT1 (R1, T1), RT2 (R1, T2),
        RT3 (R2, T1), RT4 (R2, T2); an empty list when no proper rotation
        was found within the retry bound.
    """
    config = config or PoseDecompositionConfig()
    essential = np.asarray(E, dtype=np.float64)
    assert essential.shape == (3, 3)

    U, _, Vt = np.linalg.svd(essential)
    R1 = U @ W @ Vt

    retries = 0
    while is_close(np.linalg.det(R1), -1.0) and retries < config.max_sign_retries:
        essential = -essential
        U, _, Vt = np.linalg.svd(essential)
        R1 = U @ W @ Vt
        retries += 1

    if is_close(np.linalg.det(R1), -1.0):
        logger.warning(f"No proper rotation after {retries} sign retries; "
                       f"essential matrix cannot be decomposed")
        return []

    if retries:
        logger.debug(f"Proper rotation found after {retries} sign retries")

    R2 = U @ W.T @ Vt
    T1 = U[:, 2].reshape(3, 1).copy()
    T2 = -T1

    assert is_valid_rotation(R1) and is_valid_rotation(R2)

    return [
        PoseCandidate(PoseHypothesis.RT1, R1, T1),
        PoseCandidate(PoseHypothesis.RT2, R1, T2),
        PoseCandidate(PoseHypothesis.RT3, R2, T1),
        PoseCandidate(PoseHypothesis.RT4, R2, T2),
    ]
