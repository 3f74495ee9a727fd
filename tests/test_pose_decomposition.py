import itertools

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from TwoViewReconstruction import decompose_pose
from TwoViewReconstruction.algorithms.geometry.pose import W, is_valid_rotation, rotation_angle_deg
from TwoViewReconstruction.config import PoseDecompositionConfig
from TwoViewReconstruction.core.structures import PoseHypothesis

_svd = np.linalg.svd


def forced_svd(reflections: int):
    """
    SVD whose first `reflections` calls make U W Vt a reflection and whose
    later calls make it a proper rotation. Flipping the last row of Vt keeps
    the factorization valid because the last singular value of E is zero.
    """
    calls = {'count': 0}

    def svd(matrix, *args, **kwargs):
        U, S, Vt = _svd(matrix, *args, **kwargs)
        calls['count'] += 1
        want_reflection = calls['count'] <= reflections
        is_reflection = np.linalg.det(U @ W @ Vt) < 0
        if want_reflection != is_reflection:
            Vt = Vt.copy()
            Vt[2] = -Vt[2]
        return U, S, Vt

    return svd, calls


def test_four_proper_rotations(scene):
    candidates = decompose_pose(scene.essential)

    assert len(candidates) == 4
    for candidate in candidates:
        assert np.linalg.det(candidate.R) == pytest.approx(1.0, abs=1e-9)
        assert is_valid_rotation(candidate.R)
        assert candidate.T.shape == (3, 1)
        assert np.linalg.norm(candidate.T) == pytest.approx(1.0)


def test_hypothesis_order(scene):
    candidates = decompose_pose(scene.essential)

    assert [c.hypothesis for c in candidates] == [PoseHypothesis.RT1, PoseHypothesis.RT2,
                                                  PoseHypothesis.RT3, PoseHypothesis.RT4]
    np.testing.assert_allclose(candidates[0].R, candidates[1].R)
    np.testing.assert_allclose(candidates[2].R, candidates[3].R)
    np.testing.assert_allclose(candidates[0].T, candidates[2].T)
    np.testing.assert_allclose(candidates[1].T, -candidates[0].T)
    np.testing.assert_allclose(candidates[3].T, -candidates[2].T)


def test_hypotheses_are_pairwise_distinct(scene):
    candidates = decompose_pose(scene.essential)

    for a, b in itertools.combinations(candidates, 2):
        same_R = np.allclose(a.R, b.R, atol=1e-6)
        same_T = np.allclose(a.T, b.T, atol=1e-6)
        assert not (same_R and same_T)


def test_true_pose_is_among_hypotheses(scene):
    candidates = decompose_pose(scene.essential)

    matches = [c for c in candidates
               if np.allclose(c.R, scene.R, atol=1e-6) and np.allclose(c.T, scene.unit_T, atol=1e-6)]
    assert len(matches) == 1


def test_negated_essential_matrix_decomposes(scene):
    assert len(decompose_pose(-scene.essential)) == 4


def test_sign_retry_recovers_proper_rotation(scene, monkeypatch):
    svd, calls = forced_svd(reflections=1)
    monkeypatch.setattr(np.linalg, "svd", svd)

    candidates = decompose_pose(scene.essential)

    assert calls['count'] == 2
    assert len(candidates) == 4
    assert all(is_valid_rotation(c.R) for c in candidates)


def test_sign_retries_are_bounded(scene, monkeypatch):
    svd, calls = forced_svd(reflections=100)
    monkeypatch.setattr(np.linalg, "svd", svd)

    assert decompose_pose(scene.essential) == []
    assert calls['count'] == 1 + PoseDecompositionConfig().max_sign_retries


def test_last_allowed_retry_succeeds(scene, monkeypatch):
    svd, _ = forced_svd(reflections=3)
    monkeypatch.setattr(np.linalg, "svd", svd)

    assert len(decompose_pose(scene.essential, PoseDecompositionConfig(max_sign_retries=3))) == 4


def test_w_is_read_only():
    with pytest.raises(ValueError):
        W[0, 1] = 1.0


def test_is_valid_rotation_rejects_reflection():
    R = Rotation.from_euler('z', 30, degrees=True).as_matrix()
    assert is_valid_rotation(R)
    assert not is_valid_rotation(-R)
    assert not is_valid_rotation(2.0 * R)
    assert not is_valid_rotation(np.eye(2))


def test_rotation_angle():
    R = Rotation.from_euler('x', 25, degrees=True).as_matrix()
    assert rotation_angle_deg(R) == pytest.approx(25.0)
    assert rotation_angle_deg(np.eye(3)) == pytest.approx(0.0)
