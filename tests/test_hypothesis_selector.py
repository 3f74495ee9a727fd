import numpy as np
import pytest

from TwoViewReconstruction.algorithms.selection import HypothesisSelector, select_hypothesis
from TwoViewReconstruction.config import SelectionConfig
from TwoViewReconstruction.core.exceptions import (
    InsufficientCorrespondencesError,
    NoConsistentHypothesisError
)
from TwoViewReconstruction.core.structures import PoseHypothesis

from conftest import make_scene


def true_hypothesis(selection, scene):
    for score in selection.scores:
        if (np.allclose(score.candidate.R, scene.R, atol=1e-6)
                and np.allclose(score.candidate.T, scene.unit_T, atol=1e-6)):
            return score.hypothesis
    raise AssertionError("true pose is not among the hypotheses")


def test_selects_true_pose(scene):
    mask = np.ones(len(scene.pts1), dtype=bool)
    selection, points, refined_mask = select_hypothesis(
        scene.pts1, scene.K1, scene.pts2, scene.K2, scene.essential, mask
    )

    assert selection.success
    assert selection.selected == true_hypothesis(selection, scene)
    assert selection.best.in_front_ratio1 == 1.0
    assert selection.best.in_front_ratio2 == 1.0

    assert refined_mask.all()
    assert np.count_nonzero(refined_mask) == len(points)

    scale = np.linalg.norm(scene.T)
    np.testing.assert_allclose(points * scale, scene.points, rtol=1e-6, atol=1e-6)


def test_every_hypothesis_is_scored(scene):
    mask = np.ones(len(scene.pts1), dtype=bool)
    selection, _, _ = select_hypothesis(scene.pts1, scene.K1, scene.pts2, scene.K2,
                                        scene.essential, mask)

    assert [s.hypothesis for s in selection.scores] == list(PoseHypothesis)
    for score in selection.scores:
        assert len(score.points) == len(scene.pts1)
        if score.hypothesis != selection.selected:
            assert not score.passes(0.75)

    frame = selection.summary_frame()
    assert list(frame.index) == ['RT1', 'RT2', 'RT3', 'RT4']
    assert frame['selected'].sum() == 1
    assert frame.loc[str(selection.selected), 'in_front_ratio1'] == 1.0
    assert frame.loc[str(selection.selected), 'reprojection_error1'] < 1e-6


def test_masked_out_correspondences_stay_out(scene):
    mask = np.ones(len(scene.pts1), dtype=bool)
    mask[[0, 5, 17]] = False

    _, points, refined_mask = select_hypothesis(scene.pts1, scene.K1, scene.pts2, scene.K2,
                                                scene.essential, mask)

    assert not refined_mask[[0, 5, 17]].any()
    assert np.count_nonzero(refined_mask) == len(points) == len(scene.pts1) - 3


def test_points_behind_cameras_are_dropped(random_points, camera_matrix, relative_pose):
    R, T = relative_pose
    behind = np.array([[0.5, 0.2, -6.0], [-1.0, 0.4, -8.0], [0.3, -0.7, -7.0]])
    scene = make_scene(np.vstack([random_points, behind]), camera_matrix, camera_matrix, R, T)

    mask = np.ones(len(scene.pts1), dtype=bool)
    selection, points, refined_mask = select_hypothesis(
        scene.pts1, scene.K1, scene.pts2, scene.K2, scene.essential, mask
    )

    assert selection.selected == true_hypothesis(selection, scene)
    assert refined_mask[:len(random_points)].all()
    assert not refined_mask[len(random_points):].any()
    assert np.count_nonzero(refined_mask) == len(points) == len(random_points)


def test_no_consistent_hypothesis(scene):
    selector = HypothesisSelector(SelectionConfig(min_in_front_ratio=1.0))
    mask = np.ones(len(scene.pts1), dtype=bool)

    with pytest.raises(NoConsistentHypothesisError) as excinfo:
        selector.select(scene.pts1, scene.K1, scene.pts2, scene.K2, scene.essential, mask)

    selection = excinfo.value.selection
    assert not selection.success
    assert selection.best is None
    assert len(selection.scores) == 4
    assert not selection.summary_frame()['selected'].any()


def test_empty_inlier_set_raises(scene):
    mask = np.zeros(len(scene.pts1), dtype=bool)
    with pytest.raises(InsufficientCorrespondencesError):
        select_hypothesis(scene.pts1, scene.K1, scene.pts2, scene.K2, scene.essential, mask)


def test_mask_length_must_match(scene):
    with pytest.raises(InsufficientCorrespondencesError):
        select_hypothesis(scene.pts1, scene.K1, scene.pts2, scene.K2, scene.essential,
                          np.ones(len(scene.pts1) - 1, dtype=bool))


def test_parallel_evaluation_keeps_order(scene):
    mask = np.ones(len(scene.pts1), dtype=bool)
    sequential = HypothesisSelector()
    parallel = HypothesisSelector(SelectionConfig(max_workers=4))

    expected, points, _ = sequential.select(scene.pts1, scene.K1, scene.pts2, scene.K2,
                                            scene.essential, mask)
    actual, parallel_points, _ = parallel.select(scene.pts1, scene.K1, scene.pts2, scene.K2,
                                                 scene.essential, mask)

    assert [s.hypothesis for s in actual.scores] == [s.hypothesis for s in expected.scores]
    assert actual.selected == expected.selected
    np.testing.assert_array_equal(parallel_points, points)
