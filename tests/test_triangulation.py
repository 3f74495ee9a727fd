import numpy as np
import pytest

from TwoViewReconstruction import (
    iterative_triangulate_point,
    triangulate_point,
    triangulate_set
)
from TwoViewReconstruction.algorithms.geometry.projection import reprojection_errors
from TwoViewReconstruction.algorithms.geometry.triangulation import (
    normalize_points,
    triangulate_points
)
from TwoViewReconstruction.config import TriangulationConfig
from TwoViewReconstruction.core.exceptions import (
    InsufficientCorrespondencesError,
    NumericalDegeneracyError
)


def test_linear_triangulation_recovers_point(scene):
    for i in range(5):
        X = triangulate_point(scene.pts1[i], scene.P1, scene.pts2[i], scene.P2)
        assert X.shape == (3,)
        np.testing.assert_allclose(X, scene.points[i], rtol=1e-6, atol=1e-6)


def test_iterative_triangulation_recovers_point(scene):
    X, info = iterative_triangulate_point(scene.pts1[0], scene.P1, scene.pts2[0], scene.P2,
                                          full_output=True)

    np.testing.assert_allclose(X, scene.points[0], rtol=1e-6, atol=1e-6)
    assert info.converged
    assert info.iterations <= 10
    # Converged weights are the projective depths of the point
    assert info.weights[0] == pytest.approx(scene.points[0, 2], rel=1e-6)


def test_iteration_cap(scene):
    rng = np.random.default_rng(5)
    x1 = scene.pts1[1] + rng.normal(scale=2.0, size=2)
    x2 = scene.pts2[1] + rng.normal(scale=2.0, size=2)

    _, info = iterative_triangulate_point(x1, scene.P1, x2, scene.P2,
                                          TriangulationConfig(max_iterations=1),
                                          full_output=True)
    assert info.iterations <= 1

    _, info = iterative_triangulate_point(x1, scene.P1, x2, scene.P2, full_output=True)
    assert info.iterations <= 10


def test_iterative_does_not_increase_reprojection_error(scene):
    rng = np.random.default_rng(17)
    noisy1 = scene.pts1 + rng.normal(scale=1.0, size=scene.pts1.shape)
    noisy2 = scene.pts2 + rng.normal(scale=1.0, size=scene.pts2.shape)

    linear = triangulate_points(noisy1, scene.P1, noisy2, scene.P2, iterative=False)
    iterative = triangulate_points(noisy1, scene.P1, noisy2, scene.P2, iterative=True)

    def squared_error(points):
        return (np.sum(reprojection_errors(points, noisy1, scene.P1) ** 2)
                + np.sum(reprojection_errors(points, noisy2, scene.P2) ** 2))

    assert squared_error(iterative) <= squared_error(linear) * 1.001


def test_zero_depth_weight_raises(scene):
    config = TriangulationConfig(degenerate_weight_tolerance=1e3)
    with pytest.raises(NumericalDegeneracyError):
        iterative_triangulate_point(scene.pts1[0], scene.P1, scene.pts2[0], scene.P2, config)


def test_triangulate_set_recovers_scene(scene):
    points = triangulate_set(scene.pts1, scene.K1, scene.pts2, scene.K2, scene.R, scene.T)

    assert points.shape == scene.points.shape
    np.testing.assert_allclose(points, scene.points, rtol=1e-6, atol=1e-6)


def test_triangulate_set_scale_follows_translation(scene):
    points = triangulate_set(scene.pts1, scene.K1, scene.pts2, scene.K2, scene.R, scene.unit_T)

    scale = np.linalg.norm(scene.T)
    np.testing.assert_allclose(points * scale, scene.points, rtol=1e-6, atol=1e-6)


def test_triangulate_set_rejects_mismatched_lengths(scene):
    with pytest.raises(InsufficientCorrespondencesError):
        triangulate_set(scene.pts1, scene.K1, scene.pts2[:-2], scene.K2, scene.R, scene.T)


def test_parallel_triangulation_matches_sequential(scene):
    sequential = triangulate_points(scene.pts1, scene.P1, scene.pts2, scene.P2)
    parallel = triangulate_points(scene.pts1, scene.P1, scene.pts2, scene.P2,
                                  config=TriangulationConfig(max_workers=4))

    np.testing.assert_array_equal(parallel, sequential)


def test_normalize_points(camera_matrix):
    pts = np.array([[320.0, 240.0], [1120.0, 240.0]])
    normalized = normalize_points(pts, camera_matrix)

    np.testing.assert_allclose(normalized, [[0.0, 0.0], [1.0, 0.0]])


def test_normalize_points_requires_unit_homogeneous_row(camera_matrix):
    K = camera_matrix.copy()
    K[2, 2] = 2.0
    with pytest.raises(AssertionError):
        normalize_points([[100.0, 100.0]], K)
