"""
Shared synthetic two-view scenes for the test suite.

All scenes use the convention X2 = R X1 + T: points are expressed in the
frame of camera 1 ([I | 0]) and camera 2 is [R | T].
"""

from dataclasses import dataclass

import numpy as np
import pytest
from scipy.spatial.transform import Rotation


@dataclass
class Scene:
    points: np.ndarray  # Nx3, frame of camera 1
    pts1: np.ndarray    # Nx2 pixels in camera 1
    pts2: np.ndarray    # Nx2 pixels in camera 2
    K1: np.ndarray
    K2: np.ndarray
    R: np.ndarray
    T: np.ndarray       # 3x1

    @property
    def P1(self) -> np.ndarray:
        return self.K1 @ np.hstack([np.eye(3), np.zeros((3, 1))])

    @property
    def P2(self) -> np.ndarray:
        return self.K2 @ np.hstack([self.R, self.T])

    @property
    def unit_T(self) -> np.ndarray:
        return self.T / np.linalg.norm(self.T)

    @property
    def essential(self) -> np.ndarray:
        t = self.T.ravel()
        t_cross = np.array([[0, -t[2], t[1]],
                            [t[2], 0, -t[0]],
                            [-t[1], t[0], 0]])
        return t_cross @ self.R


def project(points: np.ndarray, P: np.ndarray) -> np.ndarray:
    homogeneous = np.hstack([points, np.ones((len(points), 1))]) @ P.T
    return homogeneous[:, :2] / homogeneous[:, 2:3]


def make_scene(points: np.ndarray, K1: np.ndarray, K2: np.ndarray,
               R: np.ndarray, T: np.ndarray) -> Scene:
    T = np.asarray(T, dtype=np.float64).reshape(3, 1)
    pts1 = project(points, K1 @ np.hstack([np.eye(3), np.zeros((3, 1))]))
    pts2 = project(points, K2 @ np.hstack([R, T]))
    return Scene(points, pts1, pts2, K1, K2, R, T)


@pytest.fixture
def camera_matrix() -> np.ndarray:
    return np.array([[800.0, 0.0, 320.0],
                     [0.0, 800.0, 240.0],
                     [0.0, 0.0, 1.0]])


@pytest.fixture
def relative_pose():
    R = Rotation.from_euler('xyz', [4.0, -12.0, 2.0], degrees=True).as_matrix()
    T = np.array([[-1.0], [0.1], [0.15]])
    return R, T


@pytest.fixture
def random_points() -> np.ndarray:
    rng = np.random.default_rng(7)
    return np.column_stack([
        rng.uniform(-2.0, 2.0, 60),
        rng.uniform(-1.5, 1.5, 60),
        rng.uniform(6.0, 12.0, 60),
    ])


@pytest.fixture
def scene(random_points, camera_matrix, relative_pose) -> Scene:
    """60 points in front of both cameras, realistic intrinsics, no noise"""
    R, T = relative_pose
    return make_scene(random_points, camera_matrix, camera_matrix.copy(), R, T)


@pytest.fixture
def cube_scene() -> Scene:
    """
    The 8 corners of a cube seen by identity-intrinsics cameras.

    Camera 2 sits at C = (2, 0.5, 1) rotated -15 degrees about y, so the
    corners are in front of both cameras and the corners plus both camera
    centres do not lie on a ruled quadric (the fundamental matrix is unique).
    """
    corners = np.array([[x, y, z]
                        for x in (-1.0, 1.0)
                        for y in (-1.0, 1.0)
                        for z in (4.0, 6.0)])
    R = Rotation.from_euler('y', -15.0, degrees=True).as_matrix()
    center = np.array([2.0, 0.5, 1.0])
    T = -R @ center
    K = np.eye(3)
    return make_scene(corners, K, K.copy(), R, T)
