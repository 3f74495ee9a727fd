"""
Two-view geometry

Components:
- fundamental: robust fundamental matrix fit (RANSAC)
- essential: essential matrix from F and intrinsics
- pose: the four (R, T) hypotheses of an essential matrix
- triangulation: linear and iteratively reweighted triangulation
- projection: 3D -> 2D projection and reprojection errors
"""

from .fundamental import FundamentalMatrixEstimator, estimate_fundamental
from .essential import D, essential_from_fundamental, assess_essential_matrix
from .pose import W, decompose_pose, is_valid_rotation, rotation_angle_deg
from .triangulation import (
    triangulate_point,
    iterative_triangulate_point,
    triangulate_points,
    triangulate_set,
    normalize_points
)
from .projection import (
    get_projection,
    transform_point,
    project_point,
    project_points,
    project_with_pose,
    project_points_with_pose,
    reprojection_errors
)

__all__ = [
    'FundamentalMatrixEstimator',
    'estimate_fundamental',
    'D',
    'essential_from_fundamental',
    'assess_essential_matrix',
    'W',
    'decompose_pose',
    'is_valid_rotation',
    'rotation_angle_deg',
    'triangulate_point',
    'iterative_triangulate_point',
    'triangulate_points',
    'triangulate_set',
    'normalize_points',
    'get_projection',
    'transform_point',
    'project_point',
    'project_points',
    'project_with_pose',
    'project_points_with_pose',
    'reprojection_errors',
]
