"""
Algorithms for two-view reconstruction

- geometry: fundamental/essential matrices, pose decomposition,
  triangulation and projection
- selection: cheirality-based choice among the four pose hypotheses
"""

from .geometry import (
    FundamentalMatrixEstimator,
    estimate_fundamental,
    essential_from_fundamental,
    assess_essential_matrix,
    decompose_pose,
    is_valid_rotation,
    rotation_angle_deg,
    triangulate_point,
    iterative_triangulate_point,
    triangulate_points,
    triangulate_set,
    normalize_points,
    get_projection,
    transform_point,
    project_point,
    project_points,
    project_with_pose,
    project_points_with_pose,
    reprojection_errors
)
from .selection import HypothesisSelector, select_hypothesis

__all__ = [
    # Geometry
    'FundamentalMatrixEstimator',
    'estimate_fundamental',
    'essential_from_fundamental',
    'assess_essential_matrix',
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

    # Selection
    'HypothesisSelector',
    'select_hypothesis',
]
