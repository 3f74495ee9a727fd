"""
Relative pose from an essential matrix

Components:
- decompose_pose: the four (R, T) hypotheses of an essential matrix
- is_valid_rotation / rotation_angle_deg: rotation checks and reporting
"""

from .decomposition import W, decompose_pose
from .validators import is_valid_rotation, rotation_angle_deg

__all__ = [
    'W',
    'decompose_pose',
    'is_valid_rotation',
    'rotation_angle_deg',
]
