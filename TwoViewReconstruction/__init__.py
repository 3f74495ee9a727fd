"""
TwoViewReconstruction - Relative pose and sparse structure from two views

Estimates the fundamental matrix from point correspondences, lifts it to an
essential matrix with known intrinsics, decomposes it into the four
(R, T) hypotheses, triangulates under each, and keeps the one hypothesis
that places the scene in front of both cameras.
"""

from .logger import (
    setup_logger,
    get_logger,
    configure_root_logger,
    disable_console_logging,
    set_level
)
from .config import (
    NUMERIC_TOLERANCE,
    FundamentalConfig,
    PoseDecompositionConfig,
    TriangulationConfig,
    SelectionConfig,
    ReconstructionConfig
)
from .core import (
    EstimationResult,
    EstimationStatus,
    ReconstructionError,
    InsufficientCorrespondencesError,
    InvalidIntrinsicsError,
    DegenerateConfigurationError,
    NumericalDegeneracyError,
    PoseDecompositionError,
    NoConsistentHypothesisError,
    PoseHypothesis,
    PoseCandidate,
    HypothesisScore,
    HypothesisSelection,
    ReconstructionResult
)
from .algorithms import (
    estimate_fundamental,
    essential_from_fundamental,
    decompose_pose,
    triangulate_point,
    iterative_triangulate_point,
    triangulate_points,
    triangulate_set,
    project_point,
    project_points,
    get_projection,
    HypothesisSelector
)
from .pipeline import TwoViewReconstructor, reconstruct

__version__ = "1.0.0"
__all__ = [
    # Logging
    "setup_logger",
    "get_logger",
    "configure_root_logger",
    "disable_console_logging",
    "set_level",

    # Configuration
    "NUMERIC_TOLERANCE",
    "FundamentalConfig",
    "PoseDecompositionConfig",
    "TriangulationConfig",
    "SelectionConfig",
    "ReconstructionConfig",

    # Results and errors
    "EstimationResult",
    "EstimationStatus",
    "ReconstructionError",
    "InsufficientCorrespondencesError",
    "InvalidIntrinsicsError",
    "DegenerateConfigurationError",
    "NumericalDegeneracyError",
    "PoseDecompositionError",
    "NoConsistentHypothesisError",
    "PoseHypothesis",
    "PoseCandidate",
    "HypothesisScore",
    "HypothesisSelection",
    "ReconstructionResult",

    # Geometry
    "estimate_fundamental",
    "essential_from_fundamental",
    "decompose_pose",
    "triangulate_point",
    "iterative_triangulate_point",
    "triangulate_points",
    "triangulate_set",
    "project_point",
    "project_points",
    "get_projection",
    "HypothesisSelector",

    # Pipeline
    "TwoViewReconstructor",
    "reconstruct",
]
