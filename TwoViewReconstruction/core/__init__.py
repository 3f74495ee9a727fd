from .interfaces import (
    BaseEstimator,
    RANSACEstimator,
    EstimationResult,
    EstimationStatus
)
from .exceptions import (
    ReconstructionError,
    InsufficientCorrespondencesError,
    InvalidIntrinsicsError,
    DegenerateConfigurationError,
    NumericalDegeneracyError,
    PoseDecompositionError,
    NoConsistentHypothesisError
)
from .structures import (
    PoseHypothesis,
    PoseCandidate,
    IterativeTriangulationInfo,
    HypothesisScore,
    HypothesisSelection,
    ReconstructionResult
)

__all__ = [
    'BaseEstimator',
    'RANSACEstimator',
    'EstimationResult',
    'EstimationStatus',
    'ReconstructionError',
    'InsufficientCorrespondencesError',
    'InvalidIntrinsicsError',
    'DegenerateConfigurationError',
    'NumericalDegeneracyError',
    'PoseDecompositionError',
    'NoConsistentHypothesisError',
    'PoseHypothesis',
    'PoseCandidate',
    'IterativeTriangulationInfo',
    'HypothesisScore',
    'HypothesisSelection',
    'ReconstructionResult',
]
