from .two_view_data import (
    PoseHypothesis,
    PoseCandidate,
    IterativeTriangulationInfo,
    HypothesisScore,
    HypothesisSelection,
    ReconstructionResult,
)

__all__ = [
    'PoseHypothesis',
    'PoseCandidate',
    'IterativeTriangulationInfo',
    'HypothesisScore',
    'HypothesisSelection',
    'ReconstructionResult',
]
