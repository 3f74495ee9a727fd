"""
Exceptions raised by the two-view geometry modules.

Every failure kind is a ReconstructionError carrying the EstimationStatus
that the class-based API reports when it converts the error into an
EstimationResult.
"""

from .interfaces.base_estimator import EstimationStatus


class ReconstructionError(Exception):
    """Base class for all two-view reconstruction failures"""

    status = EstimationStatus.FAILED


class InsufficientCorrespondencesError(ReconstructionError, ValueError):
    """Too few correspondences, mismatched sequence lengths or malformed points"""

    status = EstimationStatus.INSUFFICIENT_POINTS


class InvalidIntrinsicsError(ReconstructionError, ValueError):
    """Camera intrinsics that are not a finite, invertible 3x3 matrix"""

    status = EstimationStatus.INVALID_INPUT


class DegenerateConfigurationError(ReconstructionError):
    """The robust fundamental matrix fit found no usable model"""

    status = EstimationStatus.DEGENERATE_CONFIG


class NumericalDegeneracyError(ReconstructionError, ArithmeticError):
    """Zero depth weight during triangulation or zero divisor during projection"""

    status = EstimationStatus.NUMERICAL_INSTABILITY


class PoseDecompositionError(ReconstructionError):
    """No proper rotation could be extracted from the essential matrix"""

    status = EstimationStatus.NO_SOLUTION


class NoConsistentHypothesisError(ReconstructionError):
    """None of the four pose hypotheses places enough points in front of both cameras"""

    status = EstimationStatus.NO_CONSISTENT_HYPOTHESIS

    def __init__(self, message: str, selection=None):
        super().__init__(message)
        # HypothesisSelection with the scores of all evaluated hypotheses
        self.selection = selection
