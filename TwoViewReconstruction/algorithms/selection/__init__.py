from .hypothesis_selector import HypothesisSelector, select_hypothesis

__all__ = [
    'HypothesisSelector',
    'select_hypothesis',
]
