from .two_view import TwoViewReconstructor, reconstruct

__all__ = [
    'TwoViewReconstructor',
    'reconstruct',
]
