"""Exceptions raised by topology generation, propagation and collocation checks"""

from typing import Optional, Sequence


class RanTopologyError(Exception):
    """Base class for all errors raised by this package"""


class ConfigurationError(RanTopologyError, ValueError):
    """Invalid parameter, detected before any generation starts"""


class DegenerateGeometryError(RanTopologyError, ArithmeticError):
    """
    A non-positive distance reached a propagation model.

    The collocation resolver exists to make this impossible, so reaching it
    means the resolver was skipped or failed.
    """

    def __init__(self, message: str, distances=None,
                 tx_position: Optional[Sequence[float]] = None,
                 rx_position: Optional[Sequence[float]] = None):
        super().__init__(message)
        self.distances = distances
        self.tx_position = tx_position
        self.rx_position = rx_position


class ResolverExhaustedError(RanTopologyError, RuntimeError):
    """Collocation retry budget exhausted without clearing epsilon"""

    def __init__(self, message: str, receiver_index: int, position: Sequence[float],
                 transmitter_index: int, attempts: int):
        super().__init__(message)
        self.receiver_index = receiver_index
        self.position = position
        self.transmitter_index = transmitter_index
        self.attempts = attempts
