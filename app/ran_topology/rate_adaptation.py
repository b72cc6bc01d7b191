"""Rate adaptation from propagation loss"""

import re
from dataclasses import dataclass
from typing import Union

import numpy as np

from .errors import ConfigurationError


# Bit-rate units accepted in rate strings, as multipliers to bit/s
UNIT_MULTIPLIERS = {
    'bps': 1.0,
    'b/s': 1.0,
    'kbps': 1e3,
    'kb/s': 1e3,
    'Kbps': 1e3,
    'Kb/s': 1e3,
    'Mbps': 1e6,
    'Mb/s': 1e6,
    'Gbps': 1e9,
    'Gb/s': 1e9,
}

DEFAULT_DECAY = 10.0

_RATE_PATTERN = re.compile(r'^\s*([0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)\s*([A-Za-z/]+)\s*$')


@dataclass(frozen=True)
class DataRate:
    """A data rate that keeps the unit suffix it was written with"""
    value: float
    unit: str = 'Mbps'

    def __post_init__(self):
        if self.unit not in UNIT_MULTIPLIERS:
            available = ', '.join(UNIT_MULTIPLIERS.keys())
            raise ConfigurationError(f'Unknown data rate unit: {self.unit!r}\nAvailable units: {available}')
        if not np.isfinite(self.value) or self.value < 0:
            raise ConfigurationError(f'Data rate must be finite and non-negative, got {self.value}')

    @classmethod
    def parse(cls, text: str) -> 'DataRate':
        """Parse strings such as '1Mbps', '1Mb/s' or '24kb/s'"""
        match = _RATE_PATTERN.match(text)
        if match is None:
            raise ConfigurationError(f'Cannot parse data rate: {text!r}')
        return cls(value=float(match.group(1)), unit=match.group(2))

    @property
    def bits_per_second(self) -> float:
        return self.value * UNIT_MULTIPLIERS[self.unit]

    def scaled(self, factor: float) -> 'DataRate':
        return DataRate(value=self.value * factor, unit=self.unit)

    def __str__(self) -> str:
        return f'{self.value:.6f}{self.unit}'


def as_data_rate(rate: Union[str, DataRate]) -> DataRate:
    if isinstance(rate, DataRate):
        return rate
    if isinstance(rate, str):
        return DataRate.parse(rate)
    raise ConfigurationError(f'Nominal rate must be a DataRate or a rate string, got {type(rate).__name__}')


def rate_factor(loss_db, decay: float = DEFAULT_DECAY):
    """
    Fraction of the nominal rate left after a given loss.

    Works on scalars and numpy arrays. Strictly positive for any finite loss
    and equal to 1 at zero loss.
    """
    if decay <= 0:
        raise ConfigurationError(f'Rate decay constant must be positive, got {decay}')
    loss = np.asarray(loss_db, dtype=float)
    if not np.all(np.isfinite(loss)):
        raise ConfigurationError('Loss must be finite for rate adaptation')
    # Floor at the smallest normal float so huge losses never round to zero
    factor = np.maximum(np.exp(-loss / decay), np.finfo(float).tiny)
    if factor.ndim == 0:
        return float(factor)
    return factor


def adapt_data_rate(nominal_rate: Union[str, DataRate], loss_db: float,
                    decay: float = DEFAULT_DECAY) -> DataRate:
    """
    Attainable data rate for a link with the given propagation loss.

    attainable = nominal * exp(-loss_db / decay)

    This is a first-order heuristic, not a Shannon-capacity figure: it does
    not involve SNR, bandwidth or modulation. The result carries the unit of
    the nominal rate.

    Args:
        nominal_rate: Offered rate, e.g. '1Mbps' or a DataRate
        loss_db: Propagation loss in dB
        decay: Decay constant k in dB

    Returns:
        Adapted DataRate in the nominal rate's unit
    """
    rate = as_data_rate(nominal_rate)
    return rate.scaled(rate_factor(loss_db, decay))
