"""Path loss models: urban macro log-distance and short-range optical links"""

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .errors import ConfigurationError, DegenerateGeometryError


PROFILES = ('macro', 'vlc', 'owc')


@dataclass(frozen=True)
class MacroCellParams:
    """Log-distance urban macro model (Okumura-Hata style approximation)"""
    exponent: float = 3.7
    reference_loss: float = 40.7  # dB at 1 m
    shadowing_std: float = 0.0  # dB, 0 disables shadowing
    min_distance: float = 0.0  # clamp for 0 < d < min_distance, 0 disables

    def __post_init__(self):
        if not (np.isfinite(self.exponent) and self.exponent > 0):
            raise ConfigurationError(f'Path loss exponent must be positive, got {self.exponent}')
        if not np.isfinite(self.reference_loss):
            raise ConfigurationError(f'Reference loss must be finite, got {self.reference_loss}')
        if not (np.isfinite(self.shadowing_std) and self.shadowing_std >= 0):
            raise ConfigurationError(f'Shadowing std must be finite and non-negative, got {self.shadowing_std}')
        if not (np.isfinite(self.min_distance) and self.min_distance >= 0):
            raise ConfigurationError(f'Minimum distance must be non-negative, got {self.min_distance}')

    @classmethod
    def from_frequency(cls, frequency: float, exponent: float = 3.7,
                       shadowing_std: float = 0.0, min_distance: float = 0.0) -> 'MacroCellParams':
        """Build params with the reference loss taken from free-space loss at 1 m"""
        return cls(exponent=exponent,
                   reference_loss=fspl_reference_loss(frequency),
                   shadowing_std=shadowing_std,
                   min_distance=min_distance)


@dataclass(frozen=True)
class VlcParams:
    """Visible-light link, near-linear attenuation regime"""
    exponent: float = 1.0
    reference_loss: float = 1.0  # dB

    def __post_init__(self):
        if not (np.isfinite(self.exponent) and self.exponent > 0):
            raise ConfigurationError(f'VLC loss exponent must be positive, got {self.exponent}')
        if not np.isfinite(self.reference_loss):
            raise ConfigurationError(f'VLC reference loss must be finite, got {self.reference_loss}')


@dataclass(frozen=True)
class OwcParams:
    """Diffuse optical wireless link, inverse-square regime"""
    exponent: float = 2.0
    reference_loss: float = 1.0  # dB at reference_distance
    reference_distance: float = 1.0  # m

    def __post_init__(self):
        if not (np.isfinite(self.exponent) and self.exponent > 0):
            raise ConfigurationError(f'OWC loss exponent must be positive, got {self.exponent}')
        if not np.isfinite(self.reference_loss):
            raise ConfigurationError(f'OWC reference loss must be finite, got {self.reference_loss}')
        if not (np.isfinite(self.reference_distance) and self.reference_distance > 0):
            raise ConfigurationError(f'OWC reference distance must be positive, got {self.reference_distance}')


PropagationParams = Union[MacroCellParams, VlcParams, OwcParams]


def fspl_reference_loss(frequency: float, reference_distance: float = 1.0) -> float:
    """
    Free-space path loss at the reference distance.

    FSPL(dB) = 32.45 + 20*log10(f_MHz) + 20*log10(d_km)

    Args:
        frequency: Carrier frequency in Hz
        reference_distance: Distance in meters (1 m anchors the log-distance model)

    Returns:
        Loss in dB (40.75 dB at 2600 MHz and 1 m)
    """
    if not frequency > 0:
        raise ConfigurationError(f'Carrier frequency must be positive, got {frequency}')
    if not reference_distance > 0:
        raise ConfigurationError(f'Reference distance must be positive, got {reference_distance}')

    f_mhz = frequency / 1e6
    d_km = reference_distance / 1000.0
    return 32.45 + 20 * np.log10(f_mhz) + 20 * np.log10(d_km)


def _check_distances(distance) -> np.ndarray:
    d = np.asarray(distance, dtype=float)
    bad = ~np.isfinite(d) | (d <= 0)
    if np.any(bad):
        raise DegenerateGeometryError(
            f'Propagation loss is undefined for distance(s) {d[bad].tolist() if d.ndim else float(d)} m; '
            f'collocated transmitter/receiver pairs must be resolved first',
            distances=d[bad] if d.ndim else float(d)
        )
    return d


def _to_output(loss: np.ndarray):
    if loss.ndim == 0:
        return float(loss)
    return loss


def macro_cell_loss(distance, params: MacroCellParams = MacroCellParams(),
                    rng: Optional[np.random.RandomState] = None):
    """
    Urban macro path loss.

    L(d) = L0 + 10*n*log10(d) + X,  X ~ N(0, sigma^2)

    Args:
        distance: Distance in meters, scalar or array
        params: Model parameters
        rng: Generator for shadowing, required when shadowing_std > 0

    Returns:
        Path loss in dB, same shape as distance
    """
    d = _check_distances(distance)

    if params.min_distance > 0:
        d = np.maximum(d, params.min_distance)

    loss = params.reference_loss + 10 * params.exponent * np.log10(d)

    if params.shadowing_std > 0:
        if rng is None:
            raise ConfigurationError('Shadowing is enabled but no random generator was passed')
        loss = loss + rng.randn(*loss.shape) * params.shadowing_std

    return _to_output(np.asarray(loss))


def vlc_loss(distance, params: VlcParams = VlcParams()):
    """
    Visible-light link loss.

    L(d) = 10*n*log10(d) - L0

    Unlike owc_loss there is no reference distance term, so the loss crosses
    zero at d = 10**(L0 / (10*n)).
    """
    d = _check_distances(distance)
    loss = 10 * params.exponent * np.log10(d) - params.reference_loss
    return _to_output(loss)


def owc_loss(distance, params: OwcParams = OwcParams()):
    """
    Diffuse optical wireless loss.

    L(d) = L0 + 10*n*log10(d / d0)
    """
    d = _check_distances(distance)
    loss = params.reference_loss + 10 * params.exponent * np.log10(d / params.reference_distance)
    return _to_output(loss)


def default_params(profile: str) -> PropagationParams:
    """Default parameter record for a profile"""
    if profile == 'macro':
        return MacroCellParams()
    elif profile == 'vlc':
        return VlcParams()
    elif profile == 'owc':
        return OwcParams()
    available = ', '.join(PROFILES)
    raise ConfigurationError(f'Unknown propagation profile: {profile}\nAvailable profiles: {available}')


def calculate_path_loss(distance, profile: str = 'macro',
                        params: Optional[PropagationParams] = None,
                        rng: Optional[np.random.RandomState] = None):
    """
    Path loss for a named profile.

    Args:
        distance: Distance in meters, scalar or array
        profile: 'macro', 'vlc' or 'owc'
        params: Parameters matching the profile (defaults when None)
        rng: Shadowing generator, only used by the macro profile

    Returns:
        Path loss in dB
    """
    if params is None:
        params = default_params(profile)

    if profile == 'macro' and isinstance(params, MacroCellParams):
        return macro_cell_loss(distance, params, rng)
    elif profile == 'vlc' and isinstance(params, VlcParams):
        return vlc_loss(distance, params)
    elif profile == 'owc' and isinstance(params, OwcParams):
        return owc_loss(distance, params)

    if profile not in PROFILES:
        available = ', '.join(PROFILES)
        raise ConfigurationError(f'Unknown propagation profile: {profile}\nAvailable profiles: {available}')
    raise ConfigurationError(f'{type(params).__name__} does not match profile {profile!r}')
