"""Collocation check: keeps receivers away from transmitter positions"""

import logging
from typing import Tuple

import numpy as np

from .errors import ConfigurationError, ResolverExhaustedError

logger = logging.getLogger(__name__)


def _as_positions(positions, label: str) -> np.ndarray:
    arr = np.asarray(positions, dtype=float)
    if arr.size == 0:
        return arr.reshape(0, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ConfigurationError(f'{label} positions must have shape (n, 3), got {arr.shape}')
    return arr


def distance_matrix(rx_positions: np.ndarray, tx_positions: np.ndarray) -> np.ndarray:
    """3-D Euclidean distances, shape (n_rx, n_tx)"""
    diff = rx_positions[:, np.newaxis, :] - tx_positions[np.newaxis, :, :]
    return np.sqrt(np.sum(diff**2, axis=2))


def resolve_collocations(tx_positions, rx_positions, rng: np.random.RandomState,
                         epsilon: float = 0.1, max_retries: int = 10,
                         jitter: Tuple[float, float] = (0.5, 1.0)) -> np.ndarray:
    """
    Nudge receivers that sit on top of a transmitter.

    Every receiver closer than epsilon to any transmitter has its x and y
    shifted by independent draws from uniform[jitter) and is checked again
    against all transmitters. Receivers already clear draw nothing from rng,
    so running this on its own output changes nothing.

    Args:
        tx_positions: Transmitter positions, shape (n_tx, 3)
        rx_positions: Receiver positions, shape (n_rx, 3)
        rng: Seeded generator for the jitter draws
        epsilon: Minimum allowed separation in meters
        max_retries: Perturbations allowed per receiver
        jitter: Bounds of the per-axis offset in meters

    Returns:
        Corrected receiver positions (a new array)
    """
    if rng is None:
        raise ConfigurationError('resolve_collocations needs an explicit random generator')
    if not epsilon > 0:
        raise ConfigurationError(f'Collocation epsilon must be positive, got {epsilon}')
    if max_retries < 1:
        raise ConfigurationError(f'max_retries must be at least 1, got {max_retries}')
    low, high = jitter
    if not 0 < low < high:
        raise ConfigurationError(f'Jitter bounds must satisfy 0 < low < high, got {jitter}')

    tx = _as_positions(tx_positions, 'Transmitter')
    rx = _as_positions(rx_positions, 'Receiver').copy()

    if len(tx) == 0 or len(rx) == 0:
        return rx

    distances = distance_matrix(rx, tx)
    offenders = np.flatnonzero(np.any(distances < epsilon, axis=1))

    perturbations = 0

    for i in offenders:
        attempts = 0
        while True:
            d = np.sqrt(np.sum((tx - rx[i])**2, axis=1))
            close = np.flatnonzero(d < epsilon)
            if len(close) == 0:
                break

            if attempts >= max_retries:
                raise ResolverExhaustedError(
                    f'Receiver {i} at {rx[i].tolist()} still within {epsilon} m of transmitter '
                    f'{int(close[0])} at {tx[close[0]].tolist()} after {attempts} perturbations',
                    receiver_index=int(i),
                    position=rx[i].tolist(),
                    transmitter_index=int(close[0]),
                    attempts=attempts
                )

            rx[i, 0] += rng.uniform(low, high)
            rx[i, 1] += rng.uniform(low, high)
            attempts += 1
            perturbations += 1

    if perturbations:
        logger.info(f'Resolved {len(offenders)} collocated receivers with {perturbations} perturbations')
    else:
        logger.debug('No collocated receivers found')

    return rx
