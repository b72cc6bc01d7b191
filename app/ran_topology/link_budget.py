"""Per-link loss and rate queries"""

from typing import Dict, Optional, Union

import numpy as np

from .collocation import distance_matrix
from .errors import DegenerateGeometryError
from .network import LinkSample
from .path_loss import PropagationParams, calculate_path_loss
from .rate_adaptation import DEFAULT_DECAY, DataRate, adapt_data_rate, rate_factor, as_data_rate


def evaluate_distance(distance: float, profile: str = 'macro',
                      params: Optional[PropagationParams] = None,
                      nominal_rate: Union[str, DataRate] = '1Mbps',
                      rng: Optional[np.random.RandomState] = None,
                      tx_power_dbm: Optional[float] = None,
                      decay: float = DEFAULT_DECAY) -> LinkSample:
    """
    Loss and adapted rate for a precomputed separation.

    Args:
        distance: Transmitter-receiver distance in meters
        profile: 'macro', 'vlc' or 'owc'
        params: Parameters for the profile (defaults when None)
        nominal_rate: Offered rate, e.g. '1Mbps'
        rng: Shadowing generator for the macro profile
        tx_power_dbm: Transmit power; when given the sample carries received power
        decay: Rate decay constant in dB

    Returns:
        LinkSample
    """
    rate = as_data_rate(nominal_rate)
    loss = calculate_path_loss(distance, profile, params, rng)

    return LinkSample(
        distance=float(distance),
        profile=profile,
        loss_db=loss,
        nominal_rate=rate,
        adapted_rate=adapt_data_rate(rate, loss, decay),
        rx_power_dbm=None if tx_power_dbm is None else tx_power_dbm - loss
    )


def evaluate_link(tx_position, rx_position, profile: str = 'macro',
                  params: Optional[PropagationParams] = None,
                  nominal_rate: Union[str, DataRate] = '1Mbps',
                  rng: Optional[np.random.RandomState] = None,
                  tx_power_dbm: Optional[float] = None,
                  decay: float = DEFAULT_DECAY) -> LinkSample:
    """Loss and adapted rate between two 3-D positions"""

    tx = np.asarray(tx_position, dtype=float)
    rx = np.asarray(rx_position, dtype=float)
    distance = float(np.sqrt(np.sum((rx - tx)**2)))

    try:
        return evaluate_distance(distance, profile, params, nominal_rate, rng, tx_power_dbm, decay)
    except DegenerateGeometryError as e:
        raise DegenerateGeometryError(
            f'Transmitter at {tx.tolist()} and receiver at {rx.tolist()} are {distance} m apart; '
            f'run the collocation resolver before evaluating links',
            distances=e.distances,
            tx_position=tx.tolist(),
            rx_position=rx.tolist()
        ) from e


def evaluate_links(tx_positions, rx_positions, profile: str = 'macro',
                   params: Optional[PropagationParams] = None,
                   nominal_rate: Union[str, DataRate] = '1Mbps',
                   rng: Optional[np.random.RandomState] = None,
                   decay: float = DEFAULT_DECAY) -> Dict[str, np.ndarray]:
    """
    Vectorized link evaluation for every receiver/transmitter pair.

    Returns:
        Dict with 'distances', 'loss_db' and 'rate_bps', each (n_rx, n_tx)
    """
    rate = as_data_rate(nominal_rate)
    tx = np.asarray(tx_positions, dtype=float).reshape(-1, 3)
    rx = np.asarray(rx_positions, dtype=float).reshape(-1, 3)

    distances = distance_matrix(rx, tx)

    try:
        loss = np.asarray(calculate_path_loss(distances, profile, params, rng))
    except DegenerateGeometryError as e:
        i, j = np.argwhere(~np.isfinite(distances) | (distances <= 0))[0]
        raise DegenerateGeometryError(
            f'Receiver {i} at {rx[i].tolist()} and transmitter {j} at {tx[j].tolist()} are collocated; '
            f'run the collocation resolver before evaluating links',
            distances=e.distances,
            tx_position=tx[j].tolist(),
            rx_position=rx[i].tolist()
        ) from e

    return {
        'distances': distances,
        'loss_db': loss,
        'rate_bps': rate.bits_per_second * rate_factor(loss, decay)
    }
