import numpy as np
import pytest

from ran_topology import (ConfigurationError, ResolverExhaustedError, create_hex_grid,
                          resolve_collocations, synthesize_sectors)
from ran_topology.collocation import distance_matrix


def _sector_positions(offset=0.0):
    sectors = synthesize_sectors(create_hex_grid(2, 2, 600, 1.5), 3, offset_radius=offset)
    return np.array([[s.x, s.y, s.z] for s in sectors])


def test_collocated_receiver_is_moved():
    tx = np.array([[0.0, 0.0, 0.0]])
    rx = np.array([[0.0, 0.0, 0.0], [100.0, 0.0, 0.0]])

    resolved = resolve_collocations(tx, rx, np.random.RandomState(1))

    assert np.linalg.norm(resolved[0] - tx[0]) >= 0.1
    assert np.array_equal(resolved[1], rx[1])


def test_jitter_within_bounds_and_positive():
    tx = np.array([[5.0, 5.0, 0.0]])
    rx = np.array([[5.0, 5.0, 0.0]])

    resolved = resolve_collocations(tx, rx, np.random.RandomState(3))

    shift = resolved[0] - rx[0]
    assert 0.5 <= shift[0] < 1.0
    assert 0.5 <= shift[1] < 1.0
    assert shift[2] == 0.0


def test_inputs_not_mutated():
    tx = np.zeros((1, 3))
    rx = np.zeros((2, 3))
    resolve_collocations(tx, rx, np.random.RandomState(0))
    assert np.array_equal(rx, np.zeros((2, 3)))


@pytest.mark.parametrize('offset', [0.0, 1.0, 3.0])
def test_post_condition_holds_for_every_pair(offset):
    tx = _sector_positions(offset)
    rng = np.random.RandomState(5)
    # Half the receivers dropped exactly on sectors, half near them
    rx = np.vstack([tx, tx + rng.uniform(-0.05, 0.05, size=tx.shape) * [1, 1, 0]])

    resolved = resolve_collocations(tx, rx, np.random.RandomState(9), epsilon=0.1)

    assert np.all(distance_matrix(resolved, tx) >= 0.1)


def test_second_run_changes_nothing():
    tx = _sector_positions(1.0)
    rx = np.vstack([tx, tx[:4]])

    first = resolve_collocations(tx, rx, np.random.RandomState(2))
    second = resolve_collocations(tx, first, np.random.RandomState(99))

    assert np.array_equal(first, second)


def test_clear_receivers_consume_no_draws():
    tx = np.array([[0.0, 0.0, 25.0]])
    rx = np.array([[10.0, 10.0, 1.5], [200.0, 0.0, 1.5]])
    rng = np.random.RandomState(4)
    _, key_before, pos_before = rng.get_state()[:3]
    key_before = key_before.copy()

    resolve_collocations(tx, rx, rng)

    _, key_after, pos_after = rng.get_state()[:3]
    assert pos_after == pos_before
    assert np.array_equal(key_after, key_before)


def test_reproducible_with_same_seed():
    tx = _sector_positions()
    rx = np.vstack([tx, tx])
    a = resolve_collocations(tx, rx, np.random.RandomState(21))
    b = resolve_collocations(tx, rx, np.random.RandomState(21))
    assert np.array_equal(a, b)


def test_exhausted_retry_budget_is_reported():
    tx = np.array([[0.0, 0.0, 0.0]])
    rx = np.array([[0.0, 0.0, 0.0]])

    with pytest.raises(ResolverExhaustedError) as excinfo:
        resolve_collocations(tx, rx, np.random.RandomState(0), epsilon=1000.0, max_retries=5)

    err = excinfo.value
    assert err.receiver_index == 0
    assert err.transmitter_index == 0
    assert err.attempts == 5
    assert len(err.position) == 3


def test_requires_explicit_generator():
    with pytest.raises(ConfigurationError):
        resolve_collocations(np.zeros((1, 3)), np.zeros((1, 3)), None)


@pytest.mark.parametrize('kwargs', [{'epsilon': 0.0}, {'epsilon': -0.1}, {'max_retries': 0},
                                    {'jitter': (1.0, 0.5)}])
def test_bad_arguments(kwargs):
    with pytest.raises(ConfigurationError):
        resolve_collocations(np.zeros((1, 3)), np.zeros((1, 3)), np.random.RandomState(0), **kwargs)


def test_bad_shapes():
    with pytest.raises(ConfigurationError):
        resolve_collocations(np.zeros((2, 2)), np.zeros((1, 3)), np.random.RandomState(0))


def test_empty_inputs():
    rng = np.random.RandomState(0)
    assert resolve_collocations(np.empty((0, 3)), np.zeros((2, 3)), rng).shape == (2, 3)
    assert resolve_collocations(np.zeros((2, 3)), np.empty((0, 3)), rng).shape == (0, 3)
