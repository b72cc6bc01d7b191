import numpy as np
import pytest

from ran_topology import ResolverExhaustedError, UrbanDeployment
from ran_topology.collocation import distance_matrix


@pytest.fixture
def lite():
    deployment = UrbanDeployment('nr_6g_urbano_lite', seed=7)
    deployment.reset()
    return deployment


def test_reset_builds_topology(lite):
    assert len(lite.sites) == 9
    assert len(lite.sectors) == 27
    assert lite.receivers.shape == (90, 3)
    assert [s.bearing for s in lite.sectors[:3]] == [0.0, 120.0, 240.0]


def test_same_seed_same_topology():
    a = UrbanDeployment('nr_6g_urbano_lite', seed=3)
    b = UrbanDeployment('nr_6g_urbano_lite', seed=3)
    a.reset()
    b.reset()

    assert a.sites == b.sites
    assert a.sectors == b.sectors
    assert np.array_equal(a.receivers, b.receivers)
    assert a.link_sample(0, 0) == b.link_sample(0, 0)


def test_different_seed_different_receivers():
    a = UrbanDeployment('nr_6g_urbano_lite', seed=3)
    a.reset()
    receivers = a.receivers.copy()
    a.reset(seed=4)

    assert a.seed_value == 4
    assert not np.array_equal(receivers, a.receivers)


def test_link_sample(lite):
    sample = lite.link_sample(sector_id=4, receiver_id=10)

    expected = np.linalg.norm(lite.sectors[4].position - lite.receivers[10])
    assert sample.distance == pytest.approx(expected)
    assert sample.profile == 'macro'
    assert sample.nominal_rate.unit == 'Mb/s'
    assert sample.adapted_rate.unit == 'Mb/s'
    assert sample.rx_power_dbm == pytest.approx(46.0 - sample.loss_db)


def test_queries_before_reset():
    deployment = UrbanDeployment('owc_vlc')
    with pytest.raises(RuntimeError):
        deployment.link_sample(0, 0)
    with pytest.raises(RuntimeError):
        deployment.get_results()


def test_optical_sweep():
    deployment = UrbanDeployment('owc_vlc')
    deployment.reset()

    vlc, = deployment.sweep(profile='vlc')
    owc, = deployment.sweep(profile='owc')

    assert vlc.distance == 20.0
    assert vlc.loss_db == pytest.approx(10 * np.log10(20) - 1)
    assert owc.loss_db == pytest.approx(1 + 20 * np.log10(20))
    assert str(vlc.adapted_rate).endswith('Mbps')


def test_collocated_receivers_are_resolved(write_scenario):
    # Every receiver dropped exactly on the single site
    scenarios_dir, name = write_scenario('stacked', numUEs=25, areaWidth=0, areaHeight=0, ueHeight=0,
                                         numSectors=3, sectorOffset=0)
    deployment = UrbanDeployment(name, seed=11, scenarios_dir=scenarios_dir)
    info = deployment.reset()

    assert info['moved_receivers'] == 25
    assert np.all(distance_matrix(deployment.receivers, deployment.transmitter_positions()) >= 0.1)

    results = deployment.get_results()
    assert results['moved_receivers'] == 25
    assert np.isfinite(results['profiles']['macro']['mean_best_loss_db'])


def test_get_results(lite):
    results = lite.get_results()

    assert results['sites'] == 9
    assert results['sectors'] == 27
    assert results['receivers'] == 90
    macro = results['profiles']['macro']
    assert [d for d, _, _ in macro['sweep']] == [50.0, 100.0, 300.0]
    assert macro['mean_best_rate_bps'] > 0


def test_empty_grid(write_scenario):
    scenarios_dir, name = write_scenario('nothing', rows=0, numUEs=5)
    deployment = UrbanDeployment(name, scenarios_dir=scenarios_dir)
    info = deployment.reset()

    assert info['sites'] == 0
    assert info['sectors'] == 0
    assert info['moved_receivers'] == 0
    assert 'mean_best_loss_db' not in deployment.get_results()['profiles']['macro']


def test_reset_raises_when_resolver_exhausted(write_scenario):
    scenarios_dir, name = write_scenario('crowded', numUEs=1, areaWidth=0, areaHeight=0, ueHeight=0,
                                         collocationEpsilon=100, resolverMaxRetries=1)
    deployment = UrbanDeployment(name, scenarios_dir=scenarios_dir)

    with pytest.raises(ResolverExhaustedError) as excinfo:
        deployment.reset()
    assert excinfo.value.attempts == 1
    assert excinfo.value.receiver_index == 0
