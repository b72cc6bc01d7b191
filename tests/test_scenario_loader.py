import dataclasses

import pytest

from ran_topology import ConfigurationError, MacroCellParams, OwcParams, VlcParams, load_scenario_config
from ran_topology.path_loss import fspl_reference_loss
from ran_topology.scenario_loader import SCENARIO_MAPPINGS


@pytest.mark.parametrize('name', sorted(SCENARIO_MAPPINGS))
def test_bundled_scenarios_load(name):
    sim_params = load_scenario_config(name)
    assert sim_params.expected_sites == sim_params.rows * sim_params.cols
    for profile in sim_params.profiles:
        sim_params.propagation_params(profile)


def test_lte_scenario_values():
    sim_params = load_scenario_config('lte_urbano')

    assert (sim_params.rows, sim_params.cols, sim_params.isd) == (4, 4, 600.0)
    assert sim_params.sector_offset == 0.0
    assert sim_params.expected_sectors == 48
    assert sim_params.macro_params() == MacroCellParams(exponent=3.7, reference_loss=40.7, shadowing_std=7.0)


def test_nr_scenario_derives_reference_loss_from_frequency():
    sim_params = load_scenario_config('nr_6g_urbano_lite')

    assert sim_params.reference_loss is None
    assert sim_params.sector_offset == 3.0
    assert sim_params.macro_params().reference_loss == pytest.approx(fspl_reference_loss(28e9))


def test_optical_scenario_params():
    sim_params = load_scenario_config('owc_vlc')

    assert sim_params.profiles == ('vlc', 'owc')
    assert sim_params.propagation_params('vlc') == VlcParams(1.0, 1.0)
    assert sim_params.propagation_params('owc') == OwcParams(2.0, 1.0, 1.0)


def test_load_by_path(write_scenario):
    scenarios_dir, name = write_scenario('by_path', rows=2, cols=3)
    sim_params = load_scenario_config(str(scenarios_dir / f'{name}.json'))
    assert sim_params.expected_sites == 6


def test_load_by_name_from_directory(write_scenario):
    scenarios_dir, name = write_scenario('mine', isd=250)
    assert load_scenario_config(name, scenarios_dir=scenarios_dir).isd == 250.0


def test_defaults_fill_missing_fields(write_scenario):
    scenarios_dir, name = write_scenario('sparse')
    sim_params = load_scenario_config(name, scenarios_dir=scenarios_dir)
    assert sim_params.collocation_epsilon == 0.1
    assert sim_params.nominal_rate == '1Mbps'
    assert sim_params.rate_decay == 10.0


def test_unknown_scenario(tmp_path):
    with pytest.raises(ConfigurationError) as excinfo:
        load_scenario_config('atlantis', scenarios_dir=tmp_path)
    assert 'lte_urbano' in str(excinfo.value)


def test_unknown_scenario_is_a_value_error(tmp_path):
    with pytest.raises(ValueError):
        load_scenario_config('atlantis', scenarios_dir=tmp_path)


def test_empty_grid_is_valid(write_scenario):
    scenarios_dir, name = write_scenario('empty', rows=0)
    assert load_scenario_config(name, scenarios_dir=scenarios_dir).expected_sites == 0


@pytest.mark.parametrize('fields', [
    {'isd': 0},
    {'isd': -600},
    {'numSectors': 0},
    {'sectorOffset': -1},
    {'mountHeight': -5},
    {'carrierFrequency': 0},
    {'pathLossExponent': 0},
    {'shadowingStd': -1},
    {'collocationEpsilon': 0},
    {'collocationEpsilon': -0.1},
    {'resolverMaxRetries': 0},
    {'numUEs': -1},
    {'nominalRate': 'lots'},
    {'rateDecay': 0},
    {'profiles': ['thz']},
    {'profiles': []},
    {'linkDistances': [10, 0]},
    {'owcReferenceDistance': 0},
    {'vlcExponent': 0},
    {'owcExponent': -1},
    {'minDistance': -1},
    {'shadowingStd': float('inf')},
    {'pathLossExponent': 0, 'profiles': ['vlc']},
    {'rows': 'four'},
])
def test_invalid_fields(write_scenario, fields):
    scenarios_dir, name = write_scenario('bad', **fields)
    with pytest.raises(ConfigurationError):
        load_scenario_config(name, scenarios_dir=scenarios_dir)


def test_macro_needs_frequency_or_reference_loss(write_scenario):
    scenarios_dir, name = write_scenario('no_ref', referenceLoss=None)
    with pytest.raises(ConfigurationError):
        load_scenario_config(name, scenarios_dir=scenarios_dir)


def test_invalid_json(tmp_path):
    (tmp_path / 'broken.json').write_text('{"rows": ')
    with pytest.raises(ConfigurationError):
        load_scenario_config('broken', scenarios_dir=tmp_path)


def test_params_are_frozen():
    sim_params = load_scenario_config('lte_urbano')
    with pytest.raises(dataclasses.FrozenInstanceError):
        sim_params.path_loss_exponent = 4.0
