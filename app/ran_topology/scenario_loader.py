"""Scenario configuration loader"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

import numpy as np

from .errors import ConfigurationError
from .path_loss import PROFILES, MacroCellParams, VlcParams, OwcParams, PropagationParams
from .rate_adaptation import DataRate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimParams:
    # Basic information
    name: str
    description: str
    deployment_scenario: str

    # Network topology
    rows: int
    cols: int
    isd: float
    mount_height: float

    # Sectorization
    num_sectors: int
    sector_offset: float
    beamwidth: float
    antenna_gain: float

    # RF parameters
    carrier_frequency: Optional[float] = None
    system_bandwidth: Optional[float] = None
    enb_tx_power: float = 46.0
    ue_tx_power: float = 23.0

    # Macro path loss
    path_loss_exponent: float = 3.7
    reference_loss: Optional[float] = None
    shadowing_std: float = 0.0
    min_distance: float = 0.0

    # Optical path loss
    vlc_exponent: float = 1.0
    vlc_reference_loss: float = 1.0
    owc_exponent: float = 2.0
    owc_reference_loss: float = 1.0
    owc_reference_distance: float = 1.0

    # Receivers
    num_ues: int = 0
    area_width: float = 3000.0
    area_height: float = 3000.0
    ue_height: float = 1.5

    # Collocation
    collocation_epsilon: float = 0.1
    resolver_max_retries: int = 10

    # Rate adaptation
    nominal_rate: str = '1Mbps'
    rate_decay: float = 10.0

    # Link evaluation
    profiles: Tuple[str, ...] = ('macro',)
    link_distances: Tuple[float, ...] = ()

    @property
    def expected_sites(self) -> int:
        return max(0, self.rows) * max(0, self.cols)

    @property
    def expected_sectors(self) -> int:
        return self.expected_sites * self.num_sectors

    def macro_params(self) -> MacroCellParams:
        if self.reference_loss is not None:
            return MacroCellParams(exponent=self.path_loss_exponent,
                                   reference_loss=self.reference_loss,
                                   shadowing_std=self.shadowing_std,
                                   min_distance=self.min_distance)
        if self.carrier_frequency is None:
            raise ConfigurationError(
                f'Scenario {self.name}: macro profile needs referenceLoss or carrierFrequency')
        return MacroCellParams.from_frequency(self.carrier_frequency,
                                              exponent=self.path_loss_exponent,
                                              shadowing_std=self.shadowing_std,
                                              min_distance=self.min_distance)

    def vlc_params(self) -> VlcParams:
        return VlcParams(exponent=self.vlc_exponent, reference_loss=self.vlc_reference_loss)

    def owc_params(self) -> OwcParams:
        return OwcParams(exponent=self.owc_exponent,
                         reference_loss=self.owc_reference_loss,
                         reference_distance=self.owc_reference_distance)

    def propagation_params(self, profile: str) -> PropagationParams:
        if profile == 'macro':
            return self.macro_params()
        elif profile == 'vlc':
            return self.vlc_params()
        elif profile == 'owc':
            return self.owc_params()
        available = ', '.join(PROFILES)
        raise ConfigurationError(f'Unknown propagation profile: {profile}\nAvailable profiles: {available}')


SCENARIO_MAPPINGS = {
    'lte_urbano': 'lte_urbano.json',
    'nr_6g_urbano': 'nr_6g_urbano.json',
    'nr_6g_urbano_lite': 'nr_6g_urbano_lite.json',
    'owc_vlc': 'owc_vlc.json'
}


def default_scenarios_dir() -> Path:
    return Path(__file__).parent / 'scenarios'


def load_scenario_config(scenario_input: str, scenarios_dir: Optional[Path] = None) -> SimParams:
    """Load scenario configuration from JSON file"""

    if scenarios_dir is None:
        scenarios_dir = default_scenarios_dir()

    json_path = _resolve_scenario_path(scenario_input, Path(scenarios_dir))

    with open(json_path, 'r') as f:
        try:
            cfg = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f'Invalid scenario file {json_path}: {e}') from e

    sim_params = _convert_json_to_params(cfg)
    _validate_config(sim_params)

    logger.info(f'Loaded scenario: {sim_params.name}')
    return sim_params


def _resolve_scenario_path(scenario_input: str, scenarios_dir: Path) -> Path:
    """Resolve scenario input to actual JSON file path"""

    path = Path(scenario_input)

    # Direct file path provided
    if path.is_file():
        return path

    # Known scenario name
    if scenario_input in SCENARIO_MAPPINGS:
        candidate = scenarios_dir / SCENARIO_MAPPINGS[scenario_input]
        if candidate.is_file():
            return candidate

    # Try appending .json extension
    candidate = scenarios_dir / f'{scenario_input}.json'
    if candidate.is_file():
        return candidate

    available = ', '.join(SCENARIO_MAPPINGS.keys())
    raise ConfigurationError(f'Unknown scenario: {scenario_input}\nAvailable scenarios: {available}')


def _get_field_or_default(cfg: Dict, field: str, default: Any) -> Any:
    """Get field value or default"""
    return cfg.get(field, default)


def _convert_json_to_params(cfg: Dict) -> SimParams:
    """Convert JSON configuration to SimParams"""

    if not isinstance(cfg, dict):
        raise ConfigurationError('Scenario file must contain a JSON object')

    try:
        return SimParams(
            # Basic information
            name=_get_field_or_default(cfg, 'name', 'Unnamed Scenario'),
            description=_get_field_or_default(cfg, 'description', 'No description'),
            deployment_scenario=_get_field_or_default(cfg, 'deploymentScenario', 'custom'),

            # Network topology
            rows=int(_get_field_or_default(cfg, 'rows', 4)),
            cols=int(_get_field_or_default(cfg, 'cols', 4)),
            isd=float(_get_field_or_default(cfg, 'isd', 600)),
            mount_height=float(_get_field_or_default(cfg, 'mountHeight', 25)),

            # Sectorization
            num_sectors=int(_get_field_or_default(cfg, 'numSectors', 3)),
            sector_offset=float(_get_field_or_default(cfg, 'sectorOffset', 0)),
            beamwidth=float(_get_field_or_default(cfg, 'beamwidth', 70)),
            antenna_gain=float(_get_field_or_default(cfg, 'antennaGain', 15)),

            # RF parameters
            carrier_frequency=_optional_float(cfg.get('carrierFrequency')),
            system_bandwidth=_optional_float(cfg.get('systemBandwidth')),
            enb_tx_power=float(_get_field_or_default(cfg, 'enbTxPower', 46)),
            ue_tx_power=float(_get_field_or_default(cfg, 'ueTxPower', 23)),

            # Macro path loss
            path_loss_exponent=float(_get_field_or_default(cfg, 'pathLossExponent', 3.7)),
            reference_loss=_optional_float(cfg.get('referenceLoss')),
            shadowing_std=float(_get_field_or_default(cfg, 'shadowingStd', 0)),
            min_distance=float(_get_field_or_default(cfg, 'minDistance', 0)),

            # Optical path loss
            vlc_exponent=float(_get_field_or_default(cfg, 'vlcExponent', 1.0)),
            vlc_reference_loss=float(_get_field_or_default(cfg, 'vlcReferenceLoss', 1.0)),
            owc_exponent=float(_get_field_or_default(cfg, 'owcExponent', 2.0)),
            owc_reference_loss=float(_get_field_or_default(cfg, 'owcReferenceLoss', 1.0)),
            owc_reference_distance=float(_get_field_or_default(cfg, 'owcReferenceDistance', 1.0)),

            # Receivers
            num_ues=int(_get_field_or_default(cfg, 'numUEs', 0)),
            area_width=float(_get_field_or_default(cfg, 'areaWidth', 3000)),
            area_height=float(_get_field_or_default(cfg, 'areaHeight', 3000)),
            ue_height=float(_get_field_or_default(cfg, 'ueHeight', 1.5)),

            # Collocation
            collocation_epsilon=float(_get_field_or_default(cfg, 'collocationEpsilon', 0.1)),
            resolver_max_retries=int(_get_field_or_default(cfg, 'resolverMaxRetries', 10)),

            # Rate adaptation
            nominal_rate=str(_get_field_or_default(cfg, 'nominalRate', '1Mbps')),
            rate_decay=float(_get_field_or_default(cfg, 'rateDecay', 10)),

            # Link evaluation
            profiles=tuple(_get_field_or_default(cfg, 'profiles', ['macro'])),
            link_distances=tuple(float(d) for d in _get_field_or_default(cfg, 'linkDistances', [])),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f'Invalid scenario field: {e}') from e


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _validate_config(sim_params: SimParams) -> None:
    """Validate configuration; raises ConfigurationError before anything is generated"""

    name = sim_params.name

    # Non-positive rows/cols give an empty grid, which is valid
    if not (np.isfinite(sim_params.isd) and sim_params.isd > 0):
        raise ConfigurationError(f'Scenario {name}: isd must be positive, got {sim_params.isd}')
    if not sim_params.mount_height >= 0:
        raise ConfigurationError(f'Scenario {name}: mountHeight must be non-negative')
    if sim_params.num_sectors < 1:
        raise ConfigurationError(f'Scenario {name}: numSectors must be at least 1, got {sim_params.num_sectors}')
    if not sim_params.sector_offset >= 0:
        raise ConfigurationError(f'Scenario {name}: sectorOffset must be non-negative')
    if not sim_params.beamwidth > 0:
        raise ConfigurationError(f'Scenario {name}: beamwidth must be positive')
    if sim_params.carrier_frequency is not None and not sim_params.carrier_frequency > 0:
        raise ConfigurationError(f'Scenario {name}: carrierFrequency must be positive')
    if sim_params.num_ues < 0:
        raise ConfigurationError(f'Scenario {name}: numUEs must be non-negative')
    if not (sim_params.area_width >= 0 and sim_params.area_height >= 0):
        raise ConfigurationError(f'Scenario {name}: receiver area must be non-negative')
    if not sim_params.collocation_epsilon > 0:
        raise ConfigurationError(f'Scenario {name}: collocationEpsilon must be positive')
    if sim_params.resolver_max_retries < 1:
        raise ConfigurationError(f'Scenario {name}: resolverMaxRetries must be at least 1')
    if not sim_params.rate_decay > 0:
        raise ConfigurationError(f'Scenario {name}: rateDecay must be positive')
    if any(not d > 0 for d in sim_params.link_distances):
        raise ConfigurationError(f'Scenario {name}: linkDistances must all be positive')
    if not sim_params.profiles:
        raise ConfigurationError(f'Scenario {name}: at least one profile is required')

    DataRate.parse(sim_params.nominal_rate)

    if not (np.isfinite(sim_params.path_loss_exponent) and sim_params.path_loss_exponent > 0):
        raise ConfigurationError(f'Scenario {name}: pathLossExponent must be positive')
    if not (np.isfinite(sim_params.shadowing_std) and sim_params.shadowing_std >= 0):
        raise ConfigurationError(f'Scenario {name}: shadowingStd must be non-negative')
    if not (np.isfinite(sim_params.min_distance) and sim_params.min_distance >= 0):
        raise ConfigurationError(f'Scenario {name}: minDistance must be non-negative')

    # Optical records are checked even when their profiles are not listed
    sim_params.vlc_params()
    sim_params.owc_params()
    for profile in sim_params.profiles:
        sim_params.propagation_params(profile)
