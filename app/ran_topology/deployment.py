"""Urban deployment: builds the topology for a scenario and answers link queries"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from .collocation import resolve_collocations
from .link_budget import evaluate_distance, evaluate_link, evaluate_links
from .network import LinkSample, Sector, Site
from .network_init import configure_sectors, create_layout, initialize_receivers
from .path_loss import PropagationParams
from .rate_adaptation import DataRate
from .scenario_loader import SimParams, load_scenario_config

logger = logging.getLogger(__name__)


class UrbanDeployment:
    """Sites, sectors and receivers of one scenario, plus per-link queries"""

    def __init__(self, scenario: str = 'lte_urbano', seed: int = 42,
                 scenarios_dir: Optional[Union[str, Path]] = None):
        self.scenario_name = scenario
        self.seed_value = seed

        # Load scenario configuration (validated, immutable)
        self.sim_params: SimParams = load_scenario_config(scenario, scenarios_dir=scenarios_dir)

        # Resolve every profile's params up front so they cannot drift after generation
        self._params: Dict[str, PropagationParams] = {
            profile: self.sim_params.propagation_params(profile)
            for profile in self.sim_params.profiles
        }

        self.sites: List[Site] = []
        self.sectors: List[Sector] = []
        self.receivers: np.ndarray = np.empty((0, 3))
        self.raw_receivers: np.ndarray = np.empty((0, 3))
        self._shadowing_rng: Optional[np.random.RandomState] = None
        self._built = False

    def reset(self, seed: Optional[int] = None) -> Dict[str, Any]:
        """Generate the topology and resolve collocated receivers"""

        if seed is not None:
            self.seed_value = seed

        self.sites = create_layout(self.sim_params)
        self.sectors = configure_sectors(self.sites, self.sim_params)
        self.raw_receivers = initialize_receivers(self.sim_params, self.seed_value)

        resolver_rng = np.random.RandomState(self.seed_value + 1000)
        self.receivers = resolve_collocations(
            self.transmitter_positions(), self.raw_receivers, resolver_rng,
            epsilon=self.sim_params.collocation_epsilon,
            max_retries=self.sim_params.resolver_max_retries
        )

        self._shadowing_rng = np.random.RandomState(self.seed_value + 5000)
        self._built = True

        moved = int(np.count_nonzero(np.any(self.receivers != self.raw_receivers, axis=1)))
        info = {
            'sites': len(self.sites),
            'sectors': len(self.sectors),
            'receivers': len(self.receivers),
            'moved_receivers': moved
        }
        logger.info(f'{self.sim_params.name}: {info["sites"]} sites, {info["sectors"]} sectors, '
                    f'{info["receivers"]} receivers ({moved} moved by collocation check)')
        return info

    def transmitter_positions(self) -> np.ndarray:
        if not self.sectors:
            return np.empty((0, 3))
        return np.array([[s.x, s.y, s.z] for s in self.sectors])

    def propagation_params(self, profile: Optional[str] = None) -> PropagationParams:
        profile = profile or self.sim_params.profiles[0]
        if profile not in self._params:
            self._params[profile] = self.sim_params.propagation_params(profile)
        return self._params[profile]

    def _require_built(self):
        if not self._built:
            raise RuntimeError('Deployment has no topology yet; call reset() first')

    def link_sample(self, sector_id: int, receiver_id: int, profile: Optional[str] = None,
                    nominal_rate: Optional[Union[str, DataRate]] = None) -> LinkSample:
        """Loss and adapted rate between one sector and one receiver"""

        self._require_built()
        profile = profile or self.sim_params.profiles[0]
        sector = self.sectors[sector_id]

        return evaluate_link(
            sector.position, self.receivers[receiver_id], profile,
            self.propagation_params(profile),
            nominal_rate or self.sim_params.nominal_rate,
            rng=self._shadowing_rng,
            tx_power_dbm=self.sim_params.enb_tx_power,
            decay=self.sim_params.rate_decay
        )

    def sweep(self, distances: Optional[Sequence[float]] = None,
              profile: Optional[str] = None) -> List[LinkSample]:
        """Link samples over a list of distances (scenario linkDistances by default)"""

        self._require_built()
        profile = profile or self.sim_params.profiles[0]
        if distances is None:
            distances = self.sim_params.link_distances

        return [
            evaluate_distance(d, profile, self.propagation_params(profile),
                              self.sim_params.nominal_rate,
                              rng=self._shadowing_rng,
                              tx_power_dbm=self.sim_params.enb_tx_power,
                              decay=self.sim_params.rate_decay)
            for d in distances
        ]

    def get_results(self) -> Dict[str, Any]:
        """Summary of the topology and the link budget per profile"""

        self._require_built()
        results = {
            'scenario': self.sim_params.name,
            'seed': self.seed_value,
            'sites': len(self.sites),
            'sectors': len(self.sectors),
            'receivers': len(self.receivers),
            'moved_receivers': int(np.count_nonzero(np.any(self.receivers != self.raw_receivers, axis=1))),
            'profiles': {}
        }

        for profile in self.sim_params.profiles:
            summary: Dict[str, Any] = {
                'sweep': [(s.distance, s.loss_db, str(s.adapted_rate)) for s in self.sweep(profile=profile)]
            }
            if len(self.sectors) and len(self.receivers):
                links = evaluate_links(
                    self.transmitter_positions(), self.receivers, profile,
                    self.propagation_params(profile), self.sim_params.nominal_rate,
                    rng=self._shadowing_rng, decay=self.sim_params.rate_decay
                )
                # Best sector per receiver, by lowest loss
                best_loss = links['loss_db'].min(axis=1)
                best_rate = links['rate_bps'].max(axis=1)
                summary['mean_best_loss_db'] = float(np.mean(best_loss))
                summary['mean_best_rate_bps'] = float(np.mean(best_rate))
            results['profiles'][profile] = summary

        return results
