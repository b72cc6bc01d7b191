#!/usr/bin/env python3
"""
Build every scenario's topology and print its link budget summary
"""

import glob
import logging
import os
import sys
from pathlib import Path

import yaml

# Add app directory to path
sys.path.insert(0, str(Path(__file__).parent))

from ran_topology import UrbanDeployment, RanTopologyError
from ran_topology.scenario_loader import default_scenarios_dir

logger = logging.getLogger('ScenarioRunner')


def setup_logging(level: str = 'INFO'):
    """Console logging for the runner and the ran_topology package"""
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    for name in ('ScenarioRunner', 'ran_topology'):
        named = logging.getLogger(name)
        named.setLevel(getattr(logging, level.upper(), logging.INFO))
        named.handlers.clear()
        named.addHandler(console_handler)


def load_config(config_path: str) -> dict:
    """Runner settings from YAML; a missing file means defaults"""
    if not os.path.exists(config_path):
        return {}
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def load_scenarios_from_directory(scenarios_dir: str, base_seed: int = 42):
    """
    List all scenario files in a directory

    Returns:
        List of scenario configs with name and seed
    """
    scenario_files = sorted(glob.glob(os.path.join(scenarios_dir, '*.json')))

    suite = []
    for scenario_file in scenario_files:
        suite.append({'name': Path(scenario_file).stem, 'seed': base_seed})

    return suite


def run_scenario(scenario: str, seed: int, scenarios_dir: str = None):
    """Build one deployment and return its results"""
    deployment = UrbanDeployment(scenario=scenario, seed=seed, scenarios_dir=scenarios_dir)
    deployment.reset(seed=seed)
    return deployment.get_results()


def main(scenarios_dir: str = None, base_seed: int = 42):
    """Run all scenarios and print their summaries"""

    scenarios_dir = scenarios_dir or str(default_scenarios_dir())
    suite = load_scenarios_from_directory(scenarios_dir, base_seed)

    if not suite:
        logger.error(f'No scenario files found in {scenarios_dir}/')
        return 1

    print(f'\n=== Running Topology Suite ({len(suite)} scenarios) ===\n')

    failures = 0
    for i, scenario_config in enumerate(suite, 1):
        name = scenario_config['name']
        seed = scenario_config['seed']

        print(f'\n--- Scenario {i}/{len(suite)}: {name} ---')

        try:
            results = run_scenario(scenario=name, seed=seed, scenarios_dir=scenarios_dir)
        except RanTopologyError:
            logger.exception(f'Scenario {name} failed')
            failures += 1
            continue

        print(f'  Sites: {results["sites"]}  Sectors: {results["sectors"]}  '
              f'Receivers: {results["receivers"]} ({results["moved_receivers"]} moved)')
        for profile, summary in results['profiles'].items():
            print(f'  [{profile}]')
            for distance, loss, rate in summary['sweep']:
                print(f'    d={distance:.1f} m  loss={loss:.2f} dB  rate={rate}')
            if 'mean_best_loss_db' in summary:
                print(f'    mean best-link loss: {summary["mean_best_loss_db"]:.2f} dB, '
                      f'mean best-link rate: {summary["mean_best_rate_bps"] / 1e6:.6f} Mbps')

    print(f'\n{len(suite) - failures}/{len(suite)} scenarios completed')
    return 1 if failures else 0


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Build RAN topologies and evaluate link budgets')
    parser.add_argument('--config', type=str, default=str(Path(__file__).parent / 'config.yaml'),
                        help='Runner configuration file (default: app/config.yaml)')
    parser.add_argument('--scenarios-dir', type=str, default=None,
                        help='Directory containing scenario files (default: bundled scenarios)')
    parser.add_argument('--base-seed', type=int, default=None,
                        help='Base seed for scenarios (default: from config, else 42)')

    args = parser.parse_args()
    config = load_config(args.config)
    setup_logging(config.get('log_level', 'INFO'))

    sys.exit(main(
        scenarios_dir=args.scenarios_dir or config.get('scenarios_dir'),
        base_seed=args.base_seed if args.base_seed is not None else int(config.get('base_seed', 42))
    ))
