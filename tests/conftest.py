import json

import pytest


@pytest.fixture
def write_scenario(tmp_path):
    """Write a scenario JSON into tmp_path and return (scenarios_dir, name)"""

    def _write(name='custom', **fields):
        cfg = {
            'name': name,
            'rows': 1,
            'cols': 1,
            'isd': 10,
            'mountHeight': 0,
            'numSectors': 1,
            'sectorOffset': 0,
            'numUEs': 0,
            'profiles': ['macro'],
            'referenceLoss': 40.7,
        }
        cfg.update(fields)
        with open(tmp_path / f'{name}.json', 'w') as f:
            json.dump(cfg, f)
        return tmp_path, name

    return _write
