"""Network initialization: hexagonal site grid, sectors and receiver drops"""

import logging
import operator
from typing import List

import numpy as np

from .errors import ConfigurationError
from .network import Site, Sector
from .scenario_loader import SimParams

logger = logging.getLogger(__name__)


def _as_count(value, what: str) -> int:
    """Integer count; integral floats such as 3.0 are accepted"""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return operator.index(value)
    except TypeError as e:
        raise ConfigurationError(f'{what} must be an integer, got {value!r}') from e


def create_hex_grid(rows: int, cols: int, isd: float, mount_height: float = 25.0) -> List[Site]:
    """
    Site centers on a hexagonal lattice.

    Row spacing is isd*sqrt(3)/2, column spacing is isd and odd rows are
    shifted by isd/2, so the cells tessellate. Sites are returned row-major
    and their ids are their positions in that order.

    Args:
        rows: Number of rows (<= 0 gives an empty grid)
        cols: Number of columns (<= 0 gives an empty grid)
        isd: Inter-site distance in meters
        mount_height: Antenna height, used as z for every site

    Returns:
        List of rows*cols sites
    """
    rows = _as_count(rows, 'Rows')
    cols = _as_count(cols, 'Columns')
    if not (np.isfinite(isd) and isd > 0):
        raise ConfigurationError(f'Inter-site distance must be positive, got {isd}')
    if not (np.isfinite(mount_height) and mount_height >= 0):
        raise ConfigurationError(f'Mount height must be non-negative, got {mount_height}')

    dx = isd
    dy = isd * np.sqrt(3.0) / 2.0

    sites = []
    site_id = 0

    for r in range(max(0, rows)):
        for c in range(max(0, cols)):
            x = c * dx + (dx / 2.0 if r % 2 else 0.0)
            y = r * dy
            sites.append(Site(id=site_id, x=float(x), y=float(y), z=float(mount_height)))
            site_id += 1

    return sites


def synthesize_sectors(sites: List[Site], sectors_per_site: int = 3, offset_radius: float = 0.0,
                       beamwidth: float = 70.0, antenna_gain: float = 15.0) -> List[Sector]:
    """
    Expand every site into evenly spaced sectors.

    Bearings are s*360/sectors_per_site degrees. A zero offset keeps all
    sectors at the site center, distinguished only by antenna orientation;
    a positive offset moves each sector that far along its bearing.

    Args:
        sites: Sites in generation order
        sectors_per_site: Sectors per site (>= 1)
        offset_radius: Distance from the site center in meters (>= 0)
        beamwidth: Antenna beamwidth in degrees
        antenna_gain: Antenna gain in dBi

    Returns:
        Sectors in site order, bearings ascending within a site
    """
    sectors_per_site = _as_count(sectors_per_site, 'Sectors per site')
    if sectors_per_site < 1:
        raise ConfigurationError(f'Sectors per site must be at least 1, got {sectors_per_site}')
    if not (np.isfinite(offset_radius) and offset_radius >= 0):
        raise ConfigurationError(f'Sector offset radius must be non-negative, got {offset_radius}')
    if not beamwidth > 0:
        raise ConfigurationError(f'Beamwidth must be positive, got {beamwidth}')

    step = 360.0 / sectors_per_site

    sectors = []
    sector_id = 0

    for site in sites:
        for s in range(sectors_per_site):
            bearing = s * step
            angle = np.deg2rad(bearing)

            if offset_radius > 0:
                x = site.x + offset_radius * np.cos(angle)
                y = site.y + offset_radius * np.sin(angle)
            else:
                x, y = site.x, site.y

            sectors.append(Sector(
                id=sector_id,
                site_id=site.id,
                sector_index=s,
                bearing=bearing,
                x=float(x),
                y=float(y),
                z=site.z,
                beamwidth=beamwidth,
                antenna_gain=antenna_gain
            ))
            sector_id += 1

    return sectors


def drop_receivers(count: int, width: float, height: float, z: float,
                   rng: np.random.RandomState) -> np.ndarray:
    """Uniform receiver positions in [0, width] x [0, height] at height z, shape (count, 3)"""
    if count < 0:
        raise ConfigurationError(f'Receiver count must be non-negative, got {count}')
    if not (width >= 0 and height >= 0):
        raise ConfigurationError(f'Drop area must be non-negative, got {width} x {height}')

    positions = np.empty((count, 3))
    positions[:, 0] = rng.uniform(0, width, size=count)
    positions[:, 1] = rng.uniform(0, height, size=count)
    positions[:, 2] = z
    return positions


def create_layout(sim_params: SimParams) -> List[Site]:
    """Create site layout for a scenario"""

    sites = create_hex_grid(sim_params.rows, sim_params.cols,
                            sim_params.isd, sim_params.mount_height)

    logger.info(f'Created {len(sites)} sites for {sim_params.name}')
    return sites


def configure_sectors(sites: List[Site], sim_params: SimParams) -> List[Sector]:
    """Configure sectors for every site of a scenario"""

    sectors = synthesize_sectors(sites,
                                 sectors_per_site=sim_params.num_sectors,
                                 offset_radius=sim_params.sector_offset,
                                 beamwidth=sim_params.beamwidth,
                                 antenna_gain=sim_params.antenna_gain)

    logger.info(f'Configured {len(sectors)} sectors for {sim_params.name}')
    return sectors


def initialize_receivers(sim_params: SimParams, seed: int) -> np.ndarray:
    """Initial receiver drop for a scenario"""

    rng = np.random.RandomState(seed + 2000)

    positions = drop_receivers(sim_params.num_ues, sim_params.area_width,
                               sim_params.area_height, sim_params.ue_height, rng)

    logger.info(f'Initialized {len(positions)} receivers for {sim_params.name}')
    return positions
