"""Network entities: Sites, Sectors, LinkSamples"""

from dataclasses import dataclass
from typing import Optional
import numpy as np

from .rate_adaptation import DataRate


@dataclass(frozen=True)
class Site:
    id: int
    x: float
    y: float
    z: float  # antenna mount height (m)

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])


@dataclass(frozen=True)
class Sector:
    id: int
    site_id: int
    sector_index: int
    bearing: float  # degrees, counter-clockwise from the x axis
    x: float
    y: float
    z: float
    beamwidth: float = 70.0  # degrees
    antenna_gain: float = 15.0  # dBi

    @property
    def orientation(self) -> float:
        """Antenna orientation handed to directional-gain models (degrees)"""
        return self.bearing

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])


@dataclass(frozen=True)
class LinkSample:
    distance: float
    profile: str
    loss_db: float
    nominal_rate: DataRate
    adapted_rate: DataRate
    rx_power_dbm: Optional[float] = None
