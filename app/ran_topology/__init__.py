"""Urban RAN topology synthesis and first-order link budget"""

from .deployment import UrbanDeployment
from .network import Site, Sector, LinkSample
from .scenario_loader import SimParams, load_scenario_config
from .network_init import create_hex_grid, synthesize_sectors, drop_receivers
from .path_loss import (MacroCellParams, VlcParams, OwcParams, calculate_path_loss,
                        macro_cell_loss, vlc_loss, owc_loss, fspl_reference_loss)
from .rate_adaptation import DataRate, adapt_data_rate
from .collocation import resolve_collocations
from .link_budget import evaluate_distance, evaluate_link, evaluate_links
from .errors import (RanTopologyError, ConfigurationError, DegenerateGeometryError,
                     ResolverExhaustedError)

__all__ = ['UrbanDeployment', 'Site', 'Sector', 'LinkSample', 'SimParams', 'load_scenario_config',
           'create_hex_grid', 'synthesize_sectors', 'drop_receivers',
           'MacroCellParams', 'VlcParams', 'OwcParams', 'calculate_path_loss',
           'macro_cell_loss', 'vlc_loss', 'owc_loss', 'fspl_reference_loss',
           'DataRate', 'adapt_data_rate', 'resolve_collocations',
           'evaluate_distance', 'evaluate_link', 'evaluate_links',
           'RanTopologyError', 'ConfigurationError', 'DegenerateGeometryError',
           'ResolverExhaustedError']
