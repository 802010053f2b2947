"""
ArrayPattern package - Far-field gain of phased antenna arrays.

This package combines independently modeled element patterns, each translated
to its position in the array and weighted by a complex excitation, into the
complex gain of the whole array. It also provides sampling of that gain over
theta/phi grids and writing the result to text or HDF5 files.
"""

__version__ = '0.1.0'
__author__ = 'Justin Long'
__email__ = 'justinwlong1@gmail.com'

# Import key classes and functions to make them available at the package level
from .geometry import (
    Point,
    linear_positions,
    grid_positions,
    circular_positions
)
from .phase import (
    PhaseCache,
    calc_phase,
    compute_phase,
    clear_phase_cache,
    phase_cache_info
)
from .elements import (
    ElementModel,
    OmniElement,
    PatchElement,
    DataTableElement,
    ELEMENT_TYPES,
    create_element,
    patch_gain
)
from .array import (
    ArrayElement,
    ElementArray,
    steering_weights
)
from .sampler import (
    angle_grid,
    theta_grid,
    phi_grid,
    sample_pattern
)
from .ant_io import (
    write_text_grid,
    read_text_grid,
    write_hdf5,
    read_hdf5,
    write_pattern,
    pattern_format,
    save_table_npz,
    load_table_npz,
    save_array_json,
    load_array_json
)
from .errors import (
    ArrayPatternError,
    InvalidGeometry,
    IndexOutOfRange,
    PatternWriteError
)
from .utilities import (
    frequency_to_wavelength,
    magnitude_to_db,
    wavenumber,
    lightspeed,
    db_to_linear,
    linear_to_db
)

# Define what gets imported with "from array_pattern import *"
__all__ = [
    'Point',
    'linear_positions',
    'grid_positions',
    'circular_positions',
    'PhaseCache',
    'calc_phase',
    'compute_phase',
    'clear_phase_cache',
    'phase_cache_info',
    'ElementModel',
    'OmniElement',
    'PatchElement',
    'DataTableElement',
    'ELEMENT_TYPES',
    'create_element',
    'patch_gain',
    'ArrayElement',
    'ElementArray',
    'steering_weights',
    'angle_grid',
    'theta_grid',
    'phi_grid',
    'sample_pattern',
    'write_text_grid',
    'read_text_grid',
    'write_hdf5',
    'read_hdf5',
    'write_pattern',
    'pattern_format',
    'save_table_npz',
    'load_table_npz',
    'save_array_json',
    'load_array_json',
    'ArrayPatternError',
    'InvalidGeometry',
    'IndexOutOfRange',
    'PatternWriteError',
    'frequency_to_wavelength',
    'magnitude_to_db',
    'wavenumber',
    'lightspeed',
    'db_to_linear',
    'linear_to_db'
]
