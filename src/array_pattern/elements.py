"""
Element gain models.

Each model returns the complex far-field gain of a single radiator for a given
frequency and direction. The set of models is closed: OmniElement,
PatchElement and DataTableElement, registered in ELEMENT_TYPES.
"""
import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

import numpy as np
import xarray as xr
from scipy.interpolate import RegularGridInterpolator

from .errors import InvalidGeometry
from .geometry import Point
from .phase import calc_phase
from .utilities import DEFAULT_CACHE_SIZE, db_to_linear, wavenumber

# Configure logging
logger = logging.getLogger(__name__)

# Absolute tolerance (radians) for a phi axis that already closes the turn
_PHI_TOLERANCE = 1e-9


class ElementModel(ABC):
    """
    Interface for the gain model of one array element.

    Attributes:
        kind (str): Registry name of the model
        position_aware (bool): True if get_gain already includes the phase
            translation to the element position. The array only translates
            models that are not position aware.
    """

    kind: str = ''
    position_aware: bool = False

    @abstractmethod
    def get_gain(self, frequency: float, theta: float, phi: float) -> complex:
        """
        Complex gain of this element.

        Args:
            frequency: Frequency in Hz
            theta: Polar angle in radians, [0, pi]
            phi: Azimuth angle in radians, [0, 2*pi)

        Returns:
            complex: Linear (not dB) complex gain
        """

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Construction parameters as plain Python values."""


class OmniElement(ElementModel):
    """
    An omni-directional element, the most generic type of element.

    The element is position aware: its own position, gain and weight are all
    folded into get_gain.

    Args:
        gain: Isotropic linear gain (1.0 is 0 dBi)
        position: Position of the element in meters (default: origin)
        weight: Complex excitation applied to the pattern (default: 1+0j)
    """

    kind = 'omni'
    position_aware = True

    def __init__(self, gain: float = 1.0, position: Optional[Point] = None,
                 weight: complex = 1 + 0j):
        gain = float(gain)
        if not np.isfinite(gain) or gain < 0:
            raise InvalidGeometry(f"Omni gain must be finite and non-negative, got {gain}")
        self._gain = gain
        self._position = position if position is not None else Point.origin()
        self._weight = complex(weight)

    @property
    def gain(self) -> float:
        return self._gain

    @property
    def position(self) -> Point:
        return self._position

    @property
    def weight(self) -> complex:
        return self._weight

    def set_weight(self, weight: complex) -> None:
        self._weight = complex(weight)

    def get_gain(self, frequency: float, theta: float, phi: float) -> complex:
        return calc_phase(self._position, frequency, theta, phi) * self._gain * self._weight

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind,
            'gain': self._gain,
            'position': list(self._position),
            'weight': [self._weight.real, self._weight.imag],
        }

    def __repr__(self) -> str:
        return f"OmniElement(gain={self._gain}, position={self._position}, weight={self._weight})"


@lru_cache(maxsize=DEFAULT_CACHE_SIZE)
def patch_gain(length: float, width: float, frequency: float, theta: float, phi: float) -> complex:
    """
    Canonical closed-form gain of a rectangular microstrip patch.

    Shared by every PatchElement so that all instances benefit from the same
    memoization.

    Args:
        length: Side of the patch parallel with the feed (meters)
        width: Side of the patch normal to the feed (meters)
        frequency: Frequency in Hz
        theta: Polar angle in radians
        phi: Azimuth angle in radians

    Returns:
        complex: Non-negative real gain with zero imaginary part
    """
    sin_theta = np.sin(theta)
    if sin_theta == 0.0:
        # Boresight gain is exactly 1 for every phi
        return complex(1.0, 0.0)

    k = wavenumber(frequency)
    cos_theta = np.cos(theta)
    sin_phi = np.sin(phi)
    cos_phi = np.cos(phi)

    u = k * width * sin_theta * sin_phi / 2.0
    # sin(u)/u tends to 1 as u -> 0
    amplitude = np.sin(u) / u if u != 0.0 else 1.0
    taper = np.cos(k * length * sin_theta * cos_phi)
    combined = amplitude * taper

    e_theta = combined * cos_phi
    e_phi = -combined * cos_theta * sin_phi

    return complex(float(np.sqrt(e_theta ** 2 + e_phi ** 2)), 0.0)


class PatchElement(ElementModel):
    """
    A patch is a PCB based antenna with a hemispherically directional pattern.

    The model is defined at its own phase center; placement and weighting are
    applied by the enclosing ArrayElement.

    Args:
        length: Side of the patch parallel with the feed (meters), > 0
        width: Side of the patch normal to the feed (meters), > 0

    Raises:
        InvalidGeometry: If length or width is missing, non-finite or not positive
    """

    kind = 'patch'
    position_aware = False

    def __init__(self, length: float, width: float):
        self._length = _positive_dimension('length', length)
        self._width = _positive_dimension('width', width)

    @property
    def length(self) -> float:
        return self._length

    @property
    def width(self) -> float:
        return self._width

    def get_gain(self, frequency: float, theta: float, phi: float) -> complex:
        return patch_gain(self._length, self._width, float(frequency), float(theta), float(phi))

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind, 'length': self._length, 'width': self._width}

    def __repr__(self) -> str:
        return f"PatchElement(length={self._length}, width={self._width})"


def _positive_dimension(name: str, value) -> float:
    if value is None:
        raise InvalidGeometry(f"Patch {name} is required")
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidGeometry(f"Patch {name} must be a number, got {value!r}") from e
    if not np.isfinite(value) or value <= 0:
        raise InvalidGeometry(f"Patch {name} must be positive, got {value}")
    return value


class DataTableElement(ElementModel):
    """
    An element whose pattern comes from a table of complex samples.

    The table is indexed [theta, phi] over strictly increasing angle axes in
    radians. Gains between samples are bilinearly interpolated, separately on
    the real and imaginary parts. Phi wraps modulo 2*pi relative to the first
    phi sample, so axes on 0..2*pi and -pi..pi both work. A table whose phi
    axis spans a full turn is treated as periodic so that the gap between the
    last and first column is interpolated too; an axis that already repeats
    its first angle at +2*pi is used as given. Theta outside the table is
    clamped to the nearest edge.

    Args:
        theta: Theta axis of the table in radians
        phi: Phi axis of the table in radians
        samples: Complex gain samples, shape (len(theta), len(phi))
        offset: Optional phase center of the table relative to the element
            position. When given, the interpolated gain is translated to it.

    Raises:
        InvalidGeometry: If axes or samples are malformed
    """

    kind = 'data'
    position_aware = False

    def __init__(self, theta: np.ndarray, phi: np.ndarray, samples: np.ndarray,
                 offset: Optional[Point] = None):
        theta = np.asarray(theta, dtype=float)
        phi = np.asarray(phi, dtype=float)
        samples = np.asarray(samples, dtype=complex)

        for name, axis in (('theta', theta), ('phi', phi)):
            if axis.ndim != 1 or axis.size < 2:
                raise InvalidGeometry(f"Table {name} axis must be 1D with at least 2 samples")
            if not np.all(np.isfinite(axis)) or np.any(np.diff(axis) <= 0):
                raise InvalidGeometry(f"Table {name} axis must be finite and strictly increasing")

        expected_shape = (theta.size, phi.size)
        if samples.shape != expected_shape:
            raise InvalidGeometry(f"Table shape mismatch: expected {expected_shape}, got {samples.shape}")

        self.data = xr.DataArray(
            samples,
            dims=('theta', 'phi'),
            coords={'theta': theta, 'phi': phi},
            name='gain',
        )
        self._offset = offset
        self._warned_clamp = False

        # Close the phi gap when the table covers a full turn. A table whose
        # last column already sits at phi[0] + 2*pi is closed as given.
        phi_step = np.max(np.diff(phi))
        phi_gap = phi[0] + 2 * np.pi - phi[-1]
        if phi_gap < -_PHI_TOLERANCE:
            raise InvalidGeometry(f"Table phi axis spans more than a full turn: "
                                  f"[{phi[0]:.6f}, {phi[-1]:.6f}]")
        closed = abs(phi_gap) <= _PHI_TOLERANCE
        self._periodic = closed or phi_gap <= phi_step * (1 + 1e-9)
        if closed:
            if not np.allclose(samples[:, 0], samples[:, -1]):
                logger.warning("Table phi axis covers a full turn but its first and last "
                               "columns differ; the first column is used at the seam")
            phi_axis = phi
            grid = samples
        elif self._periodic:
            phi_axis = np.append(phi, phi[0] + 2 * np.pi)
            grid = np.concatenate([samples, samples[:, :1]], axis=1)
        else:
            phi_axis = phi
            grid = samples

        self._theta_range = (theta[0], theta[-1])
        self._phi_range = (phi_axis[0], phi_axis[-1])
        self._real = RegularGridInterpolator((theta, phi_axis), grid.real, method='linear')
        self._imag = RegularGridInterpolator((theta, phi_axis), grid.imag, method='linear')
        logger.debug(f"Created data table element {expected_shape}, periodic in phi: {self._periodic}")

    @classmethod
    def from_function(cls, func: Callable[[float, float], complex], theta: np.ndarray,
                      phi: np.ndarray, offset: Optional[Point] = None) -> 'DataTableElement':
        """
        Tabulate any gain function over a theta/phi grid.

        Args:
            func: Callable (theta, phi) -> complex gain, angles in radians
            theta: Theta axis in radians
            phi: Phi axis in radians
            offset: Optional phase center offset of the resulting table
        """
        theta = np.asarray(theta, dtype=float)
        phi = np.asarray(phi, dtype=float)
        samples = np.empty((theta.size, phi.size), dtype=complex)
        for t_idx, t_val in enumerate(theta):
            for p_idx, p_val in enumerate(phi):
                samples[t_idx, p_idx] = func(t_val, p_val)
        return cls(theta, phi, samples, offset=offset)

    @property
    def theta(self) -> np.ndarray:
        return self.data.theta.values

    @property
    def phi(self) -> np.ndarray:
        return self.data.phi.values

    @property
    def samples(self) -> np.ndarray:
        return self.data.values

    @property
    def offset(self) -> Optional[Point]:
        return self._offset

    @property
    def periodic(self) -> bool:
        return self._periodic

    def interpolate(self, theta: float, phi: float) -> complex:
        """Bilinear lookup of the table, without any phase translation."""
        theta_lo, theta_hi = self._theta_range
        if theta < theta_lo or theta > theta_hi:
            if not self._warned_clamp:
                logger.warning(f"Theta {theta:.4f} rad outside table range "
                               f"[{theta_lo:.4f}, {theta_hi:.4f}], clamping to edge")
                self._warned_clamp = True
            theta = min(max(theta, theta_lo), theta_hi)

        # Wrap relative to the start of the axis, so tables on -pi..pi work too
        phi_lo, phi_hi = self._phi_range
        phi = phi_lo + (phi - phi_lo) % (2 * np.pi)
        if phi > phi_hi:
            if self._periodic:
                # Only rounding puts a query past a closed axis
                phi = phi_hi
            else:
                # Nearest edge of the uncovered sector
                phi = phi_hi if phi - phi_hi <= phi_lo + 2 * np.pi - phi else phi_lo

        point = np.array([[theta, phi]])
        return complex(self._real(point)[0], self._imag(point)[0])

    def get_gain(self, frequency: float, theta: float, phi: float) -> complex:
        value = self.interpolate(theta, phi)
        if self._offset is not None:
            value *= calc_phase(self._offset, frequency, theta, phi)
        return value

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind,
            'offset': list(self._offset) if self._offset is not None else None,
        }

    def __repr__(self) -> str:
        return f"DataTableElement(shape={self.data.shape}, offset={self._offset})"


ELEMENT_TYPES = {
    OmniElement.kind: OmniElement,
    PatchElement.kind: PatchElement,
    DataTableElement.kind: DataTableElement,
}


def create_element(kind: str, **params) -> ElementModel:
    """
    Create an element model by registry name.

    Omni gain may be given either as a linear 'gain' or in dBi as 'gain_dbi'.

    Args:
        kind: One of 'omni', 'patch' or 'data'
        **params: Constructor parameters of the chosen model

    Returns:
        ElementModel: The constructed model

    Raises:
        ValueError: If kind is unknown, or an omni gets both gain and gain_dbi
        InvalidGeometry: If required geometry is missing or invalid
    """
    kind = kind.lower()
    if kind not in ELEMENT_TYPES:
        raise ValueError(f"Invalid element kind: {kind}. Must be one of {sorted(ELEMENT_TYPES)}")

    if kind == PatchElement.kind:
        return PatchElement(params.pop('length', None), params.pop('width', None), **params)
    if kind == OmniElement.kind and 'gain_dbi' in params:
        if 'gain' in params:
            raise ValueError("Give omni gain either as 'gain' or as 'gain_dbi', not both")
        params['gain'] = float(db_to_linear(params.pop('gain_dbi')))
    return ELEMENT_TYPES[kind](**params)
