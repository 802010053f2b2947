"""
Sampling of array gain over a theta/phi grid.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np
import xarray as xr

from .array import ElementArray

# Configure logging
logger = logging.getLogger(__name__)

_GRID_TOLERANCE = 1e-9


def angle_grid(spacing: float, stop: float, inclusive: bool) -> np.ndarray:
    """
    Uniform angle samples {0, spacing, 2*spacing, ...} up to stop.

    Args:
        spacing: Step size in radians
        stop: Upper limit in radians
        inclusive: Whether stop itself is kept when it lands on the grid

    Returns:
        ndarray: Angles in radians
    """
    if spacing <= 0 or not np.isfinite(spacing):
        raise ValueError("Angle spacing must be positive")

    ratio = stop / spacing
    count = int(np.floor(ratio + _GRID_TOLERANCE))
    if abs(ratio - round(ratio)) > _GRID_TOLERANCE:
        logger.warning(f"Spacing {np.degrees(spacing):.4f} deg does not divide "
                       f"{np.degrees(stop):.1f} deg evenly")
    elif not inclusive:
        count -= 1
    return np.arange(count + 1) * spacing


def theta_grid(theta_spacing: float) -> np.ndarray:
    """Theta samples covering [0, pi]."""
    return angle_grid(theta_spacing, np.pi, inclusive=True)


def phi_grid(phi_spacing: float) -> np.ndarray:
    """Phi samples covering [0, 2*pi)."""
    return angle_grid(phi_spacing, 2 * np.pi, inclusive=False)


def sample_pattern(array: ElementArray, frequency: float, theta_spacing: float,
                   phi_spacing: float, channel: Optional[int] = None,
                   max_workers: Optional[int] = None) -> xr.DataArray:
    """
    Sweep the array gain over a full theta/phi grid.

    Every grid point is an independent evaluation, so rows of constant phi can
    be computed on worker threads.

    Args:
        array: Array to sample
        frequency: Frequency in Hz
        theta_spacing: Theta step in radians
        phi_spacing: Phi step in radians
        channel: If given, sample only this channel (get_channel_gain)
        max_workers: Number of worker threads (default: evaluate serially)

    Returns:
        xarray.DataArray: Gain magnitude indexed [phi, theta], with angle
            coordinates in degrees and the sweep parameters as attributes

    Raises:
        ValueError: If frequency or spacing is not positive
        IndexOutOfRange: If channel is not a channel of the array
    """
    if frequency <= 0:
        raise ValueError("Frequency must be positive")

    thetas = theta_grid(theta_spacing)
    phis = phi_grid(phi_spacing)

    if channel is None:
        def gain(theta, phi):
            return array.get_gain(frequency, theta, phi)
    else:
        # Fail before the sweep starts
        array.get_channel_gain(channel, frequency, 0.0, 0.0)

        def gain(theta, phi):
            return array.get_channel_gain(channel, frequency, theta, phi)

    def sample_row(phi):
        return [abs(gain(theta, phi)) for theta in thetas]

    logger.info(f"Sampling {len(phis)} x {len(thetas)} grid at {frequency/1e9:.3f} GHz")
    if max_workers is not None and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            rows = list(executor.map(sample_row, phis))
    else:
        rows = [sample_row(phi) for phi in phis]

    values = np.array(rows, dtype=np.float64).reshape(len(phis), len(thetas))
    logger.info(f"Sampling complete, peak gain {values.max() if values.size else 0.0:.3f}")

    return xr.DataArray(
        values,
        dims=('phi', 'theta'),
        coords={'phi': np.degrees(phis), 'theta': np.degrees(thetas)},
        name='gain',
        attrs={
            'frequency': float(frequency),
            'theta_spacing': float(theta_spacing),
            'phi_spacing': float(phi_spacing),
        },
    )
