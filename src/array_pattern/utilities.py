"""
Common utility functions and constants for array pattern computation.
"""
import numpy as np
from typing import Union

# Physical constants
lightspeed = 299792458.0  # Speed of light in vacuum (m/s), exact

# Default capacity of the phase translation cache
DEFAULT_CACHE_SIZE = 1024

# Floor applied to power values before taking the log, so nulls stay finite
DB_FLOOR = 1e-15


def wavenumber(frequency: float) -> float:
    """Free-space wavenumber k = 2*pi*f/c in rad/m."""
    return 2.0 * np.pi * frequency / lightspeed


def frequency_to_wavelength(frequency: Union[float, np.ndarray]) -> np.ndarray:
    """
    Free-space wavelength of a frequency.

    Args:
        frequency: Frequency in Hz, > 0

    Returns:
        Wavelength in meters

    Raises:
        ValueError: If any frequency is zero or negative
    """
    frequency = np.asarray(frequency, dtype=float)
    if np.any(frequency <= 0):
        raise ValueError(f"Frequency must be positive, got {frequency}")
    return lightspeed / frequency


def db_to_linear(gain_db: Union[float, np.ndarray]) -> np.ndarray:
    """Power gain in dB (e.g. dBi) to a linear power ratio."""
    return np.power(10.0, np.asarray(gain_db, dtype=float) / 10.0)


def linear_to_db(power: Union[float, np.ndarray]) -> np.ndarray:
    """
    Linear power ratio to dB.

    Values below DB_FLOOR (pattern nulls) are floored so the result stays
    finite.

    Raises:
        ValueError: If any value is negative
    """
    power = np.asarray(power, dtype=float)
    if np.any(power < 0):
        raise ValueError("Power must be non-negative for dB conversion")
    return 10.0 * np.log10(np.maximum(power, DB_FLOOR))


def magnitude_to_db(magnitude: Union[float, np.ndarray]) -> np.ndarray:
    """Field gain magnitude |g| to dB, i.e. 10*log10(|g|**2)."""
    return linear_to_db(np.square(np.abs(magnitude)))
