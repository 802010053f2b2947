"""
Phase translation of element patterns.

Antenna patterns are normally defined at the phase center of the element. To
combine elements into an array, each pattern is translated to the element's
position, which for a far-field plane wave arriving from (theta, phi) is a
pure phase factor.
"""
import logging
import threading
from collections import OrderedDict
from typing import NamedTuple, Optional, Tuple

import numpy as np

from .geometry import Point
from .utilities import DEFAULT_CACHE_SIZE, wavenumber

# Configure logging
logger = logging.getLogger(__name__)

PhaseKey = Tuple[float, float, float, float, float, float]


class CacheInfo(NamedTuple):
    hits: int
    misses: int
    maxsize: int
    currsize: int


class PhaseCache:
    """
    Bounded, thread-safe least-recently-used map for phase factors.

    Concurrent callers may compute the same missing key twice; the value is
    deterministic so the last writer wins without harm. The lock only protects
    the ordering bookkeeping of the underlying OrderedDict.
    """

    def __init__(self, maxsize: int = DEFAULT_CACHE_SIZE):
        if maxsize <= 0:
            raise ValueError("Cache maxsize must be positive")
        self.maxsize = int(maxsize)
        self._data: 'OrderedDict[PhaseKey, complex]' = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        logger.debug(f"Created phase cache with capacity {self.maxsize}")

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: PhaseKey) -> bool:
        with self._lock:
            return key in self._data

    def get(self, key: PhaseKey) -> Optional[complex]:
        with self._lock:
            value = self._data.get(key)
            if value is None:
                self._misses += 1
                return None
            self._data.move_to_end(key)
            self._hits += 1
            return value

    def put(self, key: PhaseKey, value: complex) -> None:
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self.maxsize:
                self._data.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._hits = 0
            self._misses = 0

    def info(self) -> CacheInfo:
        with self._lock:
            return CacheInfo(self._hits, self._misses, self.maxsize, len(self._data))


_default_cache = PhaseCache()

# Sentinel so that cache=None can mean "do not cache"
_DEFAULT = object()


def _normalized(point: Point, frequency: float, theta: float, phi: float) -> PhaseKey:
    # Adding 0.0 turns -0.0 into 0.0, so both zeros share one key and one value
    return (float(point.x) + 0.0, float(point.y) + 0.0, float(point.z) + 0.0,
            float(frequency) + 0.0, float(theta) + 0.0, float(phi) + 0.0)


def compute_phase(point: Point, frequency: float, theta: float, phi: float) -> complex:
    """
    Uncached phase factor for translating a pattern from the origin to a point.

    Args:
        point: Element position in meters
        frequency: Frequency in Hz
        theta: Polar angle in radians
        phi: Azimuth angle in radians

    Returns:
        complex: Unit-magnitude phase factor
    """
    x, y, z, frequency, theta, phi = _normalized(point, frequency, theta, phi)
    k = wavenumber(frequency)
    sin_theta = np.sin(theta)

    dx = 1j * k * x * np.cos(phi) * sin_theta
    dy = 1j * k * y * np.sin(phi) * sin_theta
    dz = 1j * k * z * np.cos(theta)

    return complex(np.exp(dx) * np.exp(dy) * np.exp(dz))


def calc_phase(point: Point, frequency: float, theta: float, phi: float,
               cache=_DEFAULT) -> complex:
    """
    Phase factor for translating a pattern from the origin to a point.

    Results are memoized on (x, y, z, frequency, theta, phi). A sweep over a
    theta/phi grid re-queries the same few element positions many times.

    Args:
        point: Element position in meters
        frequency: Frequency in Hz
        theta: Polar angle in radians
        phi: Azimuth angle in radians
        cache: PhaseCache to use. Defaults to the module cache; pass None to
            compute without caching.

    Returns:
        complex: Unit-magnitude phase factor. Exactly 1+0j at the origin.
    """
    if cache is _DEFAULT:
        cache = _default_cache
    if cache is None:
        return compute_phase(point, frequency, theta, phi)

    key = _normalized(point, frequency, theta, phi)
    value = cache.get(key)
    if value is None:
        value = compute_phase(point, frequency, theta, phi)
        cache.put(key, value)
    return value


def clear_phase_cache() -> None:
    """Empty the module-level phase cache."""
    _default_cache.clear()


def phase_cache_info() -> CacheInfo:
    """Hit/miss statistics of the module-level phase cache."""
    return _default_cache.info()
