"""
Element placement geometry.

Positions are Cartesian, in meters, relative to the array phase center.
"""
import math
import numpy as np
from typing import List, NamedTuple, Optional, Union


class Point(NamedTuple):
    """
    An immutable position in 3D Cartesian space.

    Attributes:
        x: Distance along x from the phase center (meters)
        y: Distance along y from the phase center (meters)
        z: Distance along z from the phase center (meters)
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def origin(cls) -> 'Point':
        """The array phase center."""
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_array(cls, values: Union[np.ndarray, List[float]]) -> 'Point':
        """Build a Point from a 3-element sequence."""
        values = np.asarray(values, dtype=float).ravel()
        if values.size != 3:
            raise ValueError(f"Point requires 3 coordinates, got {values.size}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y, self.z - other.z)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def distance_to(self, other: 'Point') -> float:
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2)

    def is_origin(self) -> bool:
        return self.x == 0.0 and self.y == 0.0 and self.z == 0.0


def linear_positions(n_elements: int, spacing: float, axis: str = 'x',
                     centered: bool = False) -> List[Point]:
    """
    Positions of a uniform linear array.

    Args:
        n_elements: Number of elements
        spacing: Element spacing in meters
        axis: Axis the array lies along ('x', 'y' or 'z')
        centered: If True, center the array on the origin; otherwise the first
            element sits at the origin

    Returns:
        List of Points, in channel order
    """
    if n_elements < 0:
        raise ValueError("n_elements must be non-negative")
    if axis not in ('x', 'y', 'z'):
        raise ValueError(f"Invalid axis: {axis}. Must be 'x', 'y' or 'z'")

    offset = (n_elements - 1) * spacing / 2.0 if centered else 0.0
    positions = []
    for idx in range(n_elements):
        distance = idx * spacing - offset
        positions.append(Point(**{'x': 0.0, 'y': 0.0, 'z': 0.0, axis: distance}))
    return positions


def grid_positions(n_x: int, n_y: int, spacing_x: float, spacing_y: Optional[float] = None,
                   centered: bool = True) -> List[Point]:
    """
    Positions of a rectangular planar array in the xy plane.

    Channels are ordered row by row: x varies fastest.
    """
    if n_x < 0 or n_y < 0:
        raise ValueError("Grid dimensions must be non-negative")
    if spacing_y is None:
        spacing_y = spacing_x

    x_offset = (n_x - 1) * spacing_x / 2.0 if centered else 0.0
    y_offset = (n_y - 1) * spacing_y / 2.0 if centered else 0.0
    return [
        Point(ix * spacing_x - x_offset, iy * spacing_y - y_offset, 0.0)
        for iy in range(n_y)
        for ix in range(n_x)
    ]


def circular_positions(n_elements: int, radius: float, rotation: float = 0.0) -> List[Point]:
    """
    Positions of a uniform circular array in the xy plane.

    Args:
        n_elements: Number of elements on the ring
        radius: Ring radius in meters
        rotation: Angle of the first element from the x axis in radians
    """
    if n_elements < 0:
        raise ValueError("n_elements must be non-negative")
    angles = rotation + 2 * np.pi * np.arange(n_elements) / max(n_elements, 1)
    return [Point(float(radius * np.cos(a)), float(radius * np.sin(a)), 0.0) for a in angles]
