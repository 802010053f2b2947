"""
Antenna arrays built from translated, weighted element patterns.
"""
import logging
from typing import Iterable, Iterator, List, Optional, Sequence

import numpy as np

from .elements import ElementModel, OmniElement
from .errors import IndexOutOfRange
from .geometry import Point
from .phase import calc_phase

# Configure logging
logger = logging.getLogger(__name__)


class ArrayElement:
    """
    One channel of an array: an element model, its placement and its weight.

    Placement and model are fixed at construction; only the weight may change.
    A position-aware model (OmniElement) already translates itself, so its
    placement is taken from the model and the array does not translate it again.

    Args:
        model: Element gain model
        position: Placement in meters (default: origin, or the model position
            for position-aware models)
        weight: Complex excitation coefficient (default: 1+0j)

    Raises:
        ValueError: If a position-aware model is given a different placement
    """

    def __init__(self, model: ElementModel, position: Optional[Point] = None,
                 weight: complex = 1 + 0j):
        if model.position_aware:
            if position is not None and tuple(position) != tuple(model.position):
                raise ValueError(f"{type(model).__name__} is placed at {model.position}; "
                                 f"cannot place it at {position}")
            position = model.position
        elif position is None:
            position = Point.origin()

        self._model = model
        self._position = Point(*position)
        self._weight = complex(weight)

    @property
    def model(self) -> ElementModel:
        return self._model

    @property
    def position(self) -> Point:
        return self._position

    @property
    def weight(self) -> complex:
        return self._weight

    def set_weight(self, weight: complex) -> None:
        self._weight = complex(weight)

    def get_gain(self, frequency: float, theta: float, phi: float) -> complex:
        """
        Fully translated and weighted contribution of this element.

        Args:
            frequency: Frequency in Hz
            theta: Polar angle in radians
            phi: Azimuth angle in radians
        """
        gain = self._model.get_gain(frequency, theta, phi)
        if not self._model.position_aware:
            gain = gain * calc_phase(self._position, frequency, theta, phi)
        return gain * self._weight

    def __repr__(self) -> str:
        return f"ArrayElement({self._model!r}, position={self._position}, weight={self._weight})"


class ElementArray:
    """
    An ordered collection of array elements.

    Antenna arrays take many shapes; this handles all of them as long as each
    element provides an ElementModel. The order of elements defines the channel
    indices used by get_channel_gain and set_weight. Order does not affect
    the summed gain.

    Weight updates must not run concurrently with gain queries on the same
    array.
    """

    def __init__(self, elements: Optional[Iterable[ArrayElement]] = None):
        self._elements: List[ArrayElement] = []
        for element in elements or []:
            self.append(element)

    @classmethod
    def from_positions(cls, model: ElementModel, positions: Sequence[Point],
                       weights: Optional[Sequence[complex]] = None) -> 'ElementArray':
        """
        Place copies of one element model at each of the given positions.

        Position-agnostic models are shared between channels. An OmniElement is
        re-created at every position since it carries its own placement.

        Args:
            model: Element model to replicate
            positions: Element placements in channel order
            weights: Optional complex weights, one per position

        Returns:
            ElementArray: The assembled array
        """
        if weights is None:
            weights = [1 + 0j] * len(positions)
        elif len(weights) != len(positions):
            raise ValueError(f"Number of weights ({len(weights)}) must match number of positions ({len(positions)})")

        array = cls()
        for position, weight in zip(positions, weights):
            if isinstance(model, OmniElement):
                array.append(ArrayElement(OmniElement(model.gain, position=position, weight=model.weight),
                                          weight=weight))
            else:
                array.append(ArrayElement(model, position=position, weight=weight))
        return array

    def append(self, element: ArrayElement) -> int:
        """
        Add an element as the next channel.

        Returns:
            int: Channel index of the new element
        """
        if not isinstance(element, ArrayElement):
            raise TypeError(f"Expected ArrayElement, got {type(element).__name__}")
        self._elements.append(element)
        logger.debug(f"Added channel {len(self._elements) - 1}: {element!r}")
        return len(self._elements) - 1

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[ArrayElement]:
        return iter(self._elements)

    def __getitem__(self, index: int) -> ArrayElement:
        return self._elements[self._check_index(index)]

    def _check_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise TypeError(f"Channel index must be an integer, got {type(index).__name__}")
        if index < 0 or index >= len(self._elements):
            raise IndexOutOfRange(index, len(self._elements))
        return int(index)

    @property
    def positions(self) -> List[Point]:
        return [element.position for element in self._elements]

    @property
    def weights(self) -> np.ndarray:
        return np.array([element.weight for element in self._elements], dtype=complex)

    def set_weight(self, index: int, weight: complex) -> None:
        self._elements[self._check_index(index)].set_weight(weight)

    def set_weights(self, weights: Sequence[complex]) -> None:
        """
        Replace every channel weight.

        Args:
            weights: One complex weight per element, in channel order
        """
        weights = list(weights)
        if len(weights) != len(self._elements):
            raise ValueError(f"Number of weights ({len(weights)}) must match number of elements ({len(self._elements)})")
        for element, weight in zip(self._elements, weights):
            element.set_weight(weight)

    def get_gain(self, frequency: float, theta: float, phi: float) -> complex:
        """
        Cumulative gain of all elements in the array.

        Args:
            frequency: Frequency in Hz
            theta: Polar angle in radians
            phi: Azimuth angle in radians

        Returns:
            complex: Sum of every channel contribution; 0j for an empty array
        """
        return sum((element.get_gain(frequency, theta, phi) for element in self._elements), 0j)

    def get_channel_gain(self, index: int, frequency: float, theta: float, phi: float) -> complex:
        """
        Contribution of a single channel, without summation.

        Raises:
            IndexOutOfRange: If index is not a channel of this array
        """
        return self._elements[self._check_index(index)].get_gain(frequency, theta, phi)

    def channel_gains(self, frequency: float, theta: float, phi: float) -> np.ndarray:
        """Vector of every channel contribution, in channel order."""
        return np.array([element.get_gain(frequency, theta, phi) for element in self._elements],
                        dtype=complex)

    def __repr__(self) -> str:
        return f"ElementArray({len(self._elements)} elements)"


def steering_weights(positions: Sequence[Point], frequency: float, theta: float, phi: float) -> np.ndarray:
    """
    Phase-only weights that steer the main beam toward (theta, phi).

    Each weight is the conjugate of the element's phase translation factor, so
    all contributions add in phase in the steering direction.

    Args:
        positions: Element placements in channel order
        frequency: Frequency in Hz
        theta: Steering polar angle in radians
        phi: Steering azimuth angle in radians

    Returns:
        ndarray: Complex unit-magnitude weights
    """
    return np.array([calc_phase(p, frequency, theta, phi).conjugate() for p in positions],
                    dtype=complex)
