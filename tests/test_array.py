"""
Tests for array assembly and gain aggregation.
"""
import os
import sys

# Add the src directory to the path if not already installed
src_path = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if src_path not in sys.path:
    sys.path.insert(0, src_path)

import numpy as np
import pytest
from array_pattern import (
    ArrayElement, ElementArray, IndexOutOfRange, OmniElement, PatchElement, Point,
    calc_phase, lightspeed, linear_positions, grid_positions, circular_positions,
    steering_weights
)

FREQUENCY = 1e9
WAVELENGTH = lightspeed / FREQUENCY


def make_mixed_array():
    return ElementArray([
        ArrayElement(OmniElement(gain=1.0)),
        ArrayElement(PatchElement(0.15, 0.12), position=Point(WAVELENGTH / 2, 0, 0), weight=0.5 - 0.2j),
        ArrayElement(OmniElement(gain=2.0, position=Point(0, 0.1, 0.05)), weight=1j),
    ])


def test_empty_array_gain_is_zero():
    array = ElementArray()
    assert len(array) == 0
    assert array.get_gain(FREQUENCY, 0.3, 0.4) == 0 + 0j


def test_single_element_matches_its_contribution():
    element = ArrayElement(PatchElement(0.15, 0.12), position=Point(0.1, -0.2, 0.05), weight=0.7 + 0.1j)
    array = ElementArray([element])
    for theta, phi in [(0.0, 0.0), (0.5, 1.0), (np.pi / 2, 3.0)]:
        assert array.get_gain(FREQUENCY, theta, phi) == element.get_gain(FREQUENCY, theta, phi)
        assert array.get_channel_gain(0, FREQUENCY, theta, phi) == element.get_gain(FREQUENCY, theta, phi)


def test_half_wavelength_spacing_null():
    """Two in-phase omnis half a wavelength apart cancel along the array axis."""
    array = ElementArray([
        ArrayElement(OmniElement(gain=1.0, position=Point(0, 0, 0)), weight=1 + 0j),
        ArrayElement(OmniElement(gain=1.0, position=Point(WAVELENGTH / 2, 0, 0)), weight=1 + 0j),
    ])
    assert abs(array.get_gain(FREQUENCY, np.pi / 2, 0.0)) < 1e-6
    # Broadside the two contributions add
    np.testing.assert_allclose(abs(array.get_gain(FREQUENCY, 0.0, 0.0)), 2.0, rtol=1e-12)


def test_half_wavelength_spacing_with_array_placement():
    patch = PatchElement(0.15, 0.12)
    array = ElementArray.from_positions(patch, [Point(0, 0, 0), Point(WAVELENGTH / 2, 0, 0)])
    assert abs(array.get_gain(FREQUENCY, np.pi / 2, 0.0)) < 1e-6


def test_weight_scaling_is_linear():
    array = make_mixed_array()
    theta, phi = 0.7, 1.3
    before = array.channel_gains(FREQUENCY, theta, phi)
    total_before = array.get_gain(FREQUENCY, theta, phi)

    c = 0.3 - 1.7j
    array.set_weight(1, array[1].weight * c)
    after = array.channel_gains(FREQUENCY, theta, phi)

    np.testing.assert_allclose(after[1], before[1] * c, rtol=1e-12)
    np.testing.assert_allclose(after[[0, 2]], before[[0, 2]], rtol=1e-15)
    np.testing.assert_allclose(array.get_gain(FREQUENCY, theta, phi),
                               total_before + (c - 1) * before[1], rtol=1e-12)


def test_channel_gains_sum_to_total():
    array = make_mixed_array()
    for theta, phi in [(0.1, 0.2), (1.2, 4.0), (np.pi, 0.0)]:
        np.testing.assert_allclose(np.sum(array.channel_gains(FREQUENCY, theta, phi)),
                                   array.get_gain(FREQUENCY, theta, phi), rtol=1e-12)


@pytest.mark.parametrize("index", [3, 10, -1])
def test_channel_index_out_of_range(index):
    array = make_mixed_array()
    with pytest.raises(IndexOutOfRange):
        array.get_channel_gain(index, FREQUENCY, 0.0, 0.0)
    with pytest.raises(IndexError):
        array.set_weight(index, 1.0)


def test_channel_index_on_empty_array():
    with pytest.raises(IndexOutOfRange):
        ElementArray().get_channel_gain(0, FREQUENCY, 0.0, 0.0)


def test_translation_applied_once():
    omni = OmniElement(position=Point(WAVELENGTH / 4, 0, 0))
    element = ArrayElement(omni)
    assert element.position == omni.position
    assert element.get_gain(FREQUENCY, 1.0, 0.5) == omni.get_gain(FREQUENCY, 1.0, 0.5)

    patch = PatchElement(0.15, 0.12)
    position = Point(WAVELENGTH / 4, 0.1, 0)
    element = ArrayElement(patch, position=position, weight=2.0)
    expected = patch.get_gain(FREQUENCY, 1.0, 0.5) * calc_phase(position, FREQUENCY, 1.0, 0.5) * 2.0
    assert element.get_gain(FREQUENCY, 1.0, 0.5) == expected


def test_position_aware_model_rejects_other_placement():
    omni = OmniElement(position=Point(1.0, 0, 0))
    ArrayElement(omni, position=Point(1.0, 0, 0))
    with pytest.raises(ValueError):
        ArrayElement(omni, position=Point(0, 0, 0))


def test_omni_model_weight_and_array_weight_multiply():
    element = ArrayElement(OmniElement(weight=2.0), weight=1j)
    np.testing.assert_allclose(element.get_gain(FREQUENCY, 0.2, 0.2), 2j, atol=1e-15)


def test_set_weights():
    array = make_mixed_array()
    array.set_weights([1, 2, 3j])
    np.testing.assert_array_equal(array.weights, np.array([1, 2, 3j]))
    with pytest.raises(ValueError):
        array.set_weights([1, 2])


def test_append_returns_channel_index():
    array = ElementArray()
    assert array.append(ArrayElement(OmniElement())) == 0
    assert array.append(ArrayElement(PatchElement(0.1, 0.1))) == 1
    with pytest.raises(TypeError):
        array.append(OmniElement())


def test_from_positions_places_omnis():
    positions = linear_positions(4, WAVELENGTH / 2)
    array = ElementArray.from_positions(OmniElement(gain=1.0), positions)
    assert array.positions == positions
    assert all(element.model.position == p for element, p in zip(array, positions))


def test_steering_weights_point_main_beam():
    positions = linear_positions(8, WAVELENGTH / 2, centered=True)
    theta0 = np.radians(30.0)
    weights = steering_weights(positions, FREQUENCY, theta0, 0.0)
    array = ElementArray.from_positions(OmniElement(gain=1.0), positions, weights)

    steered = abs(array.get_gain(FREQUENCY, theta0, 0.0))
    np.testing.assert_allclose(steered, 8.0, rtol=1e-9)
    np.testing.assert_allclose(np.abs(weights), 1.0, rtol=1e-12)

    # Quarter-wave progressive phase cancels across eight elements at broadside
    assert abs(array.get_gain(FREQUENCY, 0.0, 0.0)) < 1e-6


def test_layout_helpers():
    assert linear_positions(3, 0.5, axis='y')[2] == Point(0, 1.0, 0)
    assert linear_positions(3, 0.5, centered=True)[0] == Point(-0.5, 0, 0)

    grid = grid_positions(2, 3, 0.2)
    assert len(grid) == 6
    np.testing.assert_allclose([p.x for p in grid[:2]], [-0.1, 0.1])
    np.testing.assert_allclose(grid[-1].y, 0.2)

    ring = circular_positions(4, 1.0)
    np.testing.assert_allclose(ring[1].as_array(), [0.0, 1.0, 0.0], atol=1e-15)
    for p in ring:
        np.testing.assert_allclose(p.distance_to(Point.origin()), 1.0)

    with pytest.raises(ValueError):
        linear_positions(3, 0.5, axis='w')
