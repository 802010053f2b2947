"""
Tests for theta/phi sweeps of array gain.
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
    lightspeed, phi_grid, sample_pattern, theta_grid
)

FREQUENCY = 1e9
WAVELENGTH = lightspeed / FREQUENCY


def two_element_array():
    return ElementArray([
        ArrayElement(OmniElement(gain=1.0)),
        ArrayElement(OmniElement(gain=1.0, position=Point(WAVELENGTH / 2, 0, 0)), weight=1j),
    ])


def test_angle_grids():
    thetas = theta_grid(np.radians(1.0))
    phis = phi_grid(np.radians(1.0))
    assert len(thetas) == 181
    assert len(phis) == 360
    np.testing.assert_allclose(thetas[-1], np.pi)
    assert phis[-1] < 2 * np.pi
    np.testing.assert_allclose(phis[1], np.radians(1.0))

    # Uneven spacing stops below the limit
    thetas = theta_grid(0.7)
    np.testing.assert_allclose(thetas, [0.0, 0.7, 1.4, 2.1, 2.8])


def test_angle_grid_rejects_bad_spacing():
    with pytest.raises(ValueError):
        theta_grid(0.0)
    with pytest.raises(ValueError):
        phi_grid(-1.0)


def test_sample_single_omni():
    array = ElementArray([ArrayElement(OmniElement(gain=1.0))])
    pattern = sample_pattern(array, FREQUENCY, np.radians(10.0), np.radians(10.0))

    assert pattern.dims == ('phi', 'theta')
    assert pattern.shape == (36, 19)
    np.testing.assert_allclose(pattern.values, 1.0)
    np.testing.assert_allclose(pattern.theta.values, np.arange(0, 181, 10), atol=1e-9)
    np.testing.assert_allclose(pattern.phi.values, np.arange(0, 360, 10), atol=1e-9)
    assert pattern.attrs['frequency'] == FREQUENCY


def test_sample_matches_get_gain():
    array = two_element_array()
    pattern = sample_pattern(array, FREQUENCY, np.radians(15.0), np.radians(30.0))
    thetas = theta_grid(np.radians(15.0))
    phis = phi_grid(np.radians(30.0))
    for p_idx in [0, 3, 7]:
        for t_idx in [0, 5, 12]:
            expected = abs(array.get_gain(FREQUENCY, thetas[t_idx], phis[p_idx]))
            assert pattern.values[p_idx, t_idx] == expected


def test_threaded_sweep_matches_serial():
    array = ElementArray.from_positions(PatchElement(0.15, 0.12),
                                        [Point(0, 0, 0), Point(0.1, 0.05, 0), Point(-0.2, 0, 0.01)],
                                        [1, 0.5j, -0.7])
    serial = sample_pattern(array, 2.4e9, np.radians(5.0), np.radians(5.0))
    threaded = sample_pattern(array, 2.4e9, np.radians(5.0), np.radians(5.0), max_workers=4)
    np.testing.assert_array_equal(serial.values, threaded.values)


def test_sample_single_channel():
    array = two_element_array()
    pattern = sample_pattern(array, FREQUENCY, np.radians(30.0), np.radians(45.0), channel=1)
    np.testing.assert_allclose(pattern.values, 1.0, rtol=1e-12)

    with pytest.raises(IndexOutOfRange):
        sample_pattern(array, FREQUENCY, np.radians(30.0), np.radians(45.0), channel=2)


def test_sample_rejects_bad_frequency():
    with pytest.raises(ValueError):
        sample_pattern(two_element_array(), 0.0, np.radians(1.0), np.radians(1.0))
