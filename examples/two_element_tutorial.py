#!/usr/bin/env python3
"""
Two Element Array Tutorial

This tutorial builds the smallest interesting array, two omni elements half a
wavelength apart, and then a steered linear patch array:
- How element spacing and weights shape the array pattern
- Steering the main beam with conjugate phase weights
- Sampling the pattern over a theta/phi grid and saving it
"""

from array_pattern import (
    ArrayElement, ElementArray, OmniElement, PatchElement, Point,
    frequency_to_wavelength, linear_positions, steering_weights, sample_pattern,
    write_pattern, phase_cache_info
)
import numpy as np
from pathlib import Path

def print_section_header(title):
    """Print a formatted section header."""
    print("\n" + "="*60)
    print(f"{title}")
    print("="*60)

frequency = 1e9
wavelength = float(frequency_to_wavelength(frequency))
output_dir = Path(__file__).parent / "output"
output_dir.mkdir(exist_ok=True)

# ============================================================================
print_section_header("TUTORIAL 1: HALF-WAVELENGTH SPACED OMNI PAIR")
# ============================================================================

e0 = ArrayElement(OmniElement(gain=1.0))
e1 = ArrayElement(OmniElement(gain=1.0, position=Point(wavelength / 2, 0, 0)))
array = ElementArray([e0, e1])

for theta_deg in [0, 30, 60, 90]:
    gain = array.get_gain(frequency, np.radians(theta_deg), 0.0)
    print(f"  theta = {theta_deg:3d} deg: |gain| = {abs(gain):.4f}")

# A quadrature weight on the second element moves the null
array.set_weight(1, 1j)
print("\nWith the second element at +90 deg phase:")
for theta_deg in [0, 30, 60, 90]:
    gain = array.get_gain(frequency, np.radians(theta_deg), 0.0)
    print(f"  theta = {theta_deg:3d} deg: |gain| = {abs(gain):.4f}")

pattern = sample_pattern(array, frequency, np.radians(0.5), np.radians(1.0))
write_pattern(pattern, output_dir / "two_element.h5")
print(f"\nSaved {pattern.shape[0]} x {pattern.shape[1]} grid to {output_dir / 'two_element.h5'}")

# ============================================================================
print_section_header("TUTORIAL 2: STEERED PATCH ARRAY")
# ============================================================================

positions = linear_positions(8, wavelength / 2, axis='y', centered=True)
patch = PatchElement(length=0.14, width=0.12)
weights = steering_weights(positions, frequency, np.radians(20.0), np.pi / 2)
steered = ElementArray.from_positions(patch, positions, weights)

pattern = sample_pattern(steered, frequency, np.radians(1.0), np.radians(5.0), max_workers=4)
cut = pattern.sel(phi=90.0, method='nearest')
peak_theta = float(cut.theta[cut.argmax()])
print(f"  Peak of phi = 90 deg cut at theta = {peak_theta:.1f} deg, |gain| = {float(cut.max()):.3f}")

write_pattern(pattern, output_dir / "steered_patch.csv")
print(f"  Saved text grid to {output_dir / 'steered_patch.csv'}")
print(f"  Phase cache: {phase_cache_info()}")
