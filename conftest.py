"""
Test configuration file for pytest.
This file helps pytest discover the src module and isolates the phase cache
between tests.
"""
import os
import sys

import pytest

# Add the src directory to the path for test discovery
src_path = os.path.abspath(os.path.join(os.path.dirname(__file__), 'src'))
if src_path not in sys.path:
    sys.path.insert(0, src_path)


@pytest.fixture(autouse=True)
def fresh_phase_cache():
    """Start every test with an empty module-level phase cache."""
    from array_pattern import clear_phase_cache

    clear_phase_cache()
    yield
    clear_phase_cache()
