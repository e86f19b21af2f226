"""Pytest configuration for alphasweep tests.

Provides small synthetic LC-MS runs (flat rt/mz/intensity arrays sorted by
rt, then m/z) shared by the unit tests.
"""

import numpy as np
import pytest


@pytest.fixture
def three_cycle_ladder():
    """One peak per cycle, spaced by 0.5 m/z (a z=2 ladder)."""
    rt = np.array([0.0, 1.0, 2.0])
    mz = np.array([100.000, 100.500, 101.000])
    intensity = np.array([1e6, 6e5, 3e5])
    return rt, mz, intensity


@pytest.fixture
def two_envelopes():
    """A z=2 and a z=3 ladder eluting together, plus a lone noise peak.

    Cycle layout (m/z per cycle, sorted):
        rt 0: 500.000 (z2 seed), 800.000 (z3 seed)
        rt 1: 500.500, 800.333, 1200.000 (noise)
        rt 2: 501.000, 800.666
    """
    rows = [
        (0.0, 500.000, 1e6),
        (0.0, 800.000, 8e5),
        (1.0, 500.500, 7e5),
        (1.0, 800.333, 6e5),
        (1.0, 1200.000, 1e4),
        (2.0, 501.000, 4e5),
        (2.0, 800.666, 3e5),
    ]
    rt, mz, intensity = (np.array(col) for col in zip(*rows))
    return rt, mz, intensity


@pytest.fixture(scope="session", autouse=True)
def set_random_seed():
    """Set random seed for reproducible tests."""
    np.random.seed(42)
