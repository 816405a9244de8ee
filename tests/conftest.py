"""
Pytest configuration and shared fixtures for the nweno test suite.
"""

import matplotlib
import numpy as np
import pytest

from nweno.coefficients import optimal_weights, reconstruction_coefficients

matplotlib.use("Agg")


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "mathematical: Mathematical property validation tests")
    config.addinivalue_line("markers", "integration: Tests going through the WENO driver end to end")


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def weno5_buffers():
    """Buffers of a k=3 reconstruction on 20 cells, at the left edge, center and right edge of each cell."""
    N, k = 20, 3
    points = [-1.0, 0.0, 1.0]
    return {
        "N": N,
        "k": k,
        "points": np.array(points),
        "c": reconstruction_coefficients(N, k, points),
        "w": optimal_weights(N, k, 1.0),
        "sigma": np.zeros((N, k)),
        "wr": np.zeros((N, k)),
        "qr": np.full((N, k, len(points)), np.nan),
        "qs": np.full((N, len(points)), np.nan),
    }
