"""
===============================================================================
HELIOTRANSFER - Anomaly Solver Test Suite
===============================================================================
Tests for Kepler's equation and the anomaly conversions: residual bound over
a dense (M, e) sweep, the (1.0, 0.5) reference root, multi-revolution mean
anomalies, and true/eccentric/mean anomaly consistency.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from heliotransfer.dynamics.kepler import (
    eccentric_anomaly,
    eccentric_anomaly_from_true,
    mean_anomaly_from_eccentric,
    mean_anomaly_from_true,
    true_anomaly_from_eccentric,
)


def kepler_residual(E, M, e):
    return abs(E - e * math.sin(E) - M)


# =============================================================================
# Test: Kepler's equation
# =============================================================================

class TestEccentricAnomaly:
    """Newton-Raphson solution of E - e sin E = M."""

    @pytest.mark.parametrize("e", [0.0, 0.0167, 0.1, 0.3, 0.5, 0.7, 0.9, 0.95])
    def test_residual_dense_sweep(self, e):
        """Residual stays below 1e-8 for M densely sampled on [0, 2 pi)."""
        for M in np.linspace(0.0, 2.0 * np.pi, 2000, endpoint=False):
            E = eccentric_anomaly(M, e)
            assert kepler_residual(E, M, e) < 1e-8, f"M={M}, e={e}"

    def test_reference_root(self):
        """(M, e) = (1.0, 0.5) gives E = 1.49870113..."""
        E = eccentric_anomaly(1.0, 0.5)
        assert_allclose(E, 1.4987011335178482, atol=1e-10)
        assert kepler_residual(E, 1.0, 0.5) < 1e-10

    def test_circular_orbit_identity(self):
        """For e = 0 the eccentric anomaly equals the mean anomaly."""
        for M in [0.0, 0.5, 3.0, 6.0]:
            assert_allclose(eccentric_anomaly(M, 0.0), M, atol=1e-15)

    @pytest.mark.parametrize("revolutions", [-3, 1, 10, 250])
    def test_unwrapped_mean_anomaly(self, revolutions):
        """E follows M across whole revolutions."""
        M = 1.2 + 2.0 * np.pi * revolutions
        E = eccentric_anomaly(M, 0.4)
        assert kepler_residual(E, M, 0.4) < 1e-8
        assert_allclose(E - 2.0 * np.pi * revolutions,
                        eccentric_anomaly(1.2, 0.4), atol=1e-9)

    def test_iteration_cap_returns_last_iterate(self, caplog):
        """Hitting the cap logs a warning and still returns a number."""
        E = eccentric_anomaly(2.0, 0.9, tolerance=0.0, max_iterations=3)
        assert math.isfinite(E)
        assert "cap" in caplog.text


# =============================================================================
# Test: anomaly conversions
# =============================================================================

class TestAnomalyConversions:
    """True, eccentric and mean anomaly round trips."""

    @pytest.mark.parametrize("e", [0.0, 0.2, 0.6, 0.9])
    def test_true_eccentric_roundtrip(self, e):
        for nu in np.linspace(-3.0, 3.0, 25):
            E = eccentric_anomaly_from_true(nu, e)
            assert_allclose(true_anomaly_from_eccentric(E, e), nu, atol=1e-12)

    @pytest.mark.parametrize("e", [0.05, 0.5, 0.85])
    def test_mean_from_true_inverts_solver(self, e):
        """mean_anomaly_from_true followed by the solver recovers E."""
        for nu in np.linspace(-3.0, 3.0, 25):
            M = mean_anomaly_from_true(nu, e)
            E = eccentric_anomaly(M, e)
            assert_allclose(E, eccentric_anomaly_from_true(nu, e), atol=1e-10)

    def test_perihelion_and_aphelion(self):
        assert mean_anomaly_from_true(0.0, 0.3) == 0.0
        assert_allclose(mean_anomaly_from_true(np.pi, 0.3), np.pi, atol=1e-12)

    def test_mean_from_eccentric(self):
        assert_allclose(mean_anomaly_from_eccentric(1.4987011335178482, 0.5), 1.0, atol=1e-12)
