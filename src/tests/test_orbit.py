"""
===============================================================================
HELIOTRANSFER - Orbit Propagation Test Suite
===============================================================================
Tests for element propagation: Earth sanity values at J2000, energy
conservation over a period, periodicity of the state vector, rotation matrix
properties, ellipse sampling, and rejection of non-elliptic elements.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

from heliotransfer.core.constants import J2000, KEPLER_MU, DEG2RAD
from heliotransfer.dynamics.orbit import Orbit, orbital_period
from heliotransfer.dynamics.orbital_elements import OrbitalElements


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def earth_orbit():
    """Earth-like orbit with the J2000 sanity elements."""
    return Orbit(OrbitalElements(
        epoch=J2000,
        semi_major_axis=1.0,
        eccentricity=0.0167,
        inclination=0.0,
        longitude_perihelion=1.7967,
        longitude_ascending_node=0.0,
        mean_anomaly_at_epoch=6.2403,
    ))


@pytest.fixture
def mars_orbit():
    return Orbit(OrbitalElements(
        epoch=J2000,
        semi_major_axis=1.52366231,
        eccentricity=0.09341233,
        inclination=1.85061 * DEG2RAD,
        longitude_perihelion=336.04084 * DEG2RAD,
        longitude_ascending_node=49.57854 * DEG2RAD,
        mean_anomaly_at_epoch=19.41248 * DEG2RAD,
    ))


ELLIPSES = [
    (1.0, 0.0, 0.0, 0.0, 0.0, 0.0),
    (0.39, 0.2056, 0.122, 1.35, 0.84, 3.05),
    (2.77, 0.0785, 0.185, 1.28, 1.40, 5.0),
    (17.8, 0.67, 2.83, 1.9, 1.0, 0.3),
    (1.3, 0.9, 1.1, 4.0, 2.0, 1.0),
]


def make_orbit(a, e, i, varpi, raan, m0):
    return Orbit(OrbitalElements(J2000, a, e, i, varpi, raan, m0))


# =============================================================================
# Test: Earth sanity values
# =============================================================================

class TestEarthOrbit:
    """Period and J2000 distance of an Earth-like orbit."""

    def test_period(self, earth_orbit):
        assert abs(earth_orbit.period() - 365.25) < 0.05

    def test_distance_at_j2000(self, earth_orbit):
        r = earth_orbit.position(J2000)
        assert abs(np.linalg.norm(r) - 0.9833) < 0.001

    def test_position_matches_state_vector(self, earth_orbit):
        for t in [J2000, J2000 + 100.0, J2000 - 3000.5]:
            r, _ = earth_orbit.state_vector(t)
            assert_allclose(earth_orbit.position(t), r, atol=1e-15)

    def test_speed_close_to_circular(self, earth_orbit):
        _, v = earth_orbit.state_vector(J2000)
        assert_allclose(np.linalg.norm(v), 0.0172, rtol=0.03)

    def test_gravitational_parameter(self, earth_orbit, mars_orbit):
        """mu implied by the period convention is the same for every orbit."""
        assert_allclose(earth_orbit.gravitational_parameter(), KEPLER_MU, rtol=1e-12)
        assert_allclose(mars_orbit.gravitational_parameter(), KEPLER_MU, rtol=1e-12)


# =============================================================================
# Test: invariants
# =============================================================================

class TestOrbitInvariants:
    """Energy conservation and periodicity."""

    @pytest.mark.parametrize("elements", ELLIPSES)
    def test_energy_conservation(self, elements):
        orbit = make_orbit(*elements)
        mu = orbit.gravitational_parameter()
        a = elements[0]
        energies = []
        for t in np.linspace(J2000, J2000 + orbit.period(), 1000):
            r, v = orbit.state_vector(t)
            energies.append(np.dot(v, v) / 2.0 - mu / np.linalg.norm(r))
        energies = np.array(energies)
        assert np.max(np.abs(energies - energies[0])) < 1e-9 * mu / a
        assert_allclose(energies[0], -mu / (2.0 * a), rtol=1e-9)

    @pytest.mark.parametrize("elements", ELLIPSES)
    def test_periodicity(self, elements):
        orbit = make_orbit(*elements)
        for t in [J2000, J2000 + 123.4, J2000 + 5000.0]:
            r0, v0 = orbit.state_vector(t)
            r1, v1 = orbit.state_vector(t + orbit.period())
            assert_allclose(r1, r0, atol=1e-8)
            assert_allclose(v1, v0, atol=1e-8)

    @pytest.mark.parametrize("elements", ELLIPSES)
    def test_angular_momentum_constant(self, elements):
        orbit = make_orbit(*elements)
        h = [np.cross(*orbit.state_vector(t))
             for t in np.linspace(J2000, J2000 + orbit.period(), 50)]
        assert_allclose(h, np.tile(h[0], (50, 1)), atol=1e-12)

    def test_inclination_from_angular_momentum(self, mars_orbit):
        h = np.cross(*mars_orbit.state_vector(J2000 + 50.0))
        inc = np.arccos(h[2] / np.linalg.norm(h))
        assert_allclose(inc, 1.85061 * DEG2RAD, atol=1e-12)


# =============================================================================
# Test: rotation matrix and sampling
# =============================================================================

class TestOrbitGeometry:

    def test_rotation_matrix_orthonormal(self, mars_orbit):
        R = mars_orbit.rotation_matrix()
        assert_allclose(R @ R.T, np.eye(3), atol=1e-14)
        assert_allclose(np.linalg.det(R), 1.0, atol=1e-14)

    def test_rotation_matrix_read_only(self, mars_orbit):
        with pytest.raises(ValueError):
            mars_orbit.rotation_matrix()[0, 0] = 2.0

    def test_perihelion_direction(self, mars_orbit):
        """At M = 0 the body sits at perihelion, a (1 - e) from the Sun."""
        el = mars_orbit.elements()
        t_peri = el.epoch - el.mean_anomaly_at_epoch / mars_orbit.mean_motion()
        r = mars_orbit.position(t_peri)
        assert_allclose(np.linalg.norm(r), el.semi_major_axis * (1 - el.eccentricity), rtol=1e-9)
        assert_allclose(r / np.linalg.norm(r), mars_orbit.rotation_matrix()[:, 0], atol=1e-8)

    def test_sample_positions(self, mars_orbit):
        points = mars_orbit.sample_positions(300)
        assert points.shape == (300, 3)
        el = mars_orbit.elements()
        radii = np.linalg.norm(points, axis=1)
        assert radii.min() >= el.semi_major_axis * (1 - el.eccentricity) - 1e-12
        assert radii.max() <= el.semi_major_axis * (1 + el.eccentricity) + 1e-12

    def test_orbital_period_convention(self):
        assert_allclose(orbital_period(1.0), 365.2425)
        assert_allclose(orbital_period(4.0), 8.0 * 365.2425)

    def test_set_elements_recomputes(self, earth_orbit):
        earth_orbit.set_elements(OrbitalElements(J2000, 4.0, 0.1, 0.2, 0.3, 0.4, 0.5))
        assert_allclose(earth_orbit.period(), 8.0 * 365.2425)
        assert not np.allclose(earth_orbit.rotation_matrix(), np.eye(3))


# =============================================================================
# Test: domain checks
# =============================================================================

class TestOrbitValidation:

    @pytest.mark.parametrize("a, e", [(1.0, 1.0), (1.0, 1.5), (0.0, 0.1), (-2.0, 0.1), (1.0, -0.1)])
    def test_rejects_non_elliptic(self, a, e):
        with pytest.raises(ValueError):
            Orbit(OrbitalElements(J2000, a, e, 0.0, 0.0, 0.0, 0.0))

    def test_rejects_non_finite(self):
        with pytest.raises(ValueError):
            Orbit(OrbitalElements(J2000, 1.0, 0.1, float("nan"), 0.0, 0.0, 0.0))

    def test_set_elements_validates(self, earth_orbit):
        with pytest.raises(ValueError):
            earth_orbit.set_elements(OrbitalElements(J2000, 1.0, 1.2, 0.0, 0.0, 0.0, 0.0))
