"""
===============================================================================
HELIOTRANSFER - Keplerian Orbit Propagation
===============================================================================
An Orbit wraps a set of OrbitalElements together with the quantities derived
from them once and reused for every query:

    period    T = a^(3/2) * 365.2425 days
    rotation  R = R_z(Omega) . R_x(i) . R_z(omega)

R maps the perifocal frame (x toward perihelion, y 90 deg ahead in the
direction of motion, z along the angular momentum) to heliocentric ecliptic
coordinates.

Propagation to a date t:

    M = M0 + 2 pi (t - epoch) / T
    E = eccentric_anomaly(M, e)
    x = a (cos E - e)                  x' = -a n sin E / (1 - e cos E)
    y = b sin E                        y' =  b n cos E / (1 - e cos E)

with b = a sqrt(1 - e^2) and mean motion n = 2 pi / T. Both position and
velocity are then rotated by R.

Orbit objects are immutable apart from wholesale replacement of their
elements through set_elements(), which recomputes the cached quantities.
Queries are pure, so an Orbit can be shared between threads and pickled to
worker processes.
===============================================================================
"""

import math
from typing import Tuple

import numpy as np

from heliotransfer.core.constants import DAYS_PER_YEAR, TWO_PI
from heliotransfer.dynamics.kepler import eccentric_anomaly
from heliotransfer.dynamics.orbital_elements import OrbitalElements


def _rotation_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [c, -s, 0.0],
        [s, c, 0.0],
        [0.0, 0.0, 1.0],
    ])


def _rotation_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, c, -s],
        [0.0, s, c],
    ])


def orbit_rotation_matrix(elements: OrbitalElements) -> np.ndarray:
    """Perifocal-to-ecliptic rotation R_z(Omega) R_x(i) R_z(omega)."""
    return (
        _rotation_z(elements.longitude_ascending_node)
        @ _rotation_x(elements.inclination)
        @ _rotation_z(elements.argument_perihelion)
    )


def orbital_period(semi_major_axis: float) -> float:
    """Orbital period in days for a semi-major axis in AU."""
    return semi_major_axis ** 1.5 * DAYS_PER_YEAR


class Orbit:
    """
    Elliptic heliocentric orbit with cached period and orientation.

    Parameters
    ----------
    elements : OrbitalElements
        Elements of the orbit. They are validated; out-of-domain elements
        (e >= 1, a <= 0, non-finite values) raise ValueError.
    """

    def __init__(self, elements: OrbitalElements) -> None:
        self._elements = elements
        self._period = 0.0
        self._rotation = np.eye(3)
        self._update()

    def set_elements(self, elements: OrbitalElements) -> None:
        """Replace the elements and recompute the derived quantities."""
        self._elements = elements
        self._update()

    def _update(self) -> None:
        self._elements.validate()
        self._period = orbital_period(self._elements.semi_major_axis)
        rotation = orbit_rotation_matrix(self._elements)
        rotation.setflags(write=False)
        self._rotation = rotation

    # -------------------------------------------------------------------------
    # Derived quantities
    # -------------------------------------------------------------------------

    def elements(self) -> OrbitalElements:
        return self._elements

    def period(self) -> float:
        """Orbital period (days)."""
        return self._period

    def rotation_matrix(self) -> np.ndarray:
        """Read-only 3x3 perifocal-to-ecliptic rotation matrix."""
        return self._rotation

    def mean_motion(self) -> float:
        """n = 2 pi / T (rad/day)."""
        return TWO_PI / self._period

    def gravitational_parameter(self) -> float:
        """
        mu implied by the period convention, n^2 a^3 (AU^3/day^2).

        Equal to KEPLER_MU for every orbit.
        """
        n = self.mean_motion()
        return n * n * self._elements.semi_major_axis ** 3

    def semi_minor_axis(self) -> float:
        e = self._elements.eccentricity
        return self._elements.semi_major_axis * math.sqrt(1.0 - e * e)

    # -------------------------------------------------------------------------
    # Propagation
    # -------------------------------------------------------------------------

    def mean_anomaly(self, t: float) -> float:
        """Mean anomaly (rad) at Julian date t, not wrapped to [0, 2 pi)."""
        elements = self._elements
        return elements.mean_anomaly_at_epoch + TWO_PI * (t - elements.epoch) / self._period

    def eccentric_anomaly(self, t: float) -> float:
        """Eccentric anomaly (rad) at Julian date t."""
        return eccentric_anomaly(self.mean_anomaly(t), self._elements.eccentricity)

    def position(self, t: float) -> np.ndarray:
        """Heliocentric position (AU) at Julian date t."""
        a = self._elements.semi_major_axis
        e = self._elements.eccentricity
        E = self.eccentric_anomaly(t)

        x = a * (math.cos(E) - e)
        y = self.semi_minor_axis() * math.sin(E)
        return self._rotation @ np.array([x, y, 0.0])

    def state_vector(self, t: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Heliocentric position (AU) and velocity (AU/day) at Julian date t.
        """
        a = self._elements.semi_major_axis
        e = self._elements.eccentricity
        b = self.semi_minor_axis()
        n = self.mean_motion()

        E = self.eccentric_anomaly(t)
        cos_E, sin_E = math.cos(E), math.sin(E)
        denom = 1.0 - e * cos_E

        r_pf = np.array([a * (cos_E - e), b * sin_E, 0.0])
        v_pf = np.array([-a * n * sin_E / denom, b * n * cos_E / denom, 0.0])
        return self._rotation @ r_pf, self._rotation @ v_pf

    def sample_positions(self, num_points: int = 300) -> np.ndarray:
        """
        Positions spread evenly in eccentric anomaly around the ellipse.

        Returns:
            Array of shape (num_points, 3), in AU.
        """
        a = self._elements.semi_major_axis
        e = self._elements.eccentricity
        E = np.linspace(0.0, TWO_PI, num_points, endpoint=False)
        r_pf = np.column_stack([
            a * (np.cos(E) - e),
            self.semi_minor_axis() * np.sin(E),
            np.zeros_like(E),
        ])
        return r_pf @ self._rotation.T

    def __repr__(self) -> str:
        el = self._elements
        return (
            f"Orbit(a={el.semi_major_axis:.6f} AU, e={el.eccentricity:.6f}, "
            f"i={el.inclination:.6f} rad, T={self._period:.3f} d)"
        )
