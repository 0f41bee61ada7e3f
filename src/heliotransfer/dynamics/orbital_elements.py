"""
===============================================================================
HELIOTRANSFER - Classical Orbital Elements
===============================================================================
Heliocentric Keplerian elements in the ecliptic frame, their universe-file
representation, and the inverse transform from a Cartesian state.

Element set
-----------
    epoch                     Julian date at which M0 is valid (days)
    semi_major_axis      a    AU, a > 0
    eccentricity         e    0 <= e < 1
    inclination          i    rad, 0 <= i <= pi
    longitude_ascending_node  Omega, rad
    longitude_perihelion      varpi = Omega + omega, rad
    mean_anomaly_at_epoch     M0, rad

Degenerate geometries
---------------------
The argument of perihelion is undefined for circular orbits and the node is
undefined for equatorial ones. orbital_elements_from_state() never fails on
them; it falls back to zero for the undefined angle and measures the
remaining angles so that propagating the returned elements reproduces the
input state:

    equatorial         Omega = 0, omega measured from +x to the
                       eccentricity vector
    circular           omega = 0, nu is the argument of latitude
    circular+equatorial  Omega = omega = 0, nu is the true longitude

For retrograde equatorial orbits (i = pi) the in-plane angles run clockwise
when seen from +z, matching R_z(Omega) R_x(pi) R_z(omega).
===============================================================================
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np

from heliotransfer.core.constants import (
    DEG2RAD,
    ECCENTRICITY_EPSILON,
    MU_SUN,
    RAD2DEG,
    TWO_PI,
)
from heliotransfer.dynamics.kepler import mean_anomaly_from_true

logger = logging.getLogger(__name__)

# Universe-file keys and whether the value is an angle in degrees
_JSON_FIELDS = (
    ("epoch", "epoch", False),
    ("semimajor_axis", "semi_major_axis", False),
    ("eccentricity", "eccentricity", False),
    ("inclination", "inclination", True),
    ("longitude_perihelion", "longitude_perihelion", True),
    ("longitude_ascending_node", "longitude_ascending_node", True),
    ("mean_anomaly", "mean_anomaly_at_epoch", True),
)


# =============================================================================
# ORBITAL ELEMENTS DATACLASS
# =============================================================================

@dataclass(frozen=True)
class OrbitalElements:
    """
    Heliocentric classical elements of an elliptic orbit.

    Attributes
    ----------
    epoch : float
        Julian date (days) at which the mean anomaly is given.
    semi_major_axis : float
        a, in AU.
    eccentricity : float
        e, dimensionless.
    inclination : float
        i, radians from the ecliptic.
    longitude_perihelion : float
        varpi = Omega + omega, radians.
    longitude_ascending_node : float
        Omega, radians.
    mean_anomaly_at_epoch : float
        M0, radians.
    """
    epoch: float = 0.0
    semi_major_axis: float = 1.0
    eccentricity: float = 0.0
    inclination: float = 0.0
    longitude_perihelion: float = 0.0
    longitude_ascending_node: float = 0.0
    mean_anomaly_at_epoch: float = 0.0

    @property
    def argument_perihelion(self) -> float:
        """omega = varpi - Omega (rad)."""
        return self.longitude_perihelion - self.longitude_ascending_node

    @property
    def is_elliptic(self) -> bool:
        return 0.0 <= self.eccentricity < 1.0 and self.semi_major_axis > 0.0

    def validate(self) -> None:
        """
        Check that the elements describe a finite elliptic orbit.

        Raises:
            ValueError: If any element is non-finite, e is outside [0, 1),
                or a <= 0.
        """
        for name, value in asdict(self).items():
            if not math.isfinite(value):
                raise ValueError(f"Orbital element '{name}' is not finite: {value}")
        if not 0.0 <= self.eccentricity < 1.0:
            raise ValueError(
                f"Eccentricity must satisfy 0 <= e < 1, got {self.eccentricity}"
            )
        if self.semi_major_axis <= 0.0:
            raise ValueError(
                f"Semi-major axis must be positive, got {self.semi_major_axis}"
            )

    # -------------------------------------------------------------------------
    # Universe-file representation
    # -------------------------------------------------------------------------

    @classmethod
    def from_json(cls, data: Dict[str, Any], name: Optional[str] = None) -> "OrbitalElements":
        """
        Build elements from the ``orbit`` object of a universe-file world.

        Angles in the file are degrees and are converted to radians here.

        Args:
            data: Mapping with keys epoch, semimajor_axis, eccentricity,
                inclination, longitude_perihelion, longitude_ascending_node
                and mean_anomaly.
            name: World name, used only in error messages.

        Raises:
            ValueError: If a key is missing or its value is not a number.
        """
        label = f"world '{name}'" if name else "orbit"
        values = {}
        for key, field_name, is_angle in _JSON_FIELDS:
            if key not in data:
                raise ValueError(f"{label}: missing orbital element '{key}'")
            raw = data[key]
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise ValueError(f"{label}: orbital element '{key}' must be a number, got {raw!r}")
            values[field_name] = float(raw) * DEG2RAD if is_angle else float(raw)
        return cls(**values)

    def to_json(self) -> Dict[str, float]:
        """Inverse of from_json (angles back in degrees)."""
        return {
            key: getattr(self, field_name) * RAD2DEG if is_angle else getattr(self, field_name)
            for key, field_name, is_angle in _JSON_FIELDS
        }


# =============================================================================
# STATE VECTOR -> ELEMENTS
# =============================================================================

def _clipped_acos(x: float) -> float:
    return math.acos(min(1.0, max(-1.0, x)))


def orbital_elements_from_state(
    r: np.ndarray,
    v: np.ndarray,
    epoch: float,
    mu: float = MU_SUN,
) -> OrbitalElements:
    """
    Recover classical elements from a heliocentric position and velocity.

    Procedure:
        h      = r x v
        e_vec  = (v x h) / mu - r_hat
        a      = 1 / (2/|r| - |v|^2/mu)            (vis-viva)
        i      = acos(h_z / |h|)
        n      = z_hat x h                         (node vector)
        Omega  = acos(n_x / |n|), reflected when n_y < 0
        omega  = acos(n . e_vec / (|n| e)), reflected when e_z < 0
        nu     = acos(e_vec . r / (e |r|)), reflected when r . v < 0
        M0     = M(nu, e), varpi = omega + Omega

    See the module docstring for the circular and equatorial conventions.

    Args:
        r: Heliocentric position (AU).
        v: Heliocentric velocity (AU/day).
        epoch: Julian date of the state; becomes the element epoch.
        mu: Gravitational parameter (AU^3/day^2).

    Returns:
        OrbitalElements at *epoch*. Not validated: a hyperbolic state yields
        e >= 1 and a < 0.
    """
    r = np.asarray(r, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)

    r_mag = float(np.linalg.norm(r))
    v_mag = float(np.linalg.norm(v))

    # Specific angular momentum
    h = np.cross(r, v)
    h_mag = float(np.linalg.norm(h))

    # Eccentricity vector
    e_vec = np.cross(v, h) / mu - r / r_mag
    e = float(np.linalg.norm(e_vec))

    a = 1.0 / (2.0 / r_mag - v_mag * v_mag / mu)

    inc = _clipped_acos(h[2] / h_mag)
    prograde = h[2] >= 0.0

    # Node vector
    n = np.cross(np.array([0.0, 0.0, 1.0]), h)
    n_mag = float(np.linalg.norm(n))

    if n_mag != 0.0:
        raan = _clipped_acos(n[0] / n_mag)
        if n[1] < 0.0:
            raan = TWO_PI - raan
    else:
        raan = 0.0

    if e > ECCENTRICITY_EPSILON:
        if n_mag != 0.0:
            omega = _clipped_acos(float(np.dot(n, e_vec)) / (n_mag * e))
            if e_vec[2] < 0.0:
                omega = TWO_PI - omega
        else:
            omega = math.atan2(e_vec[1] if prograde else -e_vec[1], e_vec[0]) % TWO_PI

        nu = _clipped_acos(float(np.dot(e_vec, r)) / (e * r_mag))
        if float(np.dot(r, v)) < 0.0:
            nu = TWO_PI - nu
    else:
        omega = 0.0
        if n_mag != 0.0:
            # argument of latitude
            nu = _clipped_acos(float(np.dot(n, r)) / (n_mag * r_mag))
            if r[2] < 0.0:
                nu = TWO_PI - nu
        else:
            # true longitude
            nu = math.atan2(r[1] if prograde else -r[1], r[0]) % TWO_PI

    if e >= 1.0:
        logger.debug("State at JD %.3f is not elliptic (e=%.6f)", epoch, e)
        M0 = float("nan")
    else:
        M0 = mean_anomaly_from_true(nu, e)

    return OrbitalElements(
        epoch=epoch,
        semi_major_axis=a,
        eccentricity=e,
        inclination=inc,
        longitude_perihelion=omega + raan,
        longitude_ascending_node=raan,
        mean_anomaly_at_epoch=M0,
    )
