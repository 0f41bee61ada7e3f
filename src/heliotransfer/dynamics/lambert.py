"""
===============================================================================
HELIOTRANSFER - Lambert Solver (Battin's Method)
===============================================================================
Given two heliocentric positions r1 and r2 and a time of flight dt, find the
conic that connects them and return its velocities at both ends.

Background
----------
Battin's formulation replaces the singular time-of-flight equation of the
classical Gauss method with a pair of continued fractions that are regular
over the whole range of transfer angles. With the geometry

    c      = |r2 - r1|                          chord
    s      = (|r1| + |r2| + c) / 2               semi-perimeter
    lambda = sqrt(|r1||r2|) cos(nu/2) / s
    T      = sqrt(8 mu / s^3) dt                 normalised time

the unknown x is found by successive substitution:

    h1, h2 = f(x, l, m, xi(x))
    B      = 27 h2 / (4 (1 + h1)^3)
    u      = B / (2 (sqrt(1 + B) + 1))
    y      = (1 + h1)/3 (2 + sqrt(1 + B) / (1 + 2 u K(u)^2))
    x_new  = sqrt(((1 - l)/2)^2 + m/y^2) - (1 + l)/2

after which the semi-major axis a = mu dt^2 / (16 rho^2 x y^2) gives the
Lagrange coefficients f, g, g_dot and the end-point velocities

    v1 = (r2 - f r1) / g
    v2 = (g_dot r2 - r1) / g

Only single-revolution transfers are solved. Failures (no convergence in 20
substitutions, degenerate geometry, non-finite output) are reported as a
``None`` result, never raised.

References
----------
    [1] Battin, "An Introduction to the Mathematics and Methods of
        Astrodynamics", Revised Ed., AIAA, 1999, ch. 7.
    [2] Eagle, "MATLAB functions for solving Lambert's problem", MATLAB
        Central File Exchange 158221.
===============================================================================
"""

import logging
import math
import sys
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from heliotransfer.core.constants import (
    LAMBERT_FG_EPSILON,
    LAMBERT_MAX_ITERATIONS,
    LAMBERT_TOLERANCE,
    PI,
    TWO_PI,
)

logger = logging.getLogger(__name__)

TransferVelocities = Tuple[np.ndarray, np.ndarray]


class OrbitType(Enum):
    """Sense of motion of the transfer conic about +z."""
    PROGRADE = 1
    RETROGRADE = 2


class LambertFailure(Enum):
    """Reasons a Lambert solve produces no transfer."""
    NON_CONVERGENT = "iteration cap reached"
    NON_FINITE_RESULT = "non-finite or subnormal velocity"
    INVALID_GEOMETRY = "invalid transfer geometry"


# =============================================================================
# CONTINUED-FRACTION COEFFICIENTS
# =============================================================================

# Coefficients of the xi(x) continued fraction
XI_COEFFICIENTS = (
    0.25396825396825395, 0.25252525252525254, 0.25174825174825177,
    0.25128205128205128, 0.25098039215686274, 0.25077399380804954,
    0.25062656641604009, 0.25051759834368531, 0.25043478260869567,
    0.25037037037037035, 0.25031928480204341, 0.25027808676307006,
    0.25024437927663734, 0.25021645021645023, 0.25019305019305021,
    0.25017325017325015, 0.25015634771732331, 0.25014180374361883,
    0.25012919896640828, 0.25011820330969264,
)

# Coefficients of the K(u) continued fraction; the first is the leading 1/3
K_COEFFICIENTS = (
    0.33333333333333331, 0.14814814814814814, 0.29629629629629628,
    0.22222222222222221, 0.27160493827160492, 0.23344556677890010,
    0.26418026418026419, 0.23817663817663817, 0.26056644880174290,
    0.24079807361541108, 0.25842383737120578, 0.24246606855302508,
    0.25700483091787441, 0.24362139917695474, 0.25599545906059318,
    0.24446916326782844, 0.25524057782122300, 0.24511784511784512,
    0.25465465465465464, 0.24563024563024563, 0.25418664443054689,
)


def xi_battin(x: float) -> float:
    """
    Battin's xi(x) continued fraction.

        eta = x / (sqrt(1 + x) + 1)^2
        xi  = 8 (sqrt(1 + x) + 1) /
              (3 + 1 / (5 + eta + 9/7 eta / (1 + c1 eta / (1 + ... c20 eta))))
    """
    sqrt_1x = math.sqrt(1.0 + x)
    eta = x / (sqrt_1x + 1.0) ** 2

    tail = 1.0
    for coefficient in reversed(XI_COEFFICIENTS):
        tail = 1.0 + coefficient * eta / tail

    return 8.0 * (sqrt_1x + 1.0) / (3.0 + 1.0 / (5.0 + eta + 9.0 / 7.0 * eta / tail))


def k_battin(u: float) -> float:
    """
    Battin's K(u) continued fraction.

        K = d0 / (1 + d1 u / (1 + d2 u / ( ... / (1 + d20 u))))
    """
    tail = 1.0
    for coefficient in reversed(K_COEFFICIENTS[1:]):
        tail = 1.0 + coefficient * u / tail
    return K_COEFFICIENTS[0] / tail


def fg_battin(
    mu: float,
    a: float,
    s: float,
    c: float,
    nu: float,
    t: float,
    r1: float,
    r2: float,
) -> Tuple[float, float, float]:
    """
    Lagrange coefficients (f, g, g_dot) of the transfer conic.

    Three regimes are distinguished by the semi-major axis: elliptic
    (a > 1e-3), hyperbolic (a < -1e-3), and a near-rectilinear band in
    between for which all three coefficients are zero.

    Args:
        mu: Gravitational parameter.
        a: Semi-major axis of the transfer.
        s: Semi-perimeter.
        c: Chord.
        nu: Transfer angle (rad).
        t: Time of flight.
        r1, r2: End-point radii.
    """
    if a > LAMBERT_FG_EPSILON:
        be = 2.0 * math.asin(math.sqrt(min(1.0, (s - c) / (2.0 * a))))
        if nu > PI:
            be = -be
        a_min = 0.5 * s
        t_min = math.sqrt(a_min ** 3 / mu) * (PI - be + math.sin(be))
        ae = 2.0 * math.asin(math.sqrt(min(1.0, s / (2.0 * a))))
        if t > t_min:
            ae = TWO_PI - ae
        de = ae - be
        f = 1.0 - a / r1 * (1.0 - math.cos(de))
        g = t - math.sqrt(a * a * a / mu) * (de - math.sin(de))
        g_dot = 1.0 - a / r2 * (1.0 - math.cos(de))
    elif a < -LAMBERT_FG_EPSILON:
        ah = 2.0 * math.asinh(math.sqrt(s / (-2.0 * a)))
        bh = 2.0 * math.asinh(math.sqrt((s - c) / (-2.0 * a)))
        if nu > PI:
            bh = -bh
        dh = ah - bh
        f = 1.0 - a / r1 * (1.0 - math.cosh(dh))
        g = t - math.sqrt((-a) ** 3 / mu) * (math.sinh(dh) - dh)
        g_dot = 1.0 - a / r2 * (1.0 - math.cosh(dh))
    else:
        f = 0.0
        g = 0.0
        g_dot = 0.0
    return f, g, g_dot


def is_normal_vector(v: np.ndarray) -> bool:
    """
    True when every component is finite and not subnormal and the vector is
    not zero-length.
    """
    if not np.all(np.isfinite(v)):
        return False
    magnitudes = np.abs(v)
    if np.any((magnitudes > 0.0) & (magnitudes < sys.float_info.min)):
        return False
    return bool(np.any(magnitudes > 0.0))


# =============================================================================
# SOLVER
# =============================================================================

def _solve(
    mu: float,
    r1: np.ndarray,
    r2: np.ndarray,
    dt: float,
    orbit_type: OrbitType,
) -> Tuple[Optional[TransferVelocities], Optional[LambertFailure]]:
    r1_mag = float(np.linalg.norm(r1))
    r2_mag = float(np.linalg.norm(r2))
    if r1_mag == 0.0 or r2_mag == 0.0 or not (math.isfinite(r1_mag) and math.isfinite(r2_mag)):
        return None, LambertFailure.INVALID_GEOMETRY

    # Transfer angle from the orbit type
    c12 = np.cross(r1, r2)
    cos_nu = float(np.dot(r1, r2)) / (r1_mag * r2_mag)
    nu = math.acos(min(1.0, max(-1.0, cos_nu)))
    if orbit_type is OrbitType.PROGRADE:
        if c12[2] <= 0.0:
            nu = TWO_PI - nu
    else:
        if c12[2] >= 0.0:
            nu = TWO_PI - nu

    c = math.sqrt(r1_mag * r1_mag + r2_mag * r2_mag - 2.0 * r1_mag * r2_mag * math.cos(nu))
    s = (r1_mag + r2_mag + c) / 2.0
    eps = (r2_mag - r1_mag) / r1_mag
    lam = math.sqrt(r1_mag * r2_mag) * math.cos(nu * 0.5) / s
    t = math.sqrt(8.0 * mu / s ** 3) * dt
    t_p = 4.0 / 3.0 * (1.0 - lam ** 3)
    m = t * t / (1.0 + lam) ** 6

    ratio = r2_mag / r1_mag
    tansq2w = (eps * eps * 0.25) / (math.sqrt(ratio) + ratio * (2.0 + math.sqrt(ratio)))
    rop = math.sqrt(r2_mag * r1_mag) * (math.cos(nu * 0.25) ** 2 + tansq2w)

    if nu < PI:
        ltop = math.sin(nu * 0.25) ** 2 + tansq2w
        l = ltop / (ltop + math.cos(nu * 0.5))
    else:
        ltop = math.cos(nu * 0.25) ** 2 + tansq2w
        l = (ltop - math.cos(nu * 0.5)) / ltop

    # Initial guess
    x = 0.0 if t <= t_p else l
    y = 0.0

    # Successive substitution
    for _ in range(LAMBERT_MAX_ITERATIONS):
        xi = xi_battin(x)
        denom = (1.0 + 2.0 * x + l) * (4.0 * x + xi * (3.0 + x))
        h1 = (l + x) ** 2 * (1.0 + 3.0 * x + xi) / denom
        h2 = m * (x - l + xi) / denom
        b = 27.0 * h2 * 0.25 / (1.0 + h1) ** 3
        u = b / (2.0 * (math.sqrt(1.0 + b) + 1.0))
        k = k_battin(u)
        y = (1.0 + h1) / 3.0 * (2.0 + math.sqrt(1.0 + b) / (1.0 + 2.0 * u * k * k))
        x_new = math.sqrt(((1.0 - l) / 2.0) ** 2 + m / (y * y)) - (1.0 + l) / 2.0
        dx = abs(x - x_new)
        x = x_new
        if dx < LAMBERT_TOLERANCE:
            break
    else:
        return None, LambertFailure.NON_CONVERGENT

    a = mu * dt * dt / (16.0 * rop * rop * x * y * y)
    f, g, g_dot = fg_battin(mu, a, s, c, nu, dt, r1_mag, r2_mag)
    if g == 0.0 or not math.isfinite(g):
        return None, LambertFailure.NON_FINITE_RESULT

    v1 = (r2 - f * r1) / g
    v2 = (g_dot * r2 - r1) / g
    if not (is_normal_vector(v1) and is_normal_vector(v2)):
        return None, LambertFailure.NON_FINITE_RESULT
    return (v1, v2), None


def lambert_battin_diagnose(
    mu: float,
    r1: np.ndarray,
    r2: np.ndarray,
    dt: float,
    orbit_type: OrbitType = OrbitType.PROGRADE,
) -> Tuple[Optional[TransferVelocities], Optional[LambertFailure]]:
    """
    Solve Lambert's problem and report why it failed, if it did.

    Returns:
        ((v1, v2), None) on success, (None, LambertFailure) otherwise.
    """
    r1 = np.asarray(r1, dtype=np.float64)
    r2 = np.asarray(r2, dtype=np.float64)

    if not dt > 0.0:
        logger.debug("Lambert: non-positive time of flight %r", dt)
        return None, LambertFailure.INVALID_GEOMETRY

    try:
        result, failure = _solve(mu, r1, r2, float(dt), orbit_type)
    except (ValueError, ZeroDivisionError, OverflowError) as exc:
        # Domain errors stand in for the NaN/inf an IEEE pipeline would carry
        logger.debug("Lambert: arithmetic failure (%s)", exc)
        return None, LambertFailure.NON_FINITE_RESULT

    if failure is not None:
        logger.debug("Lambert: %s (dt=%.3f d)", failure.value, dt)
    return result, failure


def lambert_battin(
    mu: float,
    r1: np.ndarray,
    r2: np.ndarray,
    dt: float,
    orbit_type: OrbitType = OrbitType.PROGRADE,
) -> Optional[TransferVelocities]:
    """
    Solve Lambert's problem with Battin's method.

    Args:
        mu: Gravitational parameter of the central body (AU^3/day^2).
        r1: Initial position vector (3,) in AU.
        r2: Final position vector (3,) in AU.
        dt: Time of flight in days (must be > 0).
        orbit_type: PROGRADE selects the transfer whose angular momentum has
            a positive z component, RETROGRADE the opposite.

    Returns:
        (v1, v2) velocities (AU/day) at r1 and r2, or None when no valid
        single-revolution transfer was found.
    """
    result, _ = lambert_battin_diagnose(mu, r1, r2, dt, orbit_type)
    return result
