"""
===============================================================================
HELIOTRANSFER - Anomaly Solver
===============================================================================
Conversions between mean, eccentric and true anomaly for elliptic orbits.

Kepler's equation
-----------------
    M = E - e * sin(E)

has no closed-form inverse. It is solved for E with Newton-Raphson:

    E_{n+1} = E_n - (E_n - e sin E_n - M) / (1 - e cos E_n)

starting from the second-order series guess

    E_0 = M + e sin M (1 - e cos M)

which converges quadratically for every 0 <= e < 1. The iteration stops
once a step is smaller than 0.01 deg; a final correction is then applied so
the returned anomaly satisfies Kepler's equation to ~1e-15 rather than to
the square of the stopping step.

All functions are pure and undefined for e >= 1.
===============================================================================
"""

import logging
import math

from heliotransfer.core.constants import KEPLER_MAX_ITERATIONS, KEPLER_TOLERANCE

logger = logging.getLogger(__name__)


def eccentric_anomaly(
    M: float,
    e: float,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> float:
    """
    Solve Kepler's equation E - e sin E = M for the eccentric anomaly.

    Args:
        M: Mean anomaly (rad). Not wrapped; E follows M across revolutions.
        e: Eccentricity, 0 <= e < 1.
        tolerance: Newton step below which the iteration stops (rad).
        max_iterations: Iteration cap. The last iterate is returned when it
            is reached.

    Returns:
        Eccentric anomaly E (rad).
    """
    E_prev = M + e * math.sin(M) * (1.0 - e * math.cos(M))
    E = E_prev

    for _ in range(max_iterations):
        E = E_prev - (E_prev - e * math.sin(E_prev) - M) / (1.0 - e * math.cos(E_prev))
        if abs(E - E_prev) < tolerance:
            break
        E_prev = E
    else:
        logger.warning(
            "Kepler iteration hit the %d-iteration cap (M=%.6f, e=%.6f)",
            max_iterations, M, e,
        )
        return E

    # polish
    return E - (E - e * math.sin(E) - M) / (1.0 - e * math.cos(E))


def mean_anomaly_from_eccentric(E: float, e: float) -> float:
    """Kepler's equation, M = E - e sin E."""
    return E - e * math.sin(E)


def eccentric_anomaly_from_true(nu: float, e: float) -> float:
    """Eccentric anomaly (rad, in (-pi, pi]) for a true anomaly nu."""
    return 2.0 * math.atan2(
        math.sqrt(1.0 - e) * math.sin(0.5 * nu),
        math.sqrt(1.0 + e) * math.cos(0.5 * nu),
    )


def mean_anomaly_from_true(nu: float, e: float) -> float:
    """
    Mean anomaly for a true anomaly nu on an ellipse of eccentricity e.

    The result lies in (-pi, pi]; callers compare anomalies modulo 2 pi.
    """
    E = eccentric_anomaly_from_true(nu, e)
    return E - e * math.sin(E)


def true_anomaly_from_eccentric(E: float, e: float) -> float:
    """True anomaly (rad, in (-pi, pi]) for an eccentric anomaly E."""
    return 2.0 * math.atan2(
        math.sqrt(1.0 + e) * math.sin(0.5 * E),
        math.sqrt(1.0 - e) * math.cos(0.5 * E),
    )
