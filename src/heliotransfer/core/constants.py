"""
===============================================================================
HELIOTRANSFER - Physical, Astronomical and Solver Constants
===============================================================================
Central repository for the constants used by the astrodynamics core.
Units are astronomical units for length, days for time and radians for
angles throughout; degrees only appear at the universe-file boundary.
===============================================================================
"""

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi
TWO_PI = 2.0 * np.pi
DEG2RAD = PI / 180.0
RAD2DEG = 180.0 / PI

# =============================================================================
# UNITS AND TIME
# =============================================================================
AU_KM = 1.496e8                        # km per AU (display conversions)
SECONDS_PER_DAY = 86400.0              # s
DAYS_PER_YEAR = 365.2425               # days, orbital period convention
JULIAN_YEAR_DAYS = 365.25              # days, transit-time formatting
J2000 = 2451545.0                      # JD of 2000-01-01 12:00 TT
UNIX_EPOCH_JD = 2440587.5              # JD of 1970-01-01 00:00 UTC

# =============================================================================
# SUN PARAMETERS
# =============================================================================
# Heliocentric gravitational parameter in AU^3/day^2
MU_SUN = 7.496 * 1e-6 * 4.0 * PI * PI

# Parameter implied by the period convention T = a^1.5 * DAYS_PER_YEAR,
# i.e. n^2 a^3 for every orbit propagated by Orbit.
KEPLER_MU = (TWO_PI / DAYS_PER_YEAR) ** 2

# =============================================================================
# SOLVER SETTINGS
# =============================================================================
KEPLER_TOLERANCE = 0.01 * DEG2RAD      # rad, Newton step threshold
KEPLER_MAX_ITERATIONS = 200

LAMBERT_TOLERANCE = 1.0e-8             # successive substitution threshold
LAMBERT_MAX_ITERATIONS = 20
LAMBERT_FG_EPSILON = 1.0e-3            # |a| below this is rectilinear

ECCENTRICITY_EPSILON = 1.0e-8          # below this an orbit is circular

# =============================================================================
# MISSION TABLE DEFAULTS
# =============================================================================
MISSION_TABLE_SAMPLES = 400
MISSION_MAX_DELTA_V = 0.03             # AU/day
MISSION_WINDOW_PERIODS = 2.0           # window = factor * min(T_o, T_d)
HOHMANN_START_FRACTION = 0.5
HOHMANN_END_FRACTION = 1.5
DELTA_V_TIE_TOLERANCE = 1.0e-12        # AU/day


def au_per_day_to_km_s(speed: float) -> float:
    """Convert a speed from AU/day to km/s."""
    return speed * AU_KM / SECONDS_PER_DAY


def km_s_to_au_per_day(speed: float) -> float:
    """Convert a speed from km/s to AU/day."""
    return speed * SECONDS_PER_DAY / AU_KM
