"""
===============================================================================
HELIOTRANSFER - Heliocentric Transfer Planning Core
===============================================================================
Astrodynamics core of the solar-system trading game: Keplerian orbits,
Kepler propagation, Battin's Lambert solver, the porkchop mission table and
the minimum delta-V mission planner.

Subpackages:
    core          -- Constants, Julian date helpers
    dynamics      -- Orbital elements, anomaly solver, orbit propagation,
                     state-to-elements conversion, Lambert solver
    guidance      -- Mission table, mission planner, ship mission lifecycle
    performance   -- Row-partitioned process pool for the table build
    universe      -- Worlds and the universe-file loader
    visualization -- Porkchop and transfer plots

Units: AU, days, radians.
===============================================================================
"""

__version__ = "0.3.0"
