"""
===============================================================================
HELIOTRANSFER - Dynamics Module
===============================================================================
Two-body heliocentric motion in AU, days and radians.

Submodules:
    kepler           -- Kepler's equation and anomaly conversions
    orbital_elements -- Classical elements and state-to-elements conversion
    orbit            -- Element propagation to position and velocity
    lambert          -- Battin's Lambert solver
===============================================================================
"""
