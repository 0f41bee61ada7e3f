"""
===============================================================================
HELIOTRANSFER - Core Module
===============================================================================
Shared constants and the time-line helpers every other subsystem relies on.

Submodules:
    constants -- Mathematical, astronomical and solver constants (AU, days)
    julian    -- Julian date arithmetic, calendar conversions, formatting
===============================================================================
"""
