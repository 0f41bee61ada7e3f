"""
===============================================================================
HELIOTRANSFER - Visualization Module
===============================================================================
Static PNG renderings of mission tables and transfer plans (Agg backend).

Submodules:
    porkchop_plots -- Porkchop delta-V image and ecliptic transfer plot
===============================================================================
"""
