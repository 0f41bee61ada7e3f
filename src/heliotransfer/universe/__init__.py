"""
===============================================================================
HELIOTRANSFER - Universe Module
===============================================================================
The bodies transfers are planned between.

Submodules:
    world -- World and Universe types, universe JSON file loader
===============================================================================
"""
