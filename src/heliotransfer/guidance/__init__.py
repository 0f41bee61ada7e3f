"""
===============================================================================
HELIOTRANSFER - Guidance Module
===============================================================================
Transfer planning between worlds and the ship lifecycle that follows a plan.

Submodules:
    mission_table   -- Porkchop grid of Lambert transfers over date windows
    mission_planner -- Minimum delta-V selection and MissionPlan records
    ship            -- Docked / in-transit state machine driven by a plan
===============================================================================
"""
