"""
===============================================================================
ORRERY - Core Module
===============================================================================
Shared numerical building blocks.

Submodules:
    constants       -- Astronomical constants and unit conversions (km, days)
    astro           -- Photometric helpers (luminosity, magnitudes)
    quaternion      -- Unit quaternion class for frame orientations
    universal_coord -- Fixed-point absolute coordinates
    exceptions      -- Error hierarchy
    config          -- Settings dataclass, YAML loading, logging setup
===============================================================================
"""
