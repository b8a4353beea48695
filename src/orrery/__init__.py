"""
===============================================================================
ORRERY - Hierarchical Reference Frame and Timeline Resolution
===============================================================================
Resolves the absolute position, orientation, velocity and angular velocity of
solar-system bodies at an arbitrary instant by walking a time-varying tree of
reference frames, timeline phases and moving frame centers.

Packages:
    core        -- Quaternions, universal coordinates, constants, settings
    dynamics    -- Orbit and rotation model contracts (plus synthetic models)
    frames      -- Selections, reference frames and frame trees
    timeline    -- Timeline phases and timelines
    bodies      -- Stars, barycenters, bodies and planetary systems
    simulation  -- Ephemeris sampling, orbit path caching, demo entry point
===============================================================================
"""

__version__ = "0.3.0"
