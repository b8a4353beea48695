"""
===============================================================================
ORRERY - Dynamics Module
===============================================================================
Contracts for the time-indexed strategies consumed by body resolution.

Submodules:
    orbit     -- Orbit contract; FixedOrbit and CircularOrbit synthetic models
    rotation  -- RotationModel contract; ConstantOrientation and
                 UniformRotationModel synthetic models

Real solvers (Keplerian elements, sampled trajectories, analytic theories)
plug in by subclassing the contracts.
===============================================================================
"""

from orrery.dynamics.orbit import CircularOrbit, FixedOrbit, Orbit
from orrery.dynamics.rotation import (
    ConstantOrientation,
    RotationModel,
    UniformRotationModel,
)

__all__ = [
    "Orbit",
    "FixedOrbit",
    "CircularOrbit",
    "RotationModel",
    "ConstantOrientation",
    "UniformRotationModel",
]
