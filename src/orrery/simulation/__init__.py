"""
===============================================================================
ORRERY - Simulation Package
===============================================================================
Consumers of body state resolution.

Modules:
    ephemeris  : State tables (pandas) and the render-side orbit path cache
    demo       : Command-line demonstration on a synthetic star system
===============================================================================
"""
