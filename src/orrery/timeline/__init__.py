"""
===============================================================================
ORRERY - Timeline Package
===============================================================================
Time segmentation of a body's existence.

Modules:
    timeline  : TimelinePhase value type and the Timeline container
===============================================================================
"""
