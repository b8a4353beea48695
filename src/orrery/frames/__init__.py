"""
===============================================================================
ORRERY - Frames Package
===============================================================================
Frame centers, reference frames and the per-object frame trees.

Modules:
    selection        : Weak tagged reference to a body, star or barycenter
    reference_frame  : ReferenceFrame contract and the concrete J2000,
                       body-fixed and mean-equator frames
    frame_tree       : Child-body bookkeeping with pull-based dirty flags
===============================================================================
"""
