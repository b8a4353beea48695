"""
===============================================================================
ORRERY - Bodies Package
===============================================================================
Objects that carry positions: stars, barycenters, solar-system bodies and
the planetary systems that group them.

Modules:
    attributes        : Classification flags, visibility policy, rings,
                        atmospheres and reference marks
    localization      : gettext hook for localized body names
    star              : Star and Barycenter frame roots
    body              : Body state resolution and physical attributes
    planetary_system  : Satellite lists with name lookup and completion
===============================================================================
"""
