"""
===============================================================================
ORRERY - Astronomical Constants and Unit Conversions
===============================================================================
Central repository for the constants used by frame and body resolution.

Everything here is expressed in the units a planetarium-scale ephemeris
needs:

    distance          kilometers
    time              days (TDB Julian date)
    linear velocity   km / day
    angular velocity  rad / day
    mass              Earth masses (bodies), kg where noted
===============================================================================
"""

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi
TWO_PI = 2.0 * np.pi
DEG2RAD = PI / 180.0
RAD2DEG = 180.0 / PI
SQRT3 = float(np.sqrt(3.0))

# =============================================================================
# TIME
# =============================================================================
J2000 = 2451545.0                       # TDB Julian date of the J2000 epoch
SECONDS_PER_DAY = 86400.0
DAYS_PER_SECOND = 1.0 / SECONDS_PER_DAY

# =============================================================================
# DISTANCE
# =============================================================================
KM_PER_AU = 149597870.7
KM_PER_LY = 9460730472580.8
LY_PER_PARSEC = 3.26167
KM_PER_PARSEC = KM_PER_LY * LY_PER_PARSEC

# Resolution of the fixed-point universal coordinate (micrometers per km)
UNIVERSAL_UNITS_PER_KM = 10 ** 9

# =============================================================================
# ORIENTATION
# =============================================================================
J2000_OBLIQUITY = 23.4392911 * DEG2RAD  # Ecliptic -> Earth equator (rad)

# =============================================================================
# PHOTOMETRY
# =============================================================================
SOLAR_POWER = 3.8462e26                 # W
SOLAR_ABSMAG = 4.83                     # Absolute visual magnitude of the Sun
LN_MAG = 1.0857362                      # 2.5 / ln(10)
EARTH_MASS = 5.976e24                   # kg

# =============================================================================
# FRAME RESOLUTION DEFAULTS
# =============================================================================
DEFAULT_MAX_FRAME_DEPTH = 64
DEFAULT_DIFF_DELTA = 1.0 / SECONDS_PER_DAY   # one second, in days
