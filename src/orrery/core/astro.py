"""
Photometric and distance helpers.

Each function that divides by a distance or takes its logarithm returns 0.0
for a zero distance. Callers rely on that value (a body at the position of
its star, a viewer at the body) instead of inf/nan.
"""

import numpy as np

from orrery.core.constants import (
    KM_PER_AU,
    KM_PER_LY,
    LN_MAG,
    LY_PER_PARSEC,
    SOLAR_ABSMAG,
)


def au_to_km(au: float) -> float:
    """Astronomical units to kilometers."""
    return au * KM_PER_AU


def km_to_light_years(km: float) -> float:
    """Kilometers to light years."""
    return km / KM_PER_LY


def light_years_to_km(ly: float) -> float:
    """Light years to kilometers."""
    return ly * KM_PER_LY


def sphere_area(r: float) -> float:
    """Surface area of a sphere of radius r."""
    return 4.0 * np.pi * r * r


def circle_area(r: float) -> float:
    """Area of a disc of radius r."""
    return np.pi * r * r


def lum_to_abs_mag(lum: float) -> float:
    """
    Convert a luminosity (solar units) to an absolute magnitude.

    Parameters
    ----------
    lum : float
        Luminosity relative to the Sun.

    Returns
    -------
    float
        Absolute magnitude, or 0.0 for a non-positive luminosity.
    """
    if lum <= 0.0:
        return 0.0
    return SOLAR_ABSMAG - np.log(lum) * LN_MAG


def abs_to_app_mag(abs_mag: float, light_years: float) -> float:
    """
    Convert an absolute magnitude to an apparent magnitude.

    Parameters
    ----------
    abs_mag : float
        Absolute magnitude.
    light_years : float
        Distance to the observer in light years.

    Returns
    -------
    float
        Apparent magnitude, or 0.0 when the distance is zero.
    """
    if light_years <= 0.0:
        return 0.0
    return abs_mag - 5.0 + 5.0 * np.log10(light_years / LY_PER_PARSEC)


def lum_to_app_mag(lum: float, light_years: float) -> float:
    """Apparent magnitude of an object of luminosity lum at a distance."""
    if lum <= 0.0 or light_years <= 0.0:
        return 0.0
    return abs_to_app_mag(lum_to_abs_mag(lum), light_years)
