"""Trigonometric building blocks shared by the Sun and Moon models.

Every function accepts scalars or numpy arrays and works in radians, except
:func:`observer_angle` which returns degrees to match the threshold table.
"""

from __future__ import annotations

import numpy as np

__all__ = [
    "RAD",
    "OBLIQUITY",
    "right_ascension",
    "declination",
    "azimuth",
    "altitude",
    "sidereal_time",
    "astro_refraction",
    "hour_angle",
    "observer_angle",
]

RAD = np.pi / 180.0
OBLIQUITY = RAD * 23.4397  # Obliquity of the ecliptic at J2000.


def right_ascension(l, b):
    """Right ascension from ecliptic longitude *l* and latitude *b*."""

    return np.arctan2(
        np.sin(l) * np.cos(OBLIQUITY) - np.tan(b) * np.sin(OBLIQUITY), np.cos(l)
    )


def declination(l, b):
    return np.arcsin(
        np.sin(b) * np.cos(OBLIQUITY) + np.cos(b) * np.sin(OBLIQUITY) * np.sin(l)
    )


def azimuth(H, phi, dec):
    """Azimuth measured from south, positive towards the west."""

    return np.arctan2(np.sin(H), np.cos(H) * np.sin(phi) - np.tan(dec) * np.cos(phi))


def altitude(H, phi, dec):
    return np.arcsin(
        np.sin(phi) * np.sin(dec) + np.cos(phi) * np.cos(dec) * np.cos(H)
    )


def sidereal_time(d, lw):
    """Local sidereal time for *d* days since J2000 at west longitude *lw*."""

    return RAD * (280.16 + 360.9856235 * d) - lw


def astro_refraction(h):
    """Atmospheric refraction correction for a geometric altitude *h*.

    Uses the Bennett-style formula ``1.02 / tan(h + 10.26 / (h + 5.10))``
    arc-minutes (h in degrees) rewritten for radians. It only holds above the
    horizon, so negative altitudes are evaluated as zero.
    """

    h = np.maximum(h, 0.0)
    return 0.0002967 / np.tan(h + 0.00312536 / (h + 0.08901179))


def hour_angle(h, phi, dec):
    """Hour angle at which a body of declination *dec* reaches altitude *h*.

    Returns NaN when the body never reaches *h* at latitude *phi*
    (polar day or night).
    """

    with np.errstate(invalid="ignore"):
        return np.arccos(
            (np.sin(h) - np.sin(phi) * np.sin(dec)) / (np.cos(phi) * np.cos(dec))
        )


def observer_angle(height):
    """Dip of the horizon in degrees for an observer *height* metres up."""

    return -2.076 * np.sqrt(height) / 60.0
