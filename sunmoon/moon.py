"""Moon position, illumination and rise/set times."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import numpy as np

from .coords import (
    RAD,
    altitude,
    astro_refraction,
    azimuth,
    declination,
    right_ascension,
    sidereal_time,
)
from .observer import GeoLocation
from .sun import EquatorialCoordinates, sun_coords
from .timescale import ensure_utc, hours_later, to_days

__all__ = [
    "MoonPosition",
    "MoonIllumination",
    "MoonTimes",
    "moon_coords",
    "get_moon_position",
    "get_moon_illumination",
    "get_moon_times",
]

SUN_DISTANCE_KM = 149598000.0  # Mean Earth-Sun distance.
MOON_HORIZON_OFFSET = 0.133 * RAD  # Lunar parallax less semi-diameter and refraction.


@dataclass(frozen=True)
class MoonPosition:
    """Topocentric Moon position.

    ``altitude`` is the apparent altitude: the geometric altitude plus
    atmospheric refraction. Azimuth and parallactic angle are derived from
    the geometric position.
    """

    azimuth: float
    altitude: float
    distance: float
    parallactic_angle: float


@dataclass(frozen=True)
class MoonIllumination:
    """Illuminated fraction, phase (0 new, 0.5 full) and bright-limb angle in radians."""

    fraction: float
    phase: float
    angle: float


@dataclass(frozen=True)
class MoonTimes:
    rise: Optional[datetime] = None
    set: Optional[datetime] = None
    always_up: bool = False
    always_down: bool = False


def moon_coords(d: float) -> EquatorialCoordinates:
    """Geocentric equatorial coordinates and distance (km) of the Moon."""

    L = RAD * (218.316 + 13.176396 * d)  # mean longitude
    M = RAD * (134.963 + 13.064993 * d)  # mean anomaly
    F = RAD * (93.272 + 13.229350 * d)  # mean distance from the ascending node

    lng = L + RAD * 6.289 * np.sin(M)
    lat = RAD * 5.128 * np.sin(F)
    distance = 385001 - 20905 * np.cos(M)

    return EquatorialCoordinates(
        right_ascension=float(right_ascension(lng, lat)),
        declination=float(declination(lng, lat)),
        distance=float(distance),
    )


def _moon_position(d: float, location: GeoLocation) -> MoonPosition:
    phi = location.phi
    coords = moon_coords(d)
    H = sidereal_time(d, location.lw) - coords.right_ascension
    h = altitude(H, phi, coords.declination)
    pa = np.arctan2(
        np.sin(H),
        np.tan(phi) * np.cos(coords.declination) - np.sin(coords.declination) * np.cos(H),
    )
    return MoonPosition(
        azimuth=float(azimuth(H, phi, coords.declination)),
        altitude=float(h + astro_refraction(h)),
        distance=coords.distance,
        parallactic_angle=float(pa),
    )


def get_moon_position(dt: datetime, lat: float, lng: float) -> MoonPosition:
    """Compute the Moon's position for an instant and location.

    The returned altitude includes atmospheric refraction, unlike
    :func:`sunmoon.sun.get_position` which reports the geometric altitude.
    """

    location = GeoLocation(latitude=lat, longitude=lng)
    return _moon_position(to_days(dt), location)


def get_moon_illumination(dt: datetime) -> MoonIllumination:
    """Compute the illuminated fraction, phase and bright-limb angle of the Moon.

    ``phase`` runs from 0 (new moon) through 0.25 (first quarter), 0.5 (full
    moon) and 0.75 (last quarter) back to 1. ``angle`` is the position angle of
    the bright limb measured eastward from celestial north; it is negative
    while the Moon waxes.
    """

    d = to_days(dt)
    s = sun_coords(d)
    m = moon_coords(d)

    ra_diff = s.right_ascension - m.right_ascension
    elongation = math.acos(
        float(
            np.clip(
                math.sin(s.declination) * math.sin(m.declination)
                + math.cos(s.declination) * math.cos(m.declination) * math.cos(ra_diff),
                -1.0,
                1.0,
            )
        )
    )
    inc = math.atan2(
        SUN_DISTANCE_KM * math.sin(elongation),
        m.distance - SUN_DISTANCE_KM * math.cos(elongation),
    )
    angle = math.atan2(
        math.cos(s.declination) * math.sin(ra_diff),
        math.sin(s.declination) * math.cos(m.declination)
        - math.cos(s.declination) * math.sin(m.declination) * math.cos(ra_diff),
    )
    sign = -1.0 if angle < 0 else 1.0

    return MoonIllumination(
        fraction=(1 + math.cos(inc)) / 2,
        phase=0.5 + 0.5 * inc * sign / math.pi,
        angle=angle,
    )


def get_moon_times(dt: datetime, lat: float, lng: float) -> MoonTimes:
    """Find moonrise and moonset during the UTC day containing *dt*.

    The apparent altitude is sampled hourly and each two-hour window is
    fitted with a quadratic whose roots give the horizon crossings.
    """

    location = GeoLocation(latitude=lat, longitude=lng)
    start = ensure_utc(dt).replace(hour=0, minute=0, second=0, microsecond=0)

    def moon_altitude(hours: float) -> float:
        d = to_days(hours_later(start, hours))
        return _moon_position(d, location).altitude - MOON_HORIZON_OFFSET

    rise: Optional[float] = None
    set_: Optional[float] = None
    ye = 0.0

    h0 = moon_altitude(0)
    for i in range(1, 25, 2):
        h1 = moon_altitude(i)
        h2 = moon_altitude(i + 1)

        a = (h0 + h2) / 2 - h1
        b = (h2 - h0) / 2
        xe = -b / (2 * a)
        ye = (a * xe + b) * xe + h1
        discriminant = b * b - 4 * a * h1
        roots = 0

        if discriminant >= 0:
            dx = math.sqrt(discriminant) / (abs(a) * 2)
            x1 = xe - dx
            x2 = xe + dx
            if abs(x1) <= 1:
                roots += 1
            if abs(x2) <= 1:
                roots += 1
            if x1 < -1:
                x1 = x2

        if roots == 1:
            if h0 < 0:
                rise = i + x1
            else:
                set_ = i + x1
        elif roots == 2:
            rise = i + (x2 if ye < 0 else x1)
            set_ = i + (x1 if ye < 0 else x2)

        if rise is not None and set_ is not None:
            break
        h0 = h2

    if rise is None and set_ is None:
        return MoonTimes(always_up=ye > 0, always_down=ye <= 0)
    return MoonTimes(
        rise=hours_later(start, rise) if rise is not None else None,
        set=hours_later(start, set_) if set_ is not None else None,
    )
