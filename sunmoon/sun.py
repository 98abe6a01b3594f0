"""Low-precision solar position model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import numpy as np

from .coords import RAD, altitude, azimuth, declination, right_ascension, sidereal_time
from .observer import GeoLocation
from .timescale import to_days

__all__ = [
    "EquatorialCoordinates",
    "SunPosition",
    "solar_mean_anomaly",
    "ecliptic_longitude",
    "sun_coords",
    "get_position",
]

PERIHELION = RAD * 102.9372  # Argument of perihelion of the Earth.


@dataclass(frozen=True)
class EquatorialCoordinates:
    """Right ascension and declination in radians; distance in km when known."""

    right_ascension: float
    declination: float
    distance: Optional[float] = None


@dataclass(frozen=True)
class SunPosition:
    azimuth: float
    altitude: float


def solar_mean_anomaly(d: float) -> float:
    return RAD * (357.5291 + 0.98560028 * d)


def ecliptic_longitude(M: float) -> float:
    """Ecliptic longitude of the Sun from its mean anomaly *M*."""

    center = RAD * (1.9148 * np.sin(M) + 0.02 * np.sin(2 * M) + 0.0003 * np.sin(3 * M))
    return M + center + PERIHELION + np.pi


def sun_coords(d: float) -> EquatorialCoordinates:
    L = ecliptic_longitude(solar_mean_anomaly(d))
    return EquatorialCoordinates(
        right_ascension=float(right_ascension(L, 0.0)),
        declination=float(declination(L, 0.0)),
    )


def get_position(dt: datetime, lat: float, lng: float) -> SunPosition:
    """Compute the Sun's azimuth and altitude for an instant and location.

    Parameters
    ----------
    dt:
        Timezone-aware instant.
    lat, lng:
        Geographic coordinates in degrees (east-positive longitude).

    Returns
    -------
    SunPosition
        Azimuth (radians from south, positive westward) and geometric
        altitude in radians.
    """

    location = GeoLocation(latitude=lat, longitude=lng)
    d = to_days(dt)
    coords = sun_coords(d)
    H = sidereal_time(d, location.lw) - coords.right_ascension
    return SunPosition(
        azimuth=float(azimuth(H, location.phi, coords.declination)),
        altitude=float(altitude(H, location.phi, coords.declination)),
    )
