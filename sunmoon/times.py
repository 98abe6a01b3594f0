"""Sunrise, sunset and twilight times for a configurable set of sun altitudes."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from threading import Lock
from typing import Dict, Iterable, List, Optional, Tuple

from .coords import RAD, declination, hour_angle, observer_angle
from .observer import GeoLocation
from .sun import ecliptic_longitude, solar_mean_anomaly
from .timescale import J2000, from_julian_day, to_days

__all__ = [
    "DEFAULT_TIMES",
    "SunTime",
    "SunTimeRegistry",
    "validate_sun_time",
    "add_time",
    "get_times",
    "julian_cycle",
    "approx_transit",
    "solar_transit_j",
    "DEFAULT_REGISTRY",
]

LOGGER = logging.getLogger(__name__)

J0 = 0.0009  # Mean solar transit offset in days.
RESERVED_NAMES = frozenset({"solar_noon", "nadir"})


@dataclass(frozen=True)
class SunTime:
    """A sun altitude in degrees with the names of its morning and evening crossings."""

    angle: float
    rise_name: str
    set_name: str


DEFAULT_TIMES: Tuple[SunTime, ...] = (
    SunTime(-0.833, "sunrise", "sunset"),
    SunTime(-0.3, "sunrise_end", "sunset_start"),
    SunTime(-6.0, "dawn", "dusk"),
    SunTime(-12.0, "nautical_dawn", "nautical_dusk"),
    SunTime(-18.0, "night_end", "night"),
    SunTime(6.0, "golden_hour_end", "golden_hour"),
)


def validate_sun_time(angle: float, rise_name: str, set_name: str) -> SunTime:
    if not math.isfinite(angle) or not -90.0 <= angle <= 90.0:
        raise ValueError(f"Sun time angle must be within ±90 degrees: {angle}")
    for name in (rise_name, set_name):
        if not isinstance(name, str) or not name:
            raise ValueError("Sun time names must be non-empty strings")
        if name in RESERVED_NAMES:
            raise ValueError(f"Sun time name is reserved: {name}")
    return SunTime(float(angle), rise_name, set_name)


class SunTimeRegistry:
    """Ordered, append-only set of sun altitude thresholds.

    Writers are serialised by a lock and readers work on immutable snapshots,
    so a solver call never observes a half-applied registration.
    """

    def __init__(self, defaults: Iterable[SunTime] = DEFAULT_TIMES) -> None:
        self._lock = Lock()
        self._times: Tuple[SunTime, ...] = tuple(defaults)

    def add(self, angle: float, rise_name: str, set_name: str) -> SunTime:
        sun_time = validate_sun_time(angle, rise_name, set_name)
        with self._lock:
            self._times = self._times + (sun_time,)
        LOGGER.info(
            json.dumps(
                {
                    "event": "sun_time_registered",
                    "angle": sun_time.angle,
                    "rise_name": rise_name,
                    "set_name": set_name,
                }
            )
        )
        return sun_time

    def extend(self, sun_times: Iterable[SunTime]) -> Tuple[SunTime, ...]:
        """Register several thresholds at once; nothing is added if any is invalid."""

        validated = tuple(
            validate_sun_time(t.angle, t.rise_name, t.set_name) for t in sun_times
        )
        with self._lock:
            self._times = self._times + validated
        return validated

    def snapshot(self) -> Tuple[SunTime, ...]:
        with self._lock:
            return self._times

    def names(self) -> List[str]:
        names = ["solar_noon", "nadir"]
        for sun_time in self.snapshot():
            names.extend((sun_time.rise_name, sun_time.set_name))
        return names


DEFAULT_REGISTRY = SunTimeRegistry()


def add_time(angle: float, rise_name: str, set_name: str) -> SunTime:
    """Register a custom sun altitude (degrees) in the process-wide registry."""

    return DEFAULT_REGISTRY.add(angle, rise_name, set_name)


def julian_cycle(d: float, lw: float) -> int:
    # Round half up, not to even.
    return math.floor(d - J0 - lw / (2 * math.pi) + 0.5)


def approx_transit(Ht: float, lw: float, n: int) -> float:
    return J0 + (Ht + lw) / (2 * math.pi) + n


def solar_transit_j(ds: float, M: float, L: float) -> float:
    """Julian day of the solar transit nearest to *ds*, corrected by the equation of time."""

    return J2000 + ds + 0.0053 * math.sin(M) - 0.0069 * math.sin(2 * L)


def get_times(
    dt: datetime,
    lat: float,
    lng: float,
    height: float = 0.0,
    registry: Optional[SunTimeRegistry] = None,
) -> Dict[str, Optional[datetime]]:
    """Compute sun times for the solar day nearest to *dt*.

    Parameters
    ----------
    dt:
        Timezone-aware instant; the solar day whose transit is nearest wins.
    lat, lng:
        Geographic coordinates in degrees (east-positive longitude).
    height:
        Observer height above the horizon in meters; lowers every threshold by
        the dip of the horizon.
    registry:
        Threshold set to solve for. Defaults to the process-wide registry.

    Returns
    -------
    dict
        ``solar_noon`` and ``nadir`` plus a morning and an evening entry per
        threshold. Thresholds the Sun never reaches that day map to ``None``.
    """

    location = GeoLocation(latitude=lat, longitude=lng, height=height)
    sun_times = (registry or DEFAULT_REGISTRY).snapshot()

    lw = location.lw
    phi = location.phi
    dh = float(observer_angle(location.height))

    d = to_days(dt)
    n = julian_cycle(d, lw)
    ds = approx_transit(0.0, lw, n)
    M = float(solar_mean_anomaly(ds))
    L = float(ecliptic_longitude(M))
    dec = float(declination(L, 0.0))
    j_noon = solar_transit_j(ds, M, L)

    result: Dict[str, Optional[datetime]] = {
        "solar_noon": from_julian_day(j_noon),
        "nadir": from_julian_day(j_noon - 0.5),
    }

    for sun_time in sun_times:
        h0 = (sun_time.angle + dh) * RAD
        w = float(hour_angle(h0, phi, dec))
        if math.isnan(w):
            result[sun_time.rise_name] = None
            result[sun_time.set_name] = None
            continue
        j_set = solar_transit_j(approx_transit(w, lw, n), M, L)
        j_rise = j_noon - (j_set - j_noon)
        result[sun_time.rise_name] = from_julian_day(j_rise)
        result[sun_time.set_name] = from_julian_day(j_set)

    return result
