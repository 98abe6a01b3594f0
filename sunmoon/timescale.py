"""Conversions between UTC instants and Julian days."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import erfa

__all__ = [
    "J1970",
    "J2000",
    "to_julian_day",
    "to_days",
    "from_julian_day",
    "hours_later",
    "ensure_utc",
]

J1970 = 2440587.5  # Julian day of the Unix epoch.
J2000 = 2451545.0


def ensure_utc(dt: datetime) -> datetime:
    """Return *dt* converted to UTC, rejecting naive datetimes."""

    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return dt.astimezone(UTC)


def to_julian_day(dt: datetime) -> float:
    """Return the fractional Julian day of a timezone-aware instant."""

    dt_utc = ensure_utc(dt)
    # Empty scale: every day is 86400 s, so leap seconds are ignored as in Unix time.
    jd1, jd2 = erfa.dtf2d(
        "",
        dt_utc.year,
        dt_utc.month,
        dt_utc.day,
        dt_utc.hour,
        dt_utc.minute,
        dt_utc.second + dt_utc.microsecond / 1_000_000,
    )
    return float(jd1) + float(jd2)


def to_days(dt: datetime) -> float:
    """Days elapsed since J2000.0, the time argument of every position formula."""

    return to_julian_day(dt) - J2000


def from_julian_day(jd: float) -> datetime:
    """Convert a Julian day back to a UTC datetime with microsecond resolution."""

    year, month, day, ihmsf = erfa.d2dtf("", 6, jd, 0.0)
    return datetime(int(year), int(month), int(day), tzinfo=UTC) + timedelta(
        hours=int(ihmsf["h"]),
        minutes=int(ihmsf["m"]),
        seconds=int(ihmsf["s"]),
        microseconds=int(ihmsf["f"]),
    )


def hours_later(dt: datetime, hours: float) -> datetime:
    return dt + timedelta(hours=hours)
