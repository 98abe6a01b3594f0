"""Closed-form Sun and Moon positions, sun times and lunar illumination."""

from .moon import get_moon_illumination, get_moon_position, get_moon_times
from .observer import GeoLocation
from .sun import get_position
from .times import DEFAULT_REGISTRY, SunTimeRegistry, add_time, get_times

__all__ = [
    "GeoLocation",
    "SunTimeRegistry",
    "DEFAULT_REGISTRY",
    "add_time",
    "get_moon_illumination",
    "get_moon_position",
    "get_moon_times",
    "get_position",
    "get_times",
]
