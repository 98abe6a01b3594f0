from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from sunmoon import get_position, get_times
from sunmoon.times import DEFAULT_TIMES, SunTime, SunTimeRegistry, add_time

REFERENCE_DATE = datetime(2013, 3, 5, tzinfo=UTC)
LAT = 50.5
LNG = 30.5

REFERENCE_TIMES = {
    "solar_noon": datetime(2013, 3, 5, 10, 10, 57, tzinfo=UTC),
    "nadir": datetime(2013, 3, 4, 22, 10, 57, tzinfo=UTC),
    "sunrise": datetime(2013, 3, 5, 4, 34, 56, tzinfo=UTC),
    "sunset": datetime(2013, 3, 5, 15, 46, 57, tzinfo=UTC),
    "sunrise_end": datetime(2013, 3, 5, 4, 38, 19, tzinfo=UTC),
    "sunset_start": datetime(2013, 3, 5, 15, 43, 34, tzinfo=UTC),
    "dawn": datetime(2013, 3, 5, 4, 2, 17, tzinfo=UTC),
    "dusk": datetime(2013, 3, 5, 16, 19, 36, tzinfo=UTC),
    "nautical_dawn": datetime(2013, 3, 5, 3, 24, 31, tzinfo=UTC),
    "nautical_dusk": datetime(2013, 3, 5, 16, 57, 22, tzinfo=UTC),
    "night_end": datetime(2013, 3, 5, 2, 46, 17, tzinfo=UTC),
    "night": datetime(2013, 3, 5, 17, 35, 36, tzinfo=UTC),
    "golden_hour_end": datetime(2013, 3, 5, 5, 19, 1, tzinfo=UTC),
    "golden_hour": datetime(2013, 3, 5, 15, 2, 52, tzinfo=UTC),
}


def test_reference_sun_position():
    position = get_position(REFERENCE_DATE, LAT, LNG)
    assert position.azimuth == pytest.approx(-2.5003175907168385, abs=1e-6)
    assert position.altitude == pytest.approx(-0.7000406838781611, abs=1e-6)


def test_reference_sun_times():
    times = get_times(REFERENCE_DATE, LAT, LNG, registry=SunTimeRegistry())
    assert set(times) == set(REFERENCE_TIMES)
    for name, expected in REFERENCE_TIMES.items():
        actual = times[name]
        assert actual is not None, name
        assert actual.tzinfo is not None
        assert abs((actual - expected).total_seconds()) < 2.0, name


def test_observer_height_widens_the_day():
    ground = get_times(REFERENCE_DATE, LAT, LNG)
    mountain = get_times(REFERENCE_DATE, LAT, LNG, height=2000)
    assert mountain["sunrise"] < ground["sunrise"]
    assert mountain["sunset"] > ground["sunset"]
    assert mountain["solar_noon"] == ground["solar_noon"]


def test_equinox_at_equator_is_symmetric_around_transit():
    times = get_times(datetime(2013, 3, 20, 12, tzinfo=UTC), 0.0, 0.0)
    morning = times["solar_noon"] - times["sunrise"]
    evening = times["sunset"] - times["solar_noon"]
    assert abs((morning - evening).total_seconds()) < 1e-3
    assert morning.total_seconds() == pytest.approx(6 * 3600, abs=600)


def test_polar_night_has_no_sunrise():
    times = get_times(datetime(2013, 12, 21, tzinfo=UTC), 78.2232, 15.6469)
    assert times["sunrise"] is None
    assert times["sunset"] is None
    assert times["solar_noon"] is not None
    assert times["nadir"] is not None


def test_polar_day_has_no_sunset():
    times = get_times(datetime(2013, 6, 21, tzinfo=UTC), 78.2232, 15.6469)
    assert times["sunrise"] is None
    assert times["sunset"] is None
    assert get_position(times["solar_noon"], 78.2232, 15.6469).altitude > 0


@pytest.mark.parametrize("lat", [10.0, 35.0, 60.0])
def test_noon_altitude_mirrors_across_hemispheres_half_a_year_apart(lat: float):
    start = datetime(2013, 1, 10, tzinfo=UTC)
    for offset in range(0, 365, 30):
        day = start + timedelta(days=offset)
        mirrored_day = day + timedelta(days=182.62)
        noon = get_times(day, lat, LNG)["solar_noon"]
        mirrored_noon = get_times(mirrored_day, -lat, LNG)["solar_noon"]
        altitude = get_position(noon, lat, LNG).altitude
        mirrored = get_position(mirrored_noon, -lat, LNG).altitude
        assert abs(altitude - mirrored) < math.radians(2.0), day


def test_add_time_registers_globally():
    add_time(-4, "custom_dawn", "custom_dusk")
    first = get_times(REFERENCE_DATE, LAT, LNG)
    second = get_times(REFERENCE_DATE + timedelta(days=30), -33.9, 18.4)
    for result in (first, second):
        assert "custom_dawn" in result
        assert "custom_dusk" in result
    assert first["dawn"] < first["custom_dawn"] < first["sunrise"]
    assert first["sunset"] < first["custom_dusk"] < first["dusk"]


def test_caller_owned_registry_is_isolated():
    registry = SunTimeRegistry(defaults=[SunTime(-0.833, "sunrise", "sunset")])
    registry.add(-9, "blue_start", "blue_end")
    times = get_times(REFERENCE_DATE, LAT, LNG, registry=registry)
    assert set(times) == {"solar_noon", "nadir", "sunrise", "sunset", "blue_start", "blue_end"}
    assert len(SunTimeRegistry().snapshot()) == len(DEFAULT_TIMES)


def test_registry_snapshot_is_stable():
    registry = SunTimeRegistry()
    snapshot = registry.snapshot()
    registry.add(3, "late_morning", "early_evening")
    assert len(snapshot) == len(DEFAULT_TIMES)
    assert len(registry.snapshot()) == len(DEFAULT_TIMES) + 1


@pytest.mark.parametrize(
    "angle, rise_name, set_name",
    [
        (float("nan"), "a", "b"),
        (95.0, "a", "b"),
        (-4.0, "", "b"),
        (-4.0, "solar_noon", "b"),
        (-4.0, "a", "nadir"),
    ],
)
def test_registry_rejects_invalid_thresholds(angle, rise_name, set_name):
    registry = SunTimeRegistry()
    with pytest.raises(ValueError):
        registry.add(angle, rise_name, set_name)
    assert registry.snapshot() == DEFAULT_TIMES


@pytest.mark.parametrize(
    "lat, lng, height",
    [(91.0, 0.0, 0.0), (-90.5, 0.0, 0.0), (0.0, 180.5, 0.0), (0.0, -181.0, 0.0), (0.0, 0.0, -1.0)],
)
def test_invalid_location_rejected(lat, lng, height):
    with pytest.raises(ValidationError):
        get_times(REFERENCE_DATE, lat, lng, height)


def test_invalid_position_query_rejected():
    with pytest.raises(ValueError):
        get_position(REFERENCE_DATE, 120.0, 0.0)
