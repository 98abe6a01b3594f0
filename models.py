"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TimeQueryParams(BaseModel):
    """Validated ``time`` query parameter; also used as-is by ``/moon/illumination``."""

    model_config = ConfigDict(populate_by_name=True)

    time: Optional[datetime] = Field(
        None, description="Instant (ISO-8601); naive values are read as UTC. Defaults to now"
    )

    @field_validator("time")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=UTC)


class LocationQueryParams(TimeQueryParams):
    """Validated query parameters shared by the position endpoints."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")


class SunTimesQueryParams(LocationQueryParams):
    """Validated query parameters for the ``/sun/times`` endpoint."""

    height_m: float = Field(
        0.0, alias="height", ge=0.0, description="Observer height above the horizon in meters"
    )


class MoonTimesQueryParams(BaseModel):
    """Validated query parameters for the ``/moon/times`` endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    date_utc: Optional[date] = Field(
        None, alias="date", description="UTC calendar date (YYYY-MM-DD). Defaults to today"
    )


class SunPositionResponse(BaseModel):
    ok: bool = True
    time_utc: str = Field(..., description="Instant of the computation (ISO-8601)")
    latitude: float
    longitude: float
    azimuth: float = Field(..., description="Azimuth in radians from south, westward positive")
    altitude: float = Field(..., description="Geometric altitude in radians")
    azimuth_deg: float
    altitude_deg: float


class SunTimesResponse(BaseModel):
    """Sun times keyed by threshold name; ``null`` when the Sun never gets there."""

    ok: bool = True
    time_utc: str
    latitude: float
    longitude: float
    height_m: float
    times: Dict[str, Optional[str]]


class MoonPositionResponse(BaseModel):
    ok: bool = True
    time_utc: str
    latitude: float
    longitude: float
    azimuth: float = Field(..., description="Azimuth in radians from south, westward positive")
    altitude: float = Field(..., description="Apparent (refraction corrected) altitude in radians")
    distance_km: float
    parallactic_angle: float


class MoonIlluminationResponse(BaseModel):
    ok: bool = True
    time_utc: str
    fraction: float = Field(..., description="Illuminated fraction of the disk")
    phase: float = Field(..., description="0 new moon, 0.5 full moon")
    angle: float = Field(..., description="Bright-limb position angle in radians")


class MoonTimesResponse(BaseModel):
    ok: bool = True
    date_utc: date
    latitude: float
    longitude: float
    rise_utc: Optional[str] = Field(None, description="Moonrise in UTC (ISO-8601)")
    set_utc: Optional[str] = Field(None, description="Moonset in UTC (ISO-8601)")
    always_up: bool = False
    always_down: bool = False


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    thresholds: List[str]


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
