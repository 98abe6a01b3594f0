"""Validated observer location shared by every query."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .coords import RAD

__all__ = ["GeoLocation"]


class GeoLocation(BaseModel):
    """Observer position; invalid coordinates raise :class:`pydantic.ValidationError`."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    longitude: float = Field(
        ..., ge=-180.0, le=180.0, description="Longitude in degrees (east-positive)"
    )
    height: float = Field(
        0.0, ge=0.0, description="Observer height above the horizon in meters"
    )

    @property
    def phi(self) -> float:
        """Latitude in radians."""
        return RAD * self.latitude

    @property
    def lw(self) -> float:
        """West-positive longitude in radians, as the sidereal-time formula expects."""
        return RAD * -self.longitude
