"""FastAPI application exposing Sun and Moon computations."""

from __future__ import annotations

import json
import logging
import math
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from threading import Lock
from typing import Annotated, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models import (
    ErrorResponse,
    HealthResponse,
    LocationQueryParams,
    MoonIlluminationResponse,
    MoonPositionResponse,
    MoonTimesQueryParams,
    MoonTimesResponse,
    SunPositionResponse,
    SunTimesQueryParams,
    SunTimesResponse,
    TimeQueryParams,
)
from sunmoon import (
    DEFAULT_REGISTRY,
    get_moon_illumination,
    get_moon_position,
    get_moon_times,
    get_position,
    get_times,
)
from sunmoon.config import ConfigurationError, cors_origins, load_custom_times

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("sunmoon-api")

APP_DESCRIPTION = (
    "Sun and Moon positions, sun times and lunar illumination from closed-form formulas"
)

_CUSTOM_TIMES_LOADED = False
_CONFIG_LOCK = Lock()


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _CUSTOM_TIMES_LOADED
    with _CONFIG_LOCK:
        if not _CUSTOM_TIMES_LOADED:
            try:
                load_custom_times(DEFAULT_REGISTRY)
            except ConfigurationError as exc:
                LOGGER.error(json.dumps({"event": "config_load_failed", "error": str(exc)}))
                raise
            _CUSTOM_TIMES_LOADED = True
    LOGGER.info(
        json.dumps({"event": "startup", "thresholds": DEFAULT_REGISTRY.names()})
    )
    yield


app = FastAPI(
    title="SunMoon API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

_ORIGINS = cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_ORIGINS,
    allow_credentials="*" not in _ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _format_utc(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _resolve_time(value: Optional[datetime]) -> datetime:
    return value if value is not None else datetime.now(UTC)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


def _log_request(event: str, start_time: float, **fields) -> None:
    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps({"event": event, **fields, "duration_ms": round(duration_ms, 3)})
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, thresholds=DEFAULT_REGISTRY.names())


@app.get("/sun/position", response_model=SunPositionResponse, responses=_ERROR_RESPONSES)
def sun_position_endpoint(
    params: Annotated[LocationQueryParams, Query()],
) -> SunPositionResponse:
    start_time = time.perf_counter()
    when = _resolve_time(params.time)
    try:
        position = get_position(when, params.lat, params.lon)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    response = SunPositionResponse(
        time_utc=_format_utc(when),
        latitude=params.lat,
        longitude=params.lon,
        azimuth=position.azimuth,
        altitude=position.altitude,
        azimuth_deg=math.degrees(position.azimuth),
        altitude_deg=math.degrees(position.altitude),
    )
    _log_request("sun_position", start_time, lat=params.lat, lon=params.lon, time=response.time_utc)
    return response


@app.get("/sun/times", response_model=SunTimesResponse, responses=_ERROR_RESPONSES)
def sun_times_endpoint(
    params: Annotated[SunTimesQueryParams, Query()],
) -> SunTimesResponse:
    start_time = time.perf_counter()
    when = _resolve_time(params.time)
    try:
        times = get_times(when, params.lat, params.lon, params.height_m)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    response = SunTimesResponse(
        time_utc=_format_utc(when),
        latitude=params.lat,
        longitude=params.lon,
        height_m=params.height_m,
        times={name: _format_utc(value) for name, value in times.items()},
    )
    _log_request(
        "sun_times",
        start_time,
        lat=params.lat,
        lon=params.lon,
        time=response.time_utc,
        never=sorted(name for name, value in times.items() if value is None),
    )
    return response


@app.get("/moon/position", response_model=MoonPositionResponse, responses=_ERROR_RESPONSES)
def moon_position_endpoint(
    params: Annotated[LocationQueryParams, Query()],
) -> MoonPositionResponse:
    start_time = time.perf_counter()
    when = _resolve_time(params.time)
    try:
        position = get_moon_position(when, params.lat, params.lon)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    response = MoonPositionResponse(
        time_utc=_format_utc(when),
        latitude=params.lat,
        longitude=params.lon,
        azimuth=position.azimuth,
        altitude=position.altitude,
        distance_km=position.distance,
        parallactic_angle=position.parallactic_angle,
    )
    _log_request("moon_position", start_time, lat=params.lat, lon=params.lon, time=response.time_utc)
    return response


@app.get(
    "/moon/illumination", response_model=MoonIlluminationResponse, responses=_ERROR_RESPONSES
)
def moon_illumination_endpoint(
    params: Annotated[TimeQueryParams, Query()],
) -> MoonIlluminationResponse:
    start_time = time.perf_counter()
    when = _resolve_time(params.time)
    try:
        illumination = get_moon_illumination(when)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    response = MoonIlluminationResponse(
        time_utc=_format_utc(when),
        fraction=illumination.fraction,
        phase=illumination.phase,
        angle=illumination.angle,
    )
    _log_request("moon_illumination", start_time, time=response.time_utc)
    return response


@app.get("/moon/times", response_model=MoonTimesResponse, responses=_ERROR_RESPONSES)
def moon_times_endpoint(
    params: Annotated[MoonTimesQueryParams, Query()],
) -> MoonTimesResponse:
    start_time = time.perf_counter()
    day = params.date_utc or datetime.now(UTC).date()
    try:
        result = get_moon_times(
            datetime.combine(day, datetime.min.time(), tzinfo=UTC), params.lat, params.lon
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    response = MoonTimesResponse(
        date_utc=day,
        latitude=params.lat,
        longitude=params.lon,
        rise_utc=_format_utc(result.rise),
        set_utc=_format_utc(result.set),
        always_up=result.always_up,
        always_down=result.always_down,
    )
    _log_request(
        "moon_times", start_time, lat=params.lat, lon=params.lon, date=day.isoformat()
    )
    return response
