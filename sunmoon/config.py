"""Environment-driven configuration for the service."""

from __future__ import annotations

import json
import logging
import os
from typing import List, Optional

from .times import SunTime, SunTimeRegistry

LOGGER = logging.getLogger(__name__)

CUSTOM_TIMES_ENV = "SUNMOON_CUSTOM_TIMES"
CORS_ORIGINS_ENV = "SUNMOON_CORS_ORIGINS"


class ConfigurationError(RuntimeError):
    """Raised when an environment setting cannot be parsed."""


def parse_custom_times(raw: str) -> List[SunTime]:
    """Parse a JSON list of ``[angle, rise_name, set_name]`` triples."""

    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{CUSTOM_TIMES_ENV} is not valid JSON: {exc}") from exc
    if not isinstance(entries, list):
        raise ConfigurationError(f"{CUSTOM_TIMES_ENV} must be a JSON list")

    parsed: List[SunTime] = []
    for entry in entries:
        if not isinstance(entry, list) or len(entry) != 3:
            raise ConfigurationError(
                f"{CUSTOM_TIMES_ENV} entries must be [angle, rise_name, set_name]: {entry!r}"
            )
        angle, rise_name, set_name = entry
        if isinstance(angle, bool) or not isinstance(angle, (int, float)):
            raise ConfigurationError(f"Sun time angle must be a number: {angle!r}")
        parsed.append(SunTime(float(angle), rise_name, set_name))
    return parsed


def load_custom_times(registry: SunTimeRegistry, raw: Optional[str] = None) -> List[SunTime]:
    """Register the thresholds configured in ``SUNMOON_CUSTOM_TIMES`` into *registry*."""

    if raw is None:
        raw = os.environ.get(CUSTOM_TIMES_ENV, "")
    if not raw.strip():
        return []

    try:
        registered = list(registry.extend(parse_custom_times(raw)))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid {CUSTOM_TIMES_ENV} entry: {exc}") from exc

    LOGGER.info(
        json.dumps(
            {
                "event": "custom_times_loaded",
                "names": [name for t in registered for name in (t.rise_name, t.set_name)],
            }
        )
    )
    return registered


def cors_origins() -> List[str]:
    raw = os.environ.get(CORS_ORIGINS_ENV, "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
