"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
ORS_API_KEY, DAILY_API_QUOTA, cache TTLs and the state file location).
"""

from __future__ import annotations

import os
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)

# OpenRouteService (empty key = "not configured", no network I/O)
ORS_API_KEY = os.environ.get("ORS_API_KEY", "").strip()
ORS_BASE_URL = os.environ.get("ORS_BASE_URL", "https://api.openrouteservice.org").strip()
ORS_TIMEOUT = _env_float("ORS_TIMEOUT", 20.0)
GEOCODE_COUNTRY = os.environ.get("GEOCODE_COUNTRY", "US").strip()

# Quota: non-cached calls per local calendar day
DAILY_API_QUOTA = _env_int("DAILY_API_QUOTA", 2000)
USAGE_LOG_MAX_RECORDS = _env_int("USAGE_LOG_MAX_RECORDS", 1000)

# Response cache
CACHE_MAXSIZE = _env_int("CACHE_MAXSIZE", 200)
ROUTE_CACHE_TTL = _env_float("ROUTE_CACHE_TTL", 60 * 60 * 24)
GEOCODE_CACHE_TTL = _env_float("GEOCODE_CACHE_TTL", 60 * 60 * 24 * 30)

# Durable state (usage ledger, memberships, overrides)
STATE_FILE = Path(os.environ.get("STATE_FILE", ".route-governor/state.json")).expanduser()

ENABLE_DEV_TOOLS = _env_bool("ENABLE_DEV_TOOLS", False)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
