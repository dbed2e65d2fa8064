"""Deterministic cache keys for provider requests.

Route keys truncate every coordinate to 4 decimal degrees (~11 m) and embed
the routing profile. Geocode keys are scoped by country.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
from typing import Iterable, Optional

from core.models import LatLng

_COORD_QUANTUM = Decimal("0.0001")


def quantize_coordinate(value: float) -> str:
    """Truncate toward zero at the 4th decimal; '-0.0000' becomes '0.0000'."""
    q = Decimal(repr(float(value))).quantize(_COORD_QUANTUM, rounding=ROUND_DOWN)
    if q == 0:
        q = abs(q)
    return f"{q:.4f}"


def route_cache_key(waypoints: Iterable[LatLng], profile: str = "driving-car") -> str:
    coords = "|".join(
        f"{quantize_coordinate(w.lat)},{quantize_coordinate(w.lng)}" for w in waypoints
    )
    return f"route:{profile}:{coords}"


def geocode_cache_key(query: str, country: Optional[str] = None) -> str:
    scope = (country or "").strip().upper() or "*"
    return f"geocode:{scope}:{(query or '').strip().lower()}"
