"""Geodesy helpers for the local route estimate.

The estimate is deliberately coarse: great-circle legs scaled by a fixed
road-indirection factor and divided by an assumed average speed. It has
no geometry and must never be presented as a real route.
"""

from __future__ import annotations

import math
from typing import List, Sequence

from core.models import LatLng, RouteEstimate

EARTH_RADIUS_KM = 6371.0
ROAD_FACTOR = 1.3  # roads run ~30% longer than the straight line
AVERAGE_SPEED_KMH = 80.0


def haversine_km(a: LatLng, b: LatLng) -> float:
    """Great-circle distance between two points, in kilometres."""
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(d_lng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def straight_line_km(waypoints: Sequence[LatLng]) -> float:
    return sum(haversine_km(a, b) for a, b in zip(waypoints, waypoints[1:]))


def estimate_route(waypoints: Sequence[LatLng]) -> RouteEstimate:
    distance = straight_line_km(waypoints) * ROAD_FACTOR
    return RouteEstimate(
        distance_km=distance,
        duration_h=distance / AVERAGE_SPEED_KMH,
        source="estimate",
    )


def decode_polyline(encoded: str, *, precision: int = 5, with_elevation: bool = False) -> List[LatLng]:
    """Decode an encoded polyline (as returned by ORS) into points.

    ORS appends a third elevation value per point when elevation was
    requested; it is skipped here.
    """
    factor = 10 ** precision
    dims = 3 if with_elevation else 2
    values = [0] * dims
    points: List[LatLng] = []
    index = 0

    while index < len(encoded):
        for d in range(dims):
            shift = 0
            result = 0
            while True:
                byte = ord(encoded[index]) - 63
                index += 1
                result |= (byte & 0x1F) << shift
                shift += 5
                if byte < 0x20:
                    break
            values[d] += ~(result >> 1) if result & 1 else result >> 1
        points.append(LatLng(lat=values[0] / factor, lng=values[1] / factor))

    return points
