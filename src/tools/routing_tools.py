"""MCP tools for route calculation and address geocoding.

Registers 'calculate_route' and 'geocode_address'. Both degrade instead of
failing when the provider is unavailable or the user is not entitled.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from core.models import LatLng
from routing.route_service import RouteService


def _parse_waypoints(waypoints: List[Mapping[str, Any]]) -> List[LatLng]:
    if not isinstance(waypoints, list) or not waypoints:
        raise ValidationError("waypoints must be a non-empty list of {lat, lng}")
    return [LatLng.from_mapping(w) for w in waypoints]


def register(mcp: FastMCP, *, route_service: RouteService) -> None:
    @mcp.tool(name="calculate_route")
    async def calculate_route(
        waypoints: List[Dict[str, float]],
        user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Calculate a route through ordered waypoints.

        Params:
          - waypoints: list of {"lat": float, "lng": float}, in travel order.
          - user_id: identifies the caller's membership tier.

        Returns:
          {distance_km, duration_h, source, geometry, instructions}.
          source == "estimate" marks the local approximation (no geometry).
        """
        points = _parse_waypoints(waypoints)
        result = await route_service.calculate_route(points, user_id)
        return asdict(result)

    @mcp.tool(name="geocode_address")
    async def geocode_address(address: str, user_id: Optional[str] = None) -> Optional[Dict[str, float]]:
        """Resolve an address to {lat, lng}; null when unavailable or not entitled."""
        if not (address or "").strip():
            raise ValidationError("address is empty")
        point = await route_service.geocode_address(address, user_id)
        return asdict(point) if point is not None else None
