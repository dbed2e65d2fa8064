"""Caller-facing route and geocode operations with graceful fallback.

Real provider data is used only when the caller's tier allows it; any
denial or failure degrades to the local estimate (routes) or None
(geocoding). Neither operation raises for provider problems.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from core.errors import GovernorError
from core.models import LatLng, RouteEstimate
from entitlements.resolver import EntitlementResolver
from routing.gateway import QuotaAwareGateway
from routing.geo import estimate_route

logger = logging.getLogger(__name__)


class RouteService:
    def __init__(
        self,
        *,
        gateway: QuotaAwareGateway,
        resolver: EntitlementResolver,
        geocode_country: Optional[str] = "US",
        profile: str = "driving-car",
    ) -> None:
        self._gateway = gateway
        self._resolver = resolver
        self._geocode_country = geocode_country or None
        self._profile = profile

    async def calculate_route(
        self,
        waypoints: Sequence[LatLng],
        user_id: Optional[str] = None,
    ) -> RouteEstimate:
        """Real route when entitled and available, otherwise the local estimate."""
        if self._may_route(waypoints, user_id):
            try:
                route = await self._gateway.get_directions(
                    waypoints,
                    self._profile,
                    include_instructions=True,
                    include_geometry=True,
                )
            except GovernorError as e:
                logger.error("Route calculation failed, using estimate: %s", e)
                route = None

            if route is not None:
                if user_id:
                    self._resolver.increment_usage_count(user_id, "routeCalculations", 1)
                return RouteEstimate(
                    distance_km=route.distance_m / 1000,
                    duration_h=route.duration_s / 3600,
                    source="remote",
                    geometry=list(route.geometry),
                    instructions=[dict(step) for step in route.steps],
                )

        return self.calculate_mock_route(waypoints)

    def calculate_mock_route(self, waypoints: Sequence[LatLng]) -> RouteEstimate:
        return estimate_route(waypoints)

    async def geocode_address(self, address: str, user_id: Optional[str] = None) -> Optional[LatLng]:
        if not self._resolver.is_feature_enabled("geocoding", user_id):
            return None

        try:
            result = await self._gateway.geocode(address, country=self._geocode_country)
        except GovernorError as e:
            logger.error("Geocoding failed: %s", e)
            return None

        if result is None:
            return None
        return LatLng(lat=result.lat, lng=result.lng)

    def _may_route(self, waypoints: Sequence[LatLng], user_id: Optional[str]) -> bool:
        if len(waypoints) < 2:
            return False
        return self._resolver.is_feature_enabled("realTimeRouting", user_id)
