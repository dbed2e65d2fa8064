"""MCP tools exposing API usage and membership entitlements.

Registers 'api_usage', 'membership_info' and 'check_usage_limit'.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from entitlements.resolver import EntitlementResolver
from entitlements.tiers import get_tier_display_name, get_tier_price
from routing.gateway import QuotaAwareGateway


def _jsonable(value: Any) -> Any:
    return list(value) if isinstance(value, tuple) else value


def register(mcp: FastMCP, *, gateway: QuotaAwareGateway, resolver: EntitlementResolver) -> None:
    @mcp.tool(name="api_usage")
    async def api_usage() -> Dict[str, Any]:
        """Today's provider usage, remaining daily quota and cache occupancy."""
        return {
            "configured": gateway.is_configured(),
            "today": asdict(gateway.get_usage_stats()),
            "remaining_quota": gateway.get_remaining_quota(),
            "cache": gateway.cache_stats(),
        }

    @mcp.tool(name="membership_info")
    async def membership_info(user_id: Optional[str] = None) -> Dict[str, Any]:
        """Resolved tier, its limits and features, and the user's monthly usage."""
        tier = resolver.get_user_membership(user_id)
        limits = resolver.get_membership_limits(tier)
        out: Dict[str, Any] = {
            "tier": tier,
            "display_name": get_tier_display_name(tier),
            "price": get_tier_price(tier),
            "limits": {
                "max_saved_trips": limits.max_saved_trips,
                "max_waypoints_per_trip": limits.max_waypoints_per_trip,
                "monthly_route_calculations": limits.monthly_route_calculations,
                "max_offline_trips": limits.max_offline_trips,
            },
            "features": {
                name: resolver.is_feature_enabled(name, user_id) for name in sorted(limits.features)
            },
            "feature_values": {name: _jsonable(v) for name, v in sorted(limits.features.items())},
            "usage": asdict(resolver.get_user_usage(user_id)) if user_id else None,
        }
        return out

    @mcp.tool(name="check_usage_limit")
    async def check_usage_limit(user_id: str, limit_type: str, current_value: int) -> Dict[str, Any]:
        """Check whether the user may create ONE more item of `limit_type`.

        limit_type is one of savedTrips, waypointsPerTrip, routeCalculations,
        offlineTrips. Existing content is never affected.
        """
        return asdict(resolver.check_usage_limit(user_id, limit_type, int(current_value)))
