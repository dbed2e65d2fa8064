"""Developer-only MCP tools for exercising tiers and feature flags.

Registered only when ENABLE_DEV_TOOLS is on; never enable in production.
"""

from __future__ import annotations

from typing import Dict

from mcp.server.fastmcp import FastMCP

from entitlements.overrides import StoreOverrideProvider
from entitlements.resolver import EntitlementResolver


def register(mcp: FastMCP, *, overrides: StoreOverrideProvider, resolver: EntitlementResolver) -> None:
    @mcp.tool(name="set_test_tier")
    async def set_test_tier(tier: str) -> Dict[str, str]:
        """Force every user to resolve to `tier` until cleared."""
        overrides.set_test_tier(tier)
        return {"test_tier": tier}

    @mcp.tool(name="clear_test_tier")
    async def clear_test_tier() -> Dict[str, str]:
        overrides.clear_test_tier()
        return {"test_tier": ""}

    @mcp.tool(name="set_feature_override")
    async def set_feature_override(feature_name: str, enabled: bool) -> Dict[str, object]:
        """Override one feature flag for all users, regardless of tier."""
        overrides.set_feature_override(feature_name, enabled)
        return {"feature": feature_name, "enabled": bool(enabled)}

    @mcp.tool(name="clear_feature_overrides")
    async def clear_feature_overrides() -> Dict[str, bool]:
        overrides.clear_feature_overrides()
        return {"cleared": True}

    @mcp.tool(name="set_user_membership")
    async def set_user_membership(user_id: str, tier: str) -> Dict[str, str]:
        resolver.set_user_membership(user_id, tier)
        return {"user_id": user_id, "tier": resolver.get_user_membership(user_id)}
