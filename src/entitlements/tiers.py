"""Static membership tier table.

Every tier defines every feature in FEATURE_NAMES; `validate_tier_table`
enforces that at import time so a lookup can never hit a missing key.
Limits apply only to creating NEW content: users never lose access to
trips they already have.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping

from core.errors import ConfigurationError
from core.models import MEMBERSHIP_TIERS, UNLIMITED, FeatureValue, MembershipLimits, MembershipTier

FEATURE_NAMES = frozenset(
    {
        "realTimeRouting",
        "routeOptimization",
        "routeOptimizationAdvanced",
        "geocoding",
        "geocodingUnlimited",
        "offlineAccess",
        "offlineAutoSync",
        "tripSharing",
        "tripCollaboration",
        "publicProfile",
        "dataExport",
        "exportFormats",
        "apiAccess",
        "influencerContent",
        "influencerContentCreation",
        "aiMessages",
        "aiPriority",
        "aiCustomTraining",
        "safetyFeatures",
        "liveTracking",
        "analytics",
        "evRouting",
        "fuelOptimization",
        "parkingFinder",
        "flightTracking",
        "arFeatures",
        "whiteLabel",
        "prioritySupport",
        "betaAccess",
        "debugMode",
        "apiMonitoring",
    }
)

_ALL_EXPORTS = ("csv", "pdf", "gpx", "kml")


def _features(**values: FeatureValue) -> Mapping[str, FeatureValue]:
    # Anything not granted explicitly is off
    merged: Dict[str, FeatureValue] = {name: False for name in FEATURE_NAMES}
    merged.update(values)
    return MappingProxyType(merged)


_FREE = MembershipLimits(
    max_saved_trips=3,
    max_waypoints_per_trip=7,
    monthly_route_calculations=0,  # estimates only
    max_offline_trips=0,
    features=_features(
        exportFormats=(),
        influencerContent="sample",
        aiMessages=10,
        safetyFeatures="basic",
    ),
)

_BASIC = MembershipLimits(
    max_saved_trips=25,
    max_waypoints_per_trip=25,
    monthly_route_calculations=100,
    max_offline_trips=5,
    features=_features(
        realTimeRouting=True,
        geocoding=True,
        offlineAccess=True,
        tripSharing=True,
        dataExport=True,
        exportFormats=("csv",),
        influencerContent="full",
        aiMessages=UNLIMITED,
        safetyFeatures="full",
    ),
)

_ADVANCED = MembershipLimits(
    max_saved_trips=UNLIMITED,
    max_waypoints_per_trip=100,
    monthly_route_calculations=500,
    max_offline_trips=UNLIMITED,
    features=_features(
        realTimeRouting=True,
        routeOptimization=True,
        geocoding=True,
        geocodingUnlimited=True,
        offlineAccess=True,
        tripSharing=True,
        tripCollaboration=True,
        dataExport=True,
        exportFormats=_ALL_EXPORTS,
        influencerContent="exclusive",
        aiMessages=UNLIMITED,
        aiPriority=True,
        safetyFeatures="full",
        liveTracking=True,
        analytics=True,
        evRouting=True,
        fuelOptimization=True,
    ),
)

_EXPERT_FEATURES: Dict[str, FeatureValue] = dict(
    realTimeRouting=True,
    routeOptimization=True,
    routeOptimizationAdvanced=True,
    geocoding=True,
    geocodingUnlimited=True,
    offlineAccess=True,
    offlineAutoSync=True,
    tripSharing=True,
    tripCollaboration=True,
    publicProfile=True,
    dataExport=True,
    exportFormats=_ALL_EXPORTS,
    apiAccess=True,
    influencerContent="exclusive",
    influencerContentCreation=True,
    aiMessages=UNLIMITED,
    aiPriority=True,
    aiCustomTraining=True,
    safetyFeatures="full",
    liveTracking=True,
    analytics=True,
    evRouting=True,
    fuelOptimization=True,
    parkingFinder=True,
    flightTracking=True,
    arFeatures=True,
    whiteLabel=True,
    prioritySupport=True,
    betaAccess=True,
)

_EXPERT = MembershipLimits(
    max_saved_trips=UNLIMITED,
    max_waypoints_per_trip=UNLIMITED,
    monthly_route_calculations=UNLIMITED,
    max_offline_trips=UNLIMITED,
    features=_features(**_EXPERT_FEATURES),
)

# Expert plus development-only features
_TEST = MembershipLimits(
    max_saved_trips=UNLIMITED,
    max_waypoints_per_trip=UNLIMITED,
    monthly_route_calculations=UNLIMITED,
    max_offline_trips=UNLIMITED,
    features=_features(**_EXPERT_FEATURES, debugMode=True, apiMonitoring=True),
)


def validate_tier_table(table: Mapping[str, MembershipLimits]) -> None:
    """Reject a table with missing tiers or missing/unknown feature keys."""
    missing_tiers = set(MEMBERSHIP_TIERS) - set(table)
    if missing_tiers:
        raise ConfigurationError(f"Tier table missing tiers: {sorted(missing_tiers)}")

    for tier, limits in table.items():
        if tier not in MEMBERSHIP_TIERS:
            raise ConfigurationError(f"Unknown tier in table: {tier!r}")
        keys = set(limits.features)
        missing = FEATURE_NAMES - keys
        if missing:
            raise ConfigurationError(f"Tier {tier!r} missing features: {sorted(missing)}")
        unknown = keys - FEATURE_NAMES
        if unknown:
            raise ConfigurationError(f"Tier {tier!r} defines unknown features: {sorted(unknown)}")


TIER_LIMITS: Mapping[str, MembershipLimits] = MappingProxyType(
    {
        "free": _FREE,
        "basic": _BASIC,
        "advanced": _ADVANCED,
        "expert": _EXPERT,
        "test": _TEST,
    }
)

validate_tier_table(TIER_LIMITS)


_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "free": "Free Explorer",
        "basic": "Basic Explorer",
        "advanced": "Advanced Explorer",
        "expert": "Expert Explorer",
        "test": "Test User",
    }
)

_PRICES: Mapping[str, float] = MappingProxyType(
    {"free": 0.0, "basic": 29.99, "advanced": 59.99, "expert": 99.99, "test": 0.0}
)


def get_tier_display_name(tier: MembershipTier) -> str:
    return _DISPLAY_NAMES[tier]


def get_tier_price(tier: MembershipTier) -> float:
    return _PRICES[tier]
